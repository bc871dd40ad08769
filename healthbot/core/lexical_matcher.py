"""
Lexical Matcher - Keyword and pattern predicates over user utterances

Responsibilities:
- Load and validate the versioned keyword lexicon (lexicon.json)
- Answer yes/no questions about an utterance (greeting? symptom? duration? ...)
- Extract raw values: severity rating, street address, zip code, location phrase

Design principles:
- Stateless: all inputs come from method parameters
- Pure predicates: same text always produces the same answer
- Keyword sets are configuration, not code (swap lexicon.json to change behavior)
- Fail fast: validate lexicon on initialization

Normalization:
- Predicates expect normalized text (see normalize())
- Extraction of addresses and locations works on raw text so the caller
  keeps the user's capitalization
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from healthbot.utils.intents import RANKABLE_INTENTS

logger = logging.getLogger(__name__)

DEFAULT_LEXICON_PATH = Path(__file__).resolve().parent.parent / "data" / "lexicon.json"

MATCH_WORD = "word"
MATCH_SUBSTRING = "substring"
VALID_MATCH_MODES = {MATCH_WORD, MATCH_SUBSTRING}

REQUIRED_KEYWORD_SETS = (
    "greeting",
    "symptom",
    "duration",
    "time_unit",
    "chronic_duration",
    "medication",
    "allergy",
    "history",
    "next_steps",
    "proximity",
    "facility",
    "body_part",
    "severity_qualifier",
)

# Street address: "<number> <words> <suffix>[, city][, state][ zip]"
STREET_SUFFIXES = (
    "street", "st", "avenue", "ave", "road", "rd", "boulevard", "blvd", "drive", "dr",
    "lane", "ln", "way", "court", "ct", "place", "pl", "parkway", "pkwy", "highway", "hwy",
)
ADDRESS_PATTERN = re.compile(
    r"\b\d+\s+(?:[a-z0-9.'-]+\s+){0,4}?(?:" + "|".join(STREET_SUFFIXES) + r")\b\.?"
    r"(?:\s*,\s*[a-z][a-z .]*[a-z.])*"
    r"(?:\s*,?\s*\d{5}(?:-\d{4})?)?",
    re.IGNORECASE,
)
ZIP_PATTERN = re.compile(r"\b\d{5}(?:-\d{4})?\b")
# "near"/"around" name a place more reliably than "in" ("I'm in pain")
NEAR_PHRASE_PATTERNS = tuple(
    re.compile(r"\b(?:" + prefix + r")\s+([a-z][a-z .'-]*?)\s*(?:[?.!,;]|$)", re.IGNORECASE)
    for prefix in ("near|around", "in")
)
# Phrases that follow "near"/"in" but do not name a place
NON_LOCATIONS = {"me", "here", "my area", "my location", "the area", "this area", "town"}
# "near me in Houston" -> "Houston"
LEADING_NON_LOCATION = re.compile(
    r"^(?:my location|me|here)\s+(?:(?:in|at|around|near)\s+)?",
    re.IGNORECASE,
)

TIME_UNITS = ("minute", "hour", "day", "week", "month", "year")


def normalize(text: str) -> str:
    """Case-fold and trim an utterance for matching"""
    return (text or "").strip().lower()


class LexicalMatcher:
    """
    Keyword/regex predicates driven by lexicon.json.

    Does not hold any conversation state. One instance can serve every
    conversation in the process.
    """

    def __init__(self, lexicon_path: Optional[str] = None):
        """
        Initialize matcher with a lexicon file.

        Args:
            lexicon_path: Path to lexicon.json (defaults to the packaged lexicon)

        Raises:
            FileNotFoundError: If lexicon doesn't exist
            ValueError: If lexicon is missing required keys or has bad values
        """
        self.lexicon_path = Path(lexicon_path) if lexicon_path else DEFAULT_LEXICON_PATH

        if not self.lexicon_path.exists():
            raise FileNotFoundError(f"Lexicon not found: {self.lexicon_path}")

        with open(self.lexicon_path, 'r') as f:
            self.lexicon = json.load(f)

        self._validate_lexicon()

        self.version = self.lexicon["version"]
        self.keyword_sets: Dict[str, dict] = self.lexicon["keyword_sets"]
        self.number_words: Dict[str, int] = self.lexicon["number_words"]
        self.severity_anchors: Dict[str, int] = self.lexicon["severity_anchors"]
        self.intent_precedence: List[str] = list(self.lexicon["intent_precedence"])

        # Word-mode sets are matched with compiled whole-word patterns
        self._word_patterns = {
            name: self._compile_word_pattern(entry["keywords"])
            for name, entry in self.keyword_sets.items()
            if entry["match"] == MATCH_WORD
        }
        self._rating_pattern = self._compile_rating_pattern()

        logger.info(
            f"Lexical Matcher initialized (lexicon version {self.version}, "
            f"{len(self.keyword_sets)} keyword sets)"
        )

    # ========================
    # Lexicon loading
    # ========================

    def _validate_lexicon(self) -> None:
        """
        Check lexicon structure.

        Raises:
            ValueError: On the first structural problem found
        """
        for key in ("version", "keyword_sets", "number_words", "severity_anchors", "intent_precedence"):
            if key not in self.lexicon:
                raise ValueError(f"Lexicon missing required key: '{key}'")

        keyword_sets = self.lexicon["keyword_sets"]
        missing = [name for name in REQUIRED_KEYWORD_SETS if name not in keyword_sets]
        if missing:
            raise ValueError(f"Lexicon missing keyword sets: {missing}")

        for name, entry in keyword_sets.items():
            if entry.get("match") not in VALID_MATCH_MODES:
                raise ValueError(
                    f"Keyword set '{name}' has invalid match mode '{entry.get('match')}'. "
                    f"Must be one of: {sorted(VALID_MATCH_MODES)}"
                )
            if not isinstance(entry.get("keywords"), list) or not entry["keywords"]:
                raise ValueError(f"Keyword set '{name}' must have a non-empty keywords list")

        # Severity extraction needs the matched word itself, not just a hit
        if keyword_sets["severity_qualifier"]["match"] != MATCH_WORD:
            raise ValueError("Keyword set 'severity_qualifier' must use 'word' match mode")

        for word, value in self.lexicon["number_words"].items():
            if not isinstance(value, int) or not 0 <= value <= 10:
                raise ValueError(f"Number word '{word}' must map to an integer 0-10")

        for word in ("severe", "moderate", "mild"):
            if word not in self.lexicon["severity_anchors"]:
                raise ValueError(f"Severity anchors missing '{word}'")

        for label in self.lexicon["intent_precedence"]:
            if label not in RANKABLE_INTENTS:
                raise ValueError(f"Unknown intent in intent_precedence: '{label}'")

    @staticmethod
    def _compile_word_pattern(keywords: List[str]) -> re.Pattern:
        """Whole-word alternation; multi-word phrases tolerate any whitespace"""
        alternatives = sorted(
            (r"\s+".join(re.escape(part) for part in kw.split()) for kw in keywords),
            key=len,
            reverse=True,
        )
        return re.compile(r"\b(?:" + "|".join(alternatives) + r")\b")

    def _compile_rating_pattern(self) -> re.Pattern:
        """
        Pattern for a numeric 0-10 token or a number word.

        Skipped, since they describe time rather than a rating:
        - a number followed by a time unit ("3 days")
        - the first number of a range ("3-4 days", "2 or 3 weeks")
        - clock times ("8 am", "5 p.m.", "7 o'clock", "8:30")
        """
        words = sorted(self.number_words, key=len, reverse=True)
        number = r"(?:10|[0-9]|" + "|".join(re.escape(w) for w in words) + r")"
        unit = r"(?:" + "|".join(re.escape(u) for u in TIME_UNITS) + r")s?\b"
        clock = r"(?:[ap]\.?m\b\.?|o'?clock\b|:\d)"
        return re.compile(
            r"\b(" + number + r")\b"
            r"(?!\s*" + unit + r")"
            r"(?!\s*(?:-|to|or)\s*" + number + r"\s*" + unit + r")"
            r"(?!\s*" + clock + r")"
        )

    # ========================
    # Generic matching
    # ========================

    def matches(self, set_name: str, text: str) -> bool:
        """
        True if text contains any keyword of the named set.

        Args:
            set_name: Keyword set name from lexicon.json
            text: Normalized utterance

        Raises:
            KeyError: If set_name is not in the lexicon
        """
        entry = self.keyword_sets[set_name]
        if entry["match"] == MATCH_WORD:
            return self._word_patterns[set_name].search(text) is not None
        return any(keyword in text for keyword in entry["keywords"])

    # ========================
    # Predicates
    # ========================

    def is_greeting(self, text: str) -> bool:
        return self.matches("greeting", text)

    def contains_symptoms(self, text: str) -> bool:
        return self.matches("symptom", text)

    def is_duration_info(self, text: str) -> bool:
        return self.matches("duration", text)

    def has_time_unit(self, text: str) -> bool:
        """True only for a concrete time reference (not just "since" or "how long")"""
        return self.matches("time_unit", text)

    def is_chronic_duration(self, text: str) -> bool:
        return self.matches("chronic_duration", text)

    def contains_severity(self, text: str) -> bool:
        return (
            self._rating_pattern.search(text) is not None
            or self.matches("severity_qualifier", text)
        )

    def contains_medication(self, text: str) -> bool:
        return self.matches("medication", text)

    def contains_allergy(self, text: str) -> bool:
        return self.matches("allergy", text)

    def contains_history(self, text: str) -> bool:
        return self.matches("history", text)

    def is_next_steps_request(self, text: str) -> bool:
        return self.matches("next_steps", text)

    def is_provider_lookup_request(self, text: str) -> bool:
        """
        True when the user is asking for nearby healthcare facilities.

        Any of:
        - a proximity word together with a facility word ("clinic near me")
        - "address" together with a facility word
        - a street address or 5-digit zip together with the word "provider"
        """
        has_facility = self.matches("facility", text)
        if has_facility and self.matches("proximity", text):
            return True
        if has_facility and "address" in text:
            return True
        has_place = ADDRESS_PATTERN.search(text) is not None or ZIP_PATTERN.search(text) is not None
        return has_place and "provider" in text

    # ========================
    # Extraction
    # ========================

    def extract_severity(self, text: str) -> Optional[int]:
        """
        Extract a 0-10 severity rating.

        The first numeric or number-word token wins. Without one, the first
        qualitative word maps to its anchor (severe/moderate/mild).

        Args:
            text: Normalized utterance

        Returns:
            int 0-10, or None if the utterance has no severity information

        Examples:
            >>> matcher.extract_severity("about a 7")
            7
            >>> matcher.extract_severity("it's severe, maybe ten")
            10
            >>> matcher.extract_severity("pretty mild")
            3
        """
        rating = self._rating_pattern.search(text)
        if rating:
            token = rating.group(1)
            if token.isdigit():
                return int(token)
            return self.number_words[token]

        qualifier = self._word_patterns["severity_qualifier"].search(text)
        if qualifier:
            return self.severity_anchors[qualifier.group(0)]
        return None

    def extract_address(self, raw_text: str) -> Optional[str]:
        """First street address in the text, or None"""
        match = ADDRESS_PATTERN.search(raw_text or "")
        if match:
            return match.group(0).strip(" ,.")
        return None

    def extract_zip_code(self, raw_text: str) -> Optional[str]:
        match = ZIP_PATTERN.search(raw_text or "")
        return match.group(0) if match else None

    def extract_location(self, raw_text: str) -> Optional[str]:
        """
        Best location string for a provider search.

        Tries, in order: street address, zip code, the place named after
        "near"/"around"/"in". A leading "me"/"here" is dropped from the
        phrase ("near me in Houston" -> "Houston"); a phrase that mentions a
        symptom or body part ("pain around my chest") is not a place.

        Returns:
            Location text, or None if the user didn't say where
        """
        address = self.extract_address(raw_text)
        if address:
            return address

        zip_code = self.extract_zip_code(raw_text)
        if zip_code:
            return zip_code

        for pattern in NEAR_PHRASE_PATTERNS:
            for match in pattern.finditer(raw_text or ""):
                place = LEADING_NON_LOCATION.sub("", match.group(1).strip())
                if self._is_place(place):
                    return place
        return None

    def _is_place(self, phrase: str) -> bool:
        lowered = normalize(phrase)
        if not lowered or lowered in NON_LOCATIONS:
            return False
        return not (self.contains_symptoms(lowered) or self.matches("body_part", lowered))
