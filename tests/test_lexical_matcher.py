"""
Unit tests for Lexical Matcher

Tests keyword predicates, severity/address extraction and lexicon validation
"""

import json
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from healthbot.core.lexical_matcher import DEFAULT_LEXICON_PATH, LexicalMatcher, normalize


matcher = LexicalMatcher()


def _write_lexicon(tmp_path, mutate):
    """Copy the packaged lexicon, apply mutate(dict), return new path"""
    with open(DEFAULT_LEXICON_PATH, 'r') as f:
        lexicon = json.load(f)
    mutate(lexicon)
    path = tmp_path / "lexicon.json"
    path.write_text(json.dumps(lexicon))
    return str(path)


# ========================
# Predicates
# ========================

def test_greeting_detection():
    """Greetings match whole words only"""
    assert matcher.is_greeting(normalize("Hi"))
    assert matcher.is_greeting(normalize("Hello there"))
    assert matcher.is_greeting(normalize("Good   morning!"))

    # "hi" inside other words is not a greeting
    assert not matcher.is_greeting("this chest pain is new")
    assert not matcher.is_greeting("which one should i take")

    print("✓ Greeting detection works")


def test_symptom_detection():
    """Symptom keywords match as substrings"""
    assert matcher.contains_symptoms("i have a bad headache")
    assert matcher.contains_symptoms("my knee hurts")
    assert matcher.contains_symptoms("i've been coughing a lot")
    assert not matcher.contains_symptoms("i'm fine thanks")

    print("✓ Symptom detection works")


def test_duration_and_time_units():
    """Duration keywords vs concrete time units"""
    assert matcher.is_duration_info("since yesterday")
    assert matcher.has_time_unit("since yesterday")

    assert matcher.is_duration_info("for three weeks")
    assert matcher.has_time_unit("for three weeks")

    # Asking about duration is not a concrete time reference
    assert matcher.is_duration_info("how long does this usually last")
    assert not matcher.has_time_unit("how long does this usually last")

    print("✓ Duration detection works")


def test_chronic_duration():
    """Weeks, months and years count as chronic"""
    assert matcher.is_chronic_duration("about two weeks")
    assert matcher.is_chronic_duration("for months now")
    assert matcher.is_chronic_duration("over a year")
    assert not matcher.is_chronic_duration("since yesterday")
    assert not matcher.is_chronic_duration("a few hours")

    print("✓ Chronic duration detection works")


def test_contains_severity():
    assert matcher.contains_severity("8")
    assert matcher.contains_severity("maybe a seven")
    assert matcher.contains_severity("it's pretty severe")
    assert not matcher.contains_severity("nothing here")

    print("✓ Severity detection works")


def test_medication_allergy_history():
    assert matcher.contains_medication("i take ibuprofen")
    assert matcher.contains_allergy("i'm allergic to penicillin")
    assert matcher.contains_history("i was diagnosed with asthma")
    assert not matcher.contains_medication("i feel fine")

    print("✓ Medication/allergy/history detection works")


def test_next_steps_request():
    assert matcher.is_next_steps_request("what should i do now?")
    assert matcher.is_next_steps_request("can you recommend something")
    assert matcher.is_next_steps_request("should i see a doctor")
    assert not matcher.is_next_steps_request("thanks")

    print("✓ Next-steps detection works")


def test_provider_lookup_request():
    """Proximity+facility, address+facility, or place+provider"""
    assert matcher.is_provider_lookup_request("find a hospital near 123 main st, houston, tx 77005")
    assert matcher.is_provider_lookup_request("is there a clinic nearby")
    assert matcher.is_provider_lookup_request("what is the address of a good pharmacy")
    assert matcher.is_provider_lookup_request("i need a provider for 77005")

    assert not matcher.is_provider_lookup_request("my doctor said to rest")
    assert not matcher.is_provider_lookup_request("i have a headache")
    # "around" describes where it hurts, not where to search
    assert not matcher.is_provider_lookup_request("i have pain around my chest, should i see a doctor?")

    print("✓ Provider lookup detection works")


# ========================
# Extraction
# ========================

def test_extract_severity_anchors_and_numbers():
    """Numbers map directly, qualitative words map to anchors"""
    assert matcher.extract_severity("severe") == 8
    assert matcher.extract_severity("moderate") == 5
    assert matcher.extract_severity("mild") == 3
    assert matcher.extract_severity("7") == 7
    assert matcher.extract_severity("ten") == 10
    assert matcher.extract_severity("i'd say 8/10") == 8
    assert matcher.extract_severity("no rating here") is None

    print("✓ Severity mapping works")


def test_extract_severity_precedence():
    """Numeric tokens beat qualitative words; first number wins"""
    assert matcher.extract_severity("it's severe, about a 6") == 6
    assert matcher.extract_severity("mild, maybe two") == 2
    assert matcher.extract_severity("a 4, sometimes a 9") == 4

    print("✓ Severity precedence works")


def test_extract_severity_skips_durations():
    """A number attached to a time unit is a duration, not a rating"""
    assert matcher.extract_severity("for 3 days") is None
    assert matcher.extract_severity("for two weeks") is None
    assert matcher.extract_severity("it's a 4 and it started 2 days ago") == 4

    # Ranges
    assert matcher.extract_severity("lasting 3-4 days") is None
    assert matcher.extract_severity("for 2 or 3 weeks") is None
    assert matcher.extract_severity("three to four hours") is None

    # Clock times
    assert matcher.extract_severity("it started at 8 am") is None
    assert matcher.extract_severity("since 5pm") is None
    assert matcher.extract_severity("around 7 p.m. yesterday") is None
    assert matcher.extract_severity("woke up at 6 o'clock") is None
    assert matcher.extract_severity("since 8:30") is None
    assert not matcher.contains_severity("it started at 8 am, lasting 3-4 days")

    # A rating next to a time expression still counts
    assert matcher.extract_severity("started at 8 am, it's a 6") == 6
    assert matcher.extract_severity("a 6 or 7") == 6

    print("✓ Durations are not mistaken for ratings")


def test_extract_address():
    """Street address with city, state and zip"""
    text = "Find a hospital near 123 Main St, Houston, TX 77005"
    assert matcher.extract_address(text) == "123 Main St, Houston, TX 77005"
    assert matcher.extract_address("clinic close to 42 Oak Avenue please") == "42 Oak Avenue"
    assert matcher.extract_address("no address here") is None

    print("✓ Address extraction works")


def test_extract_location_fallbacks():
    """Address, then zip, then the place after near/in"""
    assert matcher.extract_location("Any clinics near Austin?") == "Austin"
    assert matcher.extract_location("providers around 77005") == "77005"
    assert matcher.extract_location("find a doctor near me") is None

    print("✓ Location fallbacks work")


def test_extract_location_skips_non_places():
    """'me'/'here' are dropped; symptom and body-part phrases are not places"""
    assert matcher.extract_location("Is there a clinic near me in Houston?") == "Houston"
    assert matcher.extract_location("any pharmacy near here around Austin") == "Austin"
    assert matcher.extract_location("I have pain around my chest, should I see a doctor?") is None
    assert matcher.extract_location("a sharp ache near my left knee") is None
    assert matcher.extract_location("I'm in pain") is None

    print("✓ Non-place phrases are skipped")


# ========================
# Lexicon loading
# ========================

def test_missing_lexicon_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        LexicalMatcher(str(tmp_path / "nope.json"))


def test_lexicon_missing_key(tmp_path):
    path = _write_lexicon(tmp_path, lambda lex: lex.pop('severity_anchors'))
    with pytest.raises(ValueError, match="severity_anchors"):
        LexicalMatcher(path)


def test_lexicon_bad_match_mode(tmp_path):
    def mutate(lex):
        lex['keyword_sets']['symptom']['match'] = 'fuzzy'
    path = _write_lexicon(tmp_path, mutate)
    with pytest.raises(ValueError, match="invalid match mode"):
        LexicalMatcher(path)


def test_lexicon_unknown_intent(tmp_path):
    path = _write_lexicon(tmp_path, lambda lex: lex['intent_precedence'].append('small_talk'))
    with pytest.raises(ValueError, match="small_talk"):
        LexicalMatcher(path)


def test_lexicon_version_exposed():
    assert matcher.version == "1.1.0"
    assert matcher.intent_precedence[0] == "greeting"


if __name__ == '__main__':
    print("\nTesting Lexical Matcher...")
    print("=" * 60)

    test_greeting_detection()
    test_symptom_detection()
    test_duration_and_time_units()
    test_chronic_duration()
    test_contains_severity()
    test_medication_allergy_history()
    test_next_steps_request()
    test_provider_lookup_request()
    test_extract_severity_anchors_and_numbers()
    test_extract_severity_precedence()
    test_extract_severity_skips_durations()
    test_extract_address()
    test_extract_location_fallbacks()
    test_extract_location_skips_non_places()
    test_lexicon_version_exposed()

    print("=" * 60)
    print("All Lexical Matcher tests passed!\n")
