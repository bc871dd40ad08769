"""
Entity Extractor - Typed values from one utterance

Responsibilities:
- Scan an utterance for symptom text, duration text, a 0-10 severity rating
  and medium-importance mentions (medications, allergies, history)
- Write extracted values into a ConversationContext

Extraction runs independently of the classified intent: a symptom
description that also mentions "since yesterday" fills both fields.

Rules:
- symptoms / medications / allergies / history: the whole utterance is
  stored when the matching keyword set fires
- duration: the whole utterance is stored when a duration keyword fires,
  but the field only counts as collected when a concrete time unit is
  present ("how long does it last?" stores text, does not collect).
  Vague text never overwrites a concrete duration.
- severity: first number token or number word wins; without one,
  severe/moderate/mild map to their anchors
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from healthbot.core.conversation_state import ConversationContext
from healthbot.core.lexical_matcher import LexicalMatcher, normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractedEntities:
    """Values found in one utterance. None means "not mentioned"."""
    symptoms: Optional[str] = None
    duration: Optional[str] = None
    duration_is_concrete: bool = False
    severity: Optional[int] = None
    medications: Optional[str] = None
    allergies: Optional[str] = None
    history: Optional[str] = None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.symptoms, self.duration, self.severity,
                          self.medications, self.allergies, self.history)
        )


class EntityExtractor:
    """Keyword-driven extractor over a LexicalMatcher"""

    def __init__(self, matcher: LexicalMatcher):
        self.matcher = matcher

    def extract(self, text: str) -> ExtractedEntities:
        """
        Extract entities from one utterance.

        Args:
            text: Raw user utterance (stored values keep the user's wording)

        Returns:
            ExtractedEntities
        """
        raw = (text or "").strip()
        normalized = normalize(raw)

        is_duration = self.matcher.is_duration_info(normalized)

        return ExtractedEntities(
            symptoms=raw if self.matcher.contains_symptoms(normalized) else None,
            duration=raw if is_duration else None,
            duration_is_concrete=is_duration and self.matcher.has_time_unit(normalized),
            severity=self.matcher.extract_severity(normalized),
            medications=raw if self.matcher.contains_medication(normalized) else None,
            allergies=raw if self.matcher.contains_allergy(normalized) else None,
            history=raw if self.matcher.contains_history(normalized) else None,
        )

    def apply(self, entities: ExtractedEntities, context: ConversationContext) -> List[str]:
        """
        Write extracted entities into the conversation record.

        Args:
            entities: Output of extract()
            context: Conversation to update (mutated in place)

        Returns:
            list: Names of fields that became collected on this call
        """
        before = set(context.collected_fields())

        if entities.symptoms is not None:
            context.set_value('symptoms', entities.symptoms)

        # A vague mention never replaces a concrete duration already collected
        if entities.duration is not None and (
            entities.duration_is_concrete or not context.is_collected('duration')
        ):
            context.set_value('duration', entities.duration, collected=entities.duration_is_concrete)

        if entities.severity is not None:
            context.set_value('severity', entities.severity)

        for name in ('medications', 'allergies', 'history'):
            value = getattr(entities, name)
            if value is not None:
                context.set_value(name, value)

        newly_collected = [name for name in context.collected_fields() if name not in before]
        if newly_collected:
            logger.debug(f"Conversation {context.conversation_id}: newly collected {newly_collected}")
        return newly_collected
