"""
Intent Classifier - One intent label per utterance

Tests the lexicon's intent_precedence list in order and returns the first
intent whose matcher fires. Falls back to general_query.

Precedence matters: "I've had this cough since yesterday" mentions both a
symptom and a time word, and is classified as symptom_description because
symptom_description is ranked above duration_info.

The classify(text, has_greeted) contract is the seam for a future
statistical classifier.
"""

import logging
from typing import Callable, Dict

from healthbot.core.lexical_matcher import LexicalMatcher, normalize
from healthbot.utils.intents import Intent

logger = logging.getLogger(__name__)


class IntentClassifier:
    """Rule-based intent classifier over a LexicalMatcher"""

    def __init__(self, matcher: LexicalMatcher):
        self.matcher = matcher

        # Intent label -> predicate over normalized text
        self._predicates: Dict[Intent, Callable[[str], bool]] = {
            Intent.GREETING: matcher.is_greeting,
            Intent.SYMPTOM_DESCRIPTION: matcher.contains_symptoms,
            Intent.DURATION_INFO: matcher.is_duration_info,
            Intent.SEVERITY_RATING: matcher.contains_severity,
            Intent.MEDICATION_INFO: matcher.contains_medication,
            Intent.ALLERGY_INFO: matcher.contains_allergy,
            Intent.NEXT_STEPS_REQUEST: matcher.is_next_steps_request,
            Intent.MEDICAL_HISTORY: matcher.contains_history,
        }
        self.precedence = [Intent(label) for label in matcher.intent_precedence]

    def classify(self, text: str, has_greeted: bool = False) -> Intent:
        """
        Classify one utterance.

        Args:
            text: Raw or normalized utterance
            has_greeted: Whether this conversation already had its greeting.
                Greetings are only recognized once per conversation.

        Returns:
            Intent: First matching intent in precedence order, or GENERAL_QUERY
        """
        normalized = normalize(text)

        for intent in self.precedence:
            if intent == Intent.GREETING and has_greeted:
                continue
            if self._predicates[intent](normalized):
                logger.debug(f"Classified '{normalized[:40]}' as {intent.value}")
                return intent

        return Intent.GENERAL_QUERY
