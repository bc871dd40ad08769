"""
Response Generator - Render planned actions as message text

Responsibilities:
- Render ask prompts with acknowledgements for freshly collected fields
- Pick a guidance bucket from severity and duration
- Compose randomized guidance (bucket template + next-steps template + closing)
- Compose the deterministic detailed next-steps reply
- Render provider lookup results and system messages

Randomness:
- Every random pick goes through choice_fn (default random.choice)
- Tests inject a deterministic picker, e.g. lambda options: options[0]
"""

import logging
import random
from typing import Callable, List, Optional, Sequence

from healthbot.contracts import ProviderRecord
from healthbot.core.action_planner import PlannedAction
from healthbot.core.conversation_state import FIELD_IMPORTANCE, ConversationContext
from healthbot.core.lexical_matcher import LexicalMatcher, normalize
from healthbot.utils import response_templates as templates
from healthbot.utils.intents import ACTION_INFO_TYPE, Action
from healthbot.utils.response_templates import GuidanceBucket

logger = logging.getLogger(__name__)

ChoiceFn = Callable[[Sequence[str]], str]


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _numbered(items: List[str]) -> str:
    return "\n".join(f"{index}. {item}" for index, item in enumerate(items, start=1))


class ResponseGenerator:
    """Turns PlannedActions into assistant message text"""

    def __init__(self, matcher: LexicalMatcher, choice_fn: Optional[ChoiceFn] = None):
        """
        Args:
            matcher: Used for the chronic-duration check on duration text
            choice_fn: Picks one template from a list (default random.choice)
        """
        self.matcher = matcher
        self.choice_fn = choice_fn or random.choice

    # ========================
    # Entry point
    # ========================

    def render(self, planned: PlannedAction, context: ConversationContext) -> str:
        """
        Render one planned action.

        Args:
            planned: Planner decision for this turn
            context: Conversation record (read only)

        Returns:
            str: Message text
        """
        if planned.opening:
            return self.render_opening()

        resolved = planned.resolved_action
        acknowledgement = self._acknowledgement(planned.newly_collected)

        if resolved == Action.PROVIDE_DETAILED_NEXT_STEPS:
            return self.render_detailed_next_steps(context)

        if resolved == Action.PROVIDE_GUIDANCE:
            return self._join(acknowledgement, self.render_guidance(context))

        prompt = templates.INFO_PROMPTS[ACTION_INFO_TYPE[resolved]]
        if planned.action == Action.ASK_MORE_INFO and not acknowledgement:
            acknowledgement = templates.MORE_INFO_PREFIX
        return self._join(acknowledgement, prompt)

    def render_opening(self) -> str:
        return f"{self.choice_fn(templates.GREETINGS)} {self.choice_fn(templates.FOLLOW_UPS)}"

    @staticmethod
    def _join(prefix: Optional[str], body: str) -> str:
        return f"{prefix} {body}" if prefix else body

    @staticmethod
    def _acknowledgement(newly_collected: Sequence[str]) -> Optional[str]:
        """Acknowledgement for the first freshly collected field, in field order"""
        for name in FIELD_IMPORTANCE:
            if name in newly_collected:
                return templates.ACKNOWLEDGEMENTS[name]
        return None

    # ========================
    # Guidance
    # ========================

    def select_bucket(self, context: ConversationContext) -> GuidanceBucket:
        """
        Pick the guidance bucket.

        Chronic duration (week/month/year in the duration text) wins over
        severity. Otherwise: >= 7 urgent, 4-6 moderate, else mild.
        """
        duration = context.get_value('duration')
        if duration and self.matcher.is_chronic_duration(normalize(str(duration))):
            return GuidanceBucket.FOLLOW_UP

        severity = context.get_value('severity')
        if isinstance(severity, int):
            if severity >= templates.URGENT_THRESHOLD:
                return GuidanceBucket.URGENT
            if severity >= templates.MODERATE_THRESHOLD:
                return GuidanceBucket.MODERATE
        return GuidanceBucket.MILD

    def render_guidance(self, context: ConversationContext) -> str:
        bucket = self.select_bucket(context)
        logger.debug(f"Conversation {context.conversation_id}: guidance bucket {bucket.value}")

        recommendation = self.choice_fn(templates.GUIDANCE_TEMPLATES[bucket]).format(
            severity=context.get_value('severity'),
            duration_phrase=self._duration_phrase(context),
        )
        next_step = self.choice_fn(templates.NEXT_STEPS_TEMPLATES)
        return f"{recommendation} {next_step}\n\n{templates.GUIDANCE_CLOSING}"

    @staticmethod
    def _duration_phrase(context: ConversationContext) -> str:
        duration = context.get_value('duration')
        return f"a while (\"{duration}\")" if duration else "a while"

    def render_detailed_next_steps(self, context: ConversationContext) -> str:
        """Deterministic multi-section next-steps reply"""
        bucket = self.select_bucket(context)
        symptoms = context.get_value('symptoms') or templates.NOT_PROVIDED
        duration = context.get_value('duration') or templates.NOT_PROVIDED
        severity = context.get_value('severity')
        severity_text = severity if severity is not None else "?"

        values = {
            'symptoms': symptoms,
            'duration': duration,
            'severity': severity_text,
            'medications': context.get_value('medications') or templates.NOT_PROVIDED,
            'allergies': context.get_value('allergies') or templates.NOT_PROVIDED,
        }

        return templates.DETAILED_NEXT_STEPS_TEMPLATE.format(
            urgency=templates.URGENCY_FRAMING[bucket].format(**values),
            documentation=_bullets(templates.DOCUMENTATION_ADVICE),
            appointment_prep=_numbered([line.format(**values) for line in templates.APPOINTMENT_PREP]),
            self_care=_bullets(templates.SELF_CARE),
            warning_signs=_bullets(self.warning_signs_for(str(symptoms))),
        )

    @staticmethod
    def warning_signs_for(symptom_text: str) -> List[str]:
        """Warning signs for the first body area mentioned, else the generic list"""
        lowered = normalize(symptom_text)
        for keyword, signs in templates.WARNING_SIGNS:
            if keyword in lowered:
                return list(signs)
        return list(templates.GENERIC_WARNING_SIGNS)

    # ========================
    # System messages
    # ========================

    @staticmethod
    def render_invalid_api_key() -> str:
        return templates.INVALID_API_KEY_MESSAGE

    @staticmethod
    def render_provider_results(location: str, providers: Sequence[ProviderRecord]) -> str:
        if not providers:
            return templates.PROVIDER_NO_RESULTS_MESSAGE.format(location=location)
        return templates.PROVIDER_RESULTS_MESSAGE.format(count=len(providers), location=location)

    @staticmethod
    def render_provider_need_location() -> str:
        return templates.PROVIDER_NEED_LOCATION_MESSAGE

    @staticmethod
    def render_provider_lookup_failed() -> str:
        return templates.PROVIDER_LOOKUP_FAILED_MESSAGE
