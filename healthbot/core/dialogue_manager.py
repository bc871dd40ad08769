"""
Dialogue Manager - Health-intake conversation orchestration

Responsibilities:
- Gate requests on API keys (when a key is supplied)
- Route provider-lookup requests to the lookup collaborator
- Run the per-turn pipeline: classify -> extract -> plan -> render
- Reset conversations and expose the credential operations

Design principles:
- Conversation state is external: every call takes a ConversationContext
- One turn is atomic: if the pipeline raises, the context is rolled back
  to its pre-turn snapshot before the error propagates
- Provider lookup runs before any state write and never raises to the caller
- Thin orchestration layer (business logic in specialized modules)
"""

import logging
from typing import Optional, Tuple

from healthbot.contracts import ChatbotResponse, Message
from healthbot.core.action_planner import ActionPlanner
from healthbot.core.conversation_state import ConversationContext
from healthbot.core.credential_gate import ApiKeyRegistry
from healthbot.core.entity_extractor import EntityExtractor
from healthbot.core.intent_classifier import IntentClassifier
from healthbot.core.lexical_matcher import LexicalMatcher, normalize
from healthbot.core.response_generator import ChoiceFn, ResponseGenerator
from healthbot.utils.provider_lookup import ProviderLookupError
from healthbot.utils.response_templates import OPENING_MESSAGE

logger = logging.getLogger(__name__)


class DialogueManager:
    """
    Orchestrates health-intake conversations.

    The manager caches configuration (lexicon, templates, collaborators)
    and the process-wide API key registry. It holds no conversation state.
    """

    def __init__(
        self,
        matcher: Optional[LexicalMatcher] = None,
        provider_lookup=None,
        api_keys: Optional[ApiKeyRegistry] = None,
        choice_fn: Optional[ChoiceFn] = None
    ):
        """
        Args:
            matcher: LexicalMatcher (defaults to the packaged lexicon)
            provider_lookup: Object with find_nearby_providers(location_text).
                None disables provider search.
            api_keys: API key registry (a fresh one by default)
            choice_fn: Template picker passed to the ResponseGenerator

        Raises:
            TypeError: If provider_lookup lacks a callable find_nearby_providers()
        """
        if provider_lookup is not None and not callable(
            getattr(provider_lookup, 'find_nearby_providers', None)
        ):
            raise TypeError("provider_lookup must have callable find_nearby_providers() method")

        self.matcher = matcher or LexicalMatcher()
        self.classifier = IntentClassifier(self.matcher)
        self.extractor = EntityExtractor(self.matcher)
        self.planner = ActionPlanner()
        self.generator = ResponseGenerator(self.matcher, choice_fn=choice_fn)
        self.provider_lookup = provider_lookup
        self.api_keys = api_keys or ApiKeyRegistry()

        logger.info(
            f"Dialogue Manager initialized (lexicon {self.matcher.version}, "
            f"provider lookup {'enabled' if provider_lookup else 'disabled'})"
        )

    # ========================
    # Conversation lifecycle
    # ========================

    def start_conversation(self) -> Tuple[ConversationContext, Message]:
        """
        Create a fresh conversation and its opening assistant message.

        Returns:
            tuple: (ConversationContext, opening Message)
        """
        context = ConversationContext()
        logger.info(f"Started conversation {context.conversation_id}")
        return context, Message(content=OPENING_MESSAGE)

    def reset_conversation(self, context: ConversationContext) -> None:
        context.reset()

    def process_message(
        self,
        user_text: str,
        context: ConversationContext,
        api_key: Optional[str] = None
    ) -> ChatbotResponse:
        """
        Process one user message.

        Args:
            user_text: Raw user utterance
            context: Conversation record (mutated in place)
            api_key: Optional API key. If supplied and invalid, the turn is
                rejected without touching the conversation.

        Returns:
            ChatbotResponse with:
            - message: assistant reply
            - needs_info: whether an intake field is being requested
            - info_type: 'symptoms' | 'duration' | 'severity' | None
        """
        if api_key is not None and not self.api_keys.validate_api_key(api_key):
            return ChatbotResponse(message=Message(content=self.generator.render_invalid_api_key()))

        normalized = normalize(user_text)
        if self.matcher.is_provider_lookup_request(normalized):
            location = self.matcher.extract_location(user_text)
            # "pain near my chest, should I see a doctor?" is a symptom report
            if location is not None or not self.matcher.contains_symptoms(normalized):
                return self._handle_provider_lookup(location, context)

        snapshot = context.snapshot_state()
        try:
            intent = self.classifier.classify(user_text, has_greeted=context.has_greeted)
            entities = self.extractor.extract(user_text)
            newly_collected = self.extractor.apply(entities, context)
            planned = self.planner.plan(intent, context, newly_collected)
            content = self.generator.render(planned, context)
        except Exception:
            context.restore_state(snapshot)
            logger.error(f"Conversation {context.conversation_id}: turn failed, state rolled back")
            raise

        context.touch()
        logger.info(
            f"Conversation {context.conversation_id}: {intent.value} -> "
            f"{planned.resolved_action.value} (goal {context.current_goal.value})"
        )

        return ChatbotResponse(
            message=Message(content=content),
            needs_info=planned.needs_info,
            info_type=planned.info_type,
        )

    def _handle_provider_lookup(
        self,
        location: Optional[str],
        context: ConversationContext
    ) -> ChatbotResponse:
        """
        Provider search branch (outside the intake state machine).

        The conversation is only touched (timestamp) after a successful
        lookup. Failures are logged and answered with an apology.
        """
        if location is None:
            context.touch()
            return ChatbotResponse(message=Message(content=self.generator.render_provider_need_location()))

        if self.provider_lookup is None:
            logger.warning("Provider lookup requested but no lookup service is configured")
            return ChatbotResponse(message=Message(content=self.generator.render_provider_lookup_failed()))

        try:
            providers = list(self.provider_lookup.find_nearby_providers(location))
        except ProviderLookupError as e:
            logger.error(f"Provider lookup failed for '{location}': {e}")
            return ChatbotResponse(message=Message(content=self.generator.render_provider_lookup_failed()))
        except Exception as e:
            logger.error(f"Unexpected provider lookup error for '{location}': {e}", exc_info=True)
            return ChatbotResponse(message=Message(content=self.generator.render_provider_lookup_failed()))

        context.touch()
        return ChatbotResponse(
            message=Message(
                content=self.generator.render_provider_results(location, providers),
                attachments=tuple(providers),
            )
        )

    # ========================
    # Credentials
    # ========================

    def generate_api_key(self, role) -> str:
        return self.api_keys.generate_api_key(role)

    def validate_api_key(self, key: str) -> bool:
        return self.api_keys.validate_api_key(key)

    def revoke_api_key(self, key: str) -> bool:
        return self.api_keys.revoke_api_key(key)

    def has_permission(self, name: str) -> bool:
        return self.api_keys.has_permission(name)
