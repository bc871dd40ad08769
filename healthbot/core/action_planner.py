"""
Action Planner - Goal-driven intake state machine

Responsibilities:
- Choose the next action from (intent, newly collected fields, context)
- Advance the conversation goal
- Encode the intake order: symptoms -> duration -> severity -> guidance

State machine (ConversationGoal):

    initial_greeting --(any first turn)----------> collect_symptoms
    collect_symptoms --(symptoms collected)------> collect_duration
    collect_duration --(duration collected)------> collect_severity
    collect_severity --(severity collected)------> provide_guidance
    provide_guidance --(terminal, re-entrant)

Rules, first applicable wins:
1. Opening turn (greeting intent, or goal still initial_greeting with no
   symptom volunteered) -> ask_symptoms, goal -> collect_symptoms
2. Symptoms missing while collecting symptoms -> ask_symptoms
3. Duration missing after symptoms -> ask_duration, goal -> collect_duration
4. Severity missing after duration -> ask_severity, goal -> collect_severity
5. All high-importance fields collected -> goal -> provide_guidance;
   next_steps_request -> provide_detailed_next_steps, else provide_guidance
6. Fallback ask_more_info, resolved to the next unmet high-importance field
   (or provide_guidance if none is unmet)

Design principles:
- Goal is a hint, field completeness is authoritative (re-checked every turn)
- Goal never moves backwards (see later_goal)
- Only the goal and greeted flag are written here; field values are written
  by the EntityExtractor before planning
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from healthbot.core.conversation_state import ConversationContext
from healthbot.utils.conversation_goals import ConversationGoal, later_goal
from healthbot.utils.intents import ACTION_INFO_TYPE, Action, Intent

logger = logging.getLogger(__name__)

# Field -> ask action / collecting goal
FIELD_ASK_ACTION = {
    'symptoms': Action.ASK_SYMPTOMS,
    'duration': Action.ASK_DURATION,
    'severity': Action.ASK_SEVERITY,
}
FIELD_GOAL = {
    'symptoms': ConversationGoal.COLLECT_SYMPTOMS,
    'duration': ConversationGoal.COLLECT_DURATION,
    'severity': ConversationGoal.COLLECT_SEVERITY,
}


@dataclass(frozen=True)
class PlannedAction:
    """
    Planner decision for one turn.

    Attributes:
        action: Action chosen by the rules
        resolved_action: What ask_more_info resolved to; same as action otherwise
        opening: True for the greeting branch (rendered as a greeting)
        newly_collected: Fields collected on this turn (for acknowledgements)
        rule: Number of the rule that fired (debug only)
    """
    action: Action
    resolved_action: Action
    opening: bool = False
    newly_collected: Tuple[str, ...] = ()
    rule: int = 0

    @property
    def info_type(self) -> Optional[str]:
        """Field the engine is waiting on, if any"""
        if self.opening:
            return None
        return ACTION_INFO_TYPE.get(self.resolved_action)

    @property
    def needs_info(self) -> bool:
        return self.info_type is not None


class ActionPlanner:
    """Stateless planner. All state lives in the ConversationContext argument."""

    def plan(
        self,
        intent: Intent,
        context: ConversationContext,
        newly_collected: Sequence[str] = ()
    ) -> PlannedAction:
        """
        Decide the next action and advance the goal.

        Args:
            intent: Classified intent of the current utterance
            context: Conversation record, already updated with this turn's
                entities (goal/greeted flag are mutated here)
            newly_collected: Fields that became collected on this turn

        Returns:
            PlannedAction
        """
        newly_collected = tuple(newly_collected)
        planned = self._select(intent, context, newly_collected)

        logger.debug(
            f"Conversation {context.conversation_id}: intent={intent.value} "
            f"rule={planned.rule} action={planned.action.value} "
            f"resolved={planned.resolved_action.value} goal={context.current_goal.value}"
        )
        return planned

    def _advance(self, context: ConversationContext, goal: ConversationGoal) -> None:
        context.current_goal = later_goal(context.current_goal, goal)

    def _select(
        self,
        intent: Intent,
        context: ConversationContext,
        newly_collected: Tuple[str, ...]
    ) -> PlannedAction:
        symptoms = context.is_collected('symptoms')
        duration = context.is_collected('duration')
        severity = context.is_collected('severity')

        # Rule 1: opening turn
        opening_turn = context.current_goal == ConversationGoal.INITIAL_GREETING
        if intent == Intent.GREETING or (opening_turn and not symptoms):
            context.has_greeted = True
            self._advance(context, ConversationGoal.COLLECT_SYMPTOMS)
            return PlannedAction(
                action=Action.ASK_SYMPTOMS,
                resolved_action=Action.ASK_SYMPTOMS,
                opening=intent == Intent.GREETING,
                newly_collected=newly_collected,
                rule=1,
            )

        if opening_turn:
            # First turn already described symptoms: leave the greeting phase
            context.has_greeted = True
            self._advance(context, ConversationGoal.COLLECT_SYMPTOMS)

        goal = context.current_goal

        # Rule 2
        if not symptoms and goal == ConversationGoal.COLLECT_SYMPTOMS:
            return self._ask('symptoms', context, newly_collected, rule=2)

        # Rule 3
        if symptoms and not duration and goal in (
            ConversationGoal.COLLECT_SYMPTOMS, ConversationGoal.COLLECT_DURATION
        ):
            return self._ask('duration', context, newly_collected, rule=3)

        # Rule 4
        if symptoms and duration and not severity and goal in (
            ConversationGoal.COLLECT_DURATION, ConversationGoal.COLLECT_SEVERITY
        ):
            return self._ask('severity', context, newly_collected, rule=4)

        # Rule 5
        if context.all_high_importance_collected():
            self._advance(context, ConversationGoal.PROVIDE_GUIDANCE)
            action = (
                Action.PROVIDE_DETAILED_NEXT_STEPS
                if intent == Intent.NEXT_STEPS_REQUEST
                else Action.PROVIDE_GUIDANCE
            )
            return PlannedAction(
                action=action,
                resolved_action=action,
                newly_collected=newly_collected,
                rule=5,
            )

        # Rule 6: fallback
        return self._ask_more_info(context, newly_collected)

    def _ask(
        self,
        field_name: str,
        context: ConversationContext,
        newly_collected: Tuple[str, ...],
        rule: int
    ) -> PlannedAction:
        self._advance(context, FIELD_GOAL[field_name])
        action = FIELD_ASK_ACTION[field_name]
        return PlannedAction(
            action=action,
            resolved_action=action,
            newly_collected=newly_collected,
            rule=rule,
        )

    def _ask_more_info(
        self,
        context: ConversationContext,
        newly_collected: Tuple[str, ...]
    ) -> PlannedAction:
        """Resolve ask_more_info to the next unmet high-importance field"""
        next_field = context.next_unmet_field()

        if next_field is None:
            self._advance(context, ConversationGoal.PROVIDE_GUIDANCE)
            resolved = Action.PROVIDE_GUIDANCE
        else:
            self._advance(context, FIELD_GOAL[next_field])
            resolved = FIELD_ASK_ACTION[next_field]

        return PlannedAction(
            action=Action.ASK_MORE_INFO,
            resolved_action=resolved,
            newly_collected=newly_collected,
            rule=6,
        )
