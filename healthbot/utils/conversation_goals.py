"""
Conversation goal enum for the health-intake dialogue flow.

Invariants:
- Exactly one goal is active per turn
- Goals advance in GOAL_ORDER; the planner never moves a goal backwards
  except through an explicit conversation reset
- Goal is a hint, field completeness is authoritative: the planner re-checks
  collected fields every turn regardless of the declared goal

Design:
- ConversationGoal is a string-based enum for JSON serialization
- ConversationContext validates goal strings against VALID_GOALS on restore
- ActionPlanner owns all goal transitions
"""

from enum import Enum


class ConversationGoal(str, Enum):
    """
    Intake phase marker for one conversation.

    INITIAL_GREETING:
        Nothing has been said yet. Any first turn leaves this goal.

    COLLECT_SYMPTOMS:
        Waiting for a symptom description.
        Exit: symptoms collected -> COLLECT_DURATION

    COLLECT_DURATION:
        Waiting for how long the symptoms have lasted.
        Exit: duration collected -> COLLECT_SEVERITY

    COLLECT_SEVERITY:
        Waiting for a 0-10 rating or a qualitative severity word.
        Exit: severity collected -> PROVIDE_GUIDANCE

    PROVIDE_GUIDANCE:
        Terminal and re-entrant. Every further turn is answered with
        guidance or detailed next steps.
    """
    INITIAL_GREETING = "initial_greeting"
    COLLECT_SYMPTOMS = "collect_symptoms"
    COLLECT_DURATION = "collect_duration"
    COLLECT_SEVERITY = "collect_severity"
    PROVIDE_GUIDANCE = "provide_guidance"


# Progression order, used to keep goal changes monotonic
GOAL_ORDER = (
    ConversationGoal.INITIAL_GREETING,
    ConversationGoal.COLLECT_SYMPTOMS,
    ConversationGoal.COLLECT_DURATION,
    ConversationGoal.COLLECT_SEVERITY,
    ConversationGoal.PROVIDE_GUIDANCE,
)

# Single source of truth for valid goal strings
VALID_GOALS = {goal.value for goal in ConversationGoal}


def goal_rank(goal: ConversationGoal) -> int:
    """Position of a goal in GOAL_ORDER"""
    return GOAL_ORDER.index(ConversationGoal(goal))


def later_goal(current: ConversationGoal, candidate: ConversationGoal) -> ConversationGoal:
    """
    Return whichever of two goals comes later in the progression.

    Args:
        current: Goal the conversation is in now
        candidate: Goal a planner rule wants to move to

    Returns:
        ConversationGoal: candidate if it is not behind current, else current
    """
    if goal_rank(candidate) >= goal_rank(current):
        return ConversationGoal(candidate)
    return ConversationGoal(current)
