"""
Unit tests for Action Planner

Tests each planning rule and goal progression
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from healthbot.core.action_planner import ActionPlanner
from healthbot.core.conversation_state import ConversationContext
from healthbot.utils.conversation_goals import ConversationGoal
from healthbot.utils.intents import Action, Intent


planner = ActionPlanner()


def _context(goal=ConversationGoal.COLLECT_SYMPTOMS, **values):
    context = ConversationContext()
    context.current_goal = goal
    context.has_greeted = goal != ConversationGoal.INITIAL_GREETING
    for name, value in values.items():
        context.set_value(name, value)
    return context


def test_greeting_opens_conversation():
    """Rule 1: greeting -> ask symptoms, rendered as opening, not waiting"""
    context = ConversationContext()
    planned = planner.plan(Intent.GREETING, context)

    assert planned.action == Action.ASK_SYMPTOMS
    assert planned.opening
    assert planned.needs_info is False
    assert planned.info_type is None
    assert context.has_greeted
    assert context.current_goal == ConversationGoal.COLLECT_SYMPTOMS

    print("✓ Greeting opens conversation")


def test_first_turn_without_symptoms_asks_for_them():
    """Rule 1: non-greeting first turn -> ask symptoms and wait"""
    context = ConversationContext()
    planned = planner.plan(Intent.GENERAL_QUERY, context)

    assert planned.action == Action.ASK_SYMPTOMS
    assert not planned.opening
    assert planned.info_type == "symptoms"
    assert context.current_goal == ConversationGoal.COLLECT_SYMPTOMS


def test_volunteered_symptoms_skip_opening():
    """First turn with symptoms goes straight to duration"""
    context = _context(goal=ConversationGoal.INITIAL_GREETING, symptoms="sore throat")
    planned = planner.plan(Intent.SYMPTOM_DESCRIPTION, context, ['symptoms'])

    assert planned.action == Action.ASK_DURATION
    assert planned.info_type == "duration"
    assert planned.newly_collected == ('symptoms',)
    assert context.has_greeted
    assert context.current_goal == ConversationGoal.COLLECT_DURATION

    print("✓ Volunteered symptoms skip the opening")


def test_missing_symptoms_while_collecting():
    """Rule 2"""
    context = _context(severity=9)
    planned = planner.plan(Intent.SEVERITY_RATING, context, ['severity'])

    assert planned.action == Action.ASK_SYMPTOMS
    assert planned.rule == 2
    assert context.current_goal == ConversationGoal.COLLECT_SYMPTOMS


def test_duration_after_symptoms():
    """Rule 3"""
    context = _context(symptoms="dizzy")
    planned = planner.plan(Intent.SYMPTOM_DESCRIPTION, context, ['symptoms'])

    assert planned.action == Action.ASK_DURATION
    assert planned.rule == 3
    assert context.current_goal == ConversationGoal.COLLECT_DURATION


def test_severity_after_duration():
    """Rule 4"""
    context = _context(goal=ConversationGoal.COLLECT_DURATION, symptoms="dizzy", duration="2 days")
    planned = planner.plan(Intent.DURATION_INFO, context, ['duration'])

    assert planned.action == Action.ASK_SEVERITY
    assert planned.info_type == "severity"
    assert planned.rule == 4
    assert context.current_goal == ConversationGoal.COLLECT_SEVERITY


def test_guidance_when_complete():
    """Rule 5: all high-importance fields -> guidance"""
    context = _context(
        goal=ConversationGoal.COLLECT_SEVERITY, symptoms="dizzy", duration="2 days", severity=5
    )
    planned = planner.plan(Intent.SEVERITY_RATING, context, ['severity'])

    assert planned.action == Action.PROVIDE_GUIDANCE
    assert planned.needs_info is False
    assert context.current_goal == ConversationGoal.PROVIDE_GUIDANCE

    print("✓ Guidance after intake")


def test_next_steps_request_gets_detailed_reply():
    context = _context(
        goal=ConversationGoal.PROVIDE_GUIDANCE, symptoms="dizzy", duration="2 days", severity=5
    )
    planned = planner.plan(Intent.NEXT_STEPS_REQUEST, context)

    assert planned.action == Action.PROVIDE_DETAILED_NEXT_STEPS
    assert planned.needs_info is False


def test_severity_before_duration_still_asks_duration():
    """Severity volunteered early: duration still requested, then guidance"""
    context = _context(symptoms="chest pain", severity=7)
    planned = planner.plan(Intent.SYMPTOM_DESCRIPTION, context, ['symptoms'])
    assert planned.action == Action.ASK_DURATION

    context.set_value('duration', "since this morning... about 3 hours")
    planned = planner.plan(Intent.DURATION_INFO, context, ['duration'])
    assert planned.action == Action.PROVIDE_GUIDANCE


def test_ask_more_info_resolves_to_next_field():
    """Rule 6: goal collect_symptoms with symptoms and duration -> severity"""
    context = _context(symptoms="rash", duration="a week")
    planned = planner.plan(Intent.DURATION_INFO, context, ['duration'])

    assert planned.action == Action.ASK_MORE_INFO
    assert planned.resolved_action == Action.ASK_SEVERITY
    assert planned.info_type == "severity"
    assert planned.rule == 6
    assert context.current_goal == ConversationGoal.COLLECT_SEVERITY

    print("✓ ask_more_info resolves to next unmet field")


def test_goal_never_moves_backwards():
    """A late goal is kept even when an earlier field is asked for"""
    context = _context(goal=ConversationGoal.COLLECT_SEVERITY, duration="2 days", severity=5)
    planned = planner.plan(Intent.GENERAL_QUERY, context)

    assert planned.resolved_action == Action.ASK_SYMPTOMS
    assert context.current_goal == ConversationGoal.COLLECT_SEVERITY


if __name__ == '__main__':
    print("\nTesting Action Planner...")
    print("=" * 60)

    test_greeting_opens_conversation()
    test_first_turn_without_symptoms_asks_for_them()
    test_volunteered_symptoms_skip_opening()
    test_missing_symptoms_while_collecting()
    test_duration_after_symptoms()
    test_severity_after_duration()
    test_guidance_when_complete()
    test_next_steps_request_gets_detailed_reply()
    test_severity_before_duration_still_asks_duration()
    test_ask_more_info_resolves_to_next_field()
    test_goal_never_moves_backwards()

    print("=" * 60)
    print("All Action Planner tests passed!\n")
