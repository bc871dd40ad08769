"""
Intent, action and role identifiers.

All identifiers are string-based enums so they serialize to JSON unchanged
and can be compared against the labels stored in lexicon.json.
"""

from enum import Enum


class Intent(str, Enum):
    """Single classified purpose of one user utterance."""
    GREETING = "greeting"
    SYMPTOM_DESCRIPTION = "symptom_description"
    DURATION_INFO = "duration_info"
    SEVERITY_RATING = "severity_rating"
    MEDICATION_INFO = "medication_info"
    ALLERGY_INFO = "allergy_info"
    NEXT_STEPS_REQUEST = "next_steps_request"
    MEDICAL_HISTORY = "medical_history"
    GENERAL_QUERY = "general_query"


class Action(str, Enum):
    """Discrete next step chosen by the ActionPlanner."""
    ASK_SYMPTOMS = "ask_symptoms"
    ASK_DURATION = "ask_duration"
    ASK_SEVERITY = "ask_severity"
    PROVIDE_GUIDANCE = "provide_guidance"
    PROVIDE_DETAILED_NEXT_STEPS = "provide_detailed_next_steps"
    ASK_MORE_INFO = "ask_more_info"


class Role(str, Enum):
    """API key roles."""
    PATIENT = "patient"
    PROVIDER = "provider"


# Intents that may appear in lexicon.json's intent_precedence.
# GENERAL_QUERY is the implicit default and is never listed.
RANKABLE_INTENTS = {intent.value for intent in Intent} - {Intent.GENERAL_QUERY.value}

# Field each ask action is waiting on (reported to callers as info_type)
ACTION_INFO_TYPE = {
    Action.ASK_SYMPTOMS: "symptoms",
    Action.ASK_DURATION: "duration",
    Action.ASK_SEVERITY: "severity",
}
