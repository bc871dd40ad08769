"""
Response Template Registry

Static text used by the Response Generator.

Template groups:
- Opening: greeting + follow-up phrasings (one of each picked at random)
- Intake prompts: one fixed prompt per high-importance field
- Acknowledgements: prefix used when a field was collected on this turn
- Guidance buckets: randomized recommendations keyed by GuidanceBucket
- Next steps: generic recommendations appended to every guidance reply
- Detailed next steps: section text for the deterministic structured reply
- Warning signs: keyword -> list of red-flag symptoms
- System messages: credential and provider-lookup replies

Placeholders use {placeholder_name} format for str.format().
"""

from enum import Enum
from typing import Dict, List, Tuple


class GuidanceBucket(str, Enum):
    """
    Guidance phrasing bucket.

    URGENT: severity >= 7
    MODERATE: severity 4-6
    MILD: severity below 4 or unknown
    FOLLOW_UP: symptoms lasting weeks/months/years (overrides severity)
    """
    URGENT = "urgent"
    MODERATE = "moderate"
    MILD = "mild"
    FOLLOW_UP = "followUp"


URGENT_THRESHOLD = 7
MODERATE_THRESHOLD = 4


# ========================
# Opening
# ========================

OPENING_MESSAGE = "Hello! I'm your healthcare assistant. How can I help you today?"

GREETINGS: List[str] = [
    "Hello! I'm your healthcare assistant. How are you feeling today?",
    "Hi there! I'm here to help with your healthcare needs. How can I assist you today?",
    "Good day! I'm your AI healthcare companion. How are you doing today?",
    "Welcome! I'm here to support your healthcare journey. How are you feeling?",
]

FOLLOW_UPS: List[str] = [
    "Could you tell me more about any symptoms you're experiencing?",
    "Have you noticed any changes in your health recently?",
    "Is there anything specific you'd like to discuss about your health today?",
    "What brings you to our healthcare service today?",
]


# ========================
# Intake prompts
# ========================

INFO_PROMPTS: Dict[str, str] = {
    'symptoms': "Could you describe any symptoms you're experiencing in detail?",
    'duration': "How long have you been experiencing these symptoms?",
    'severity': "On a scale of 1-10, how would you rate the severity of your symptoms?",
    'history': "Do you have any relevant medical history related to these symptoms?",
    'medications': "Are you currently taking any medications?",
    'allergies': "Do you have any known allergies?",
}

ACKNOWLEDGEMENTS: Dict[str, str] = {
    'symptoms': "Thank you for sharing that information.",
    'duration': "I understand.",
    'severity': "Thank you for providing that information.",
    'history': "Thank you, I've noted your medical history.",
    'medications': "Thanks for letting me know about your medications.",
    'allergies': "I've noted your allergies.",
}

MORE_INFO_PREFIX = (
    "I appreciate you sharing that information. "
    "To give you more personalized guidance, I need a little more detail."
)


# ========================
# Guidance
# ========================

GUIDANCE_TEMPLATES: Dict[GuidanceBucket, List[str]] = {
    GuidanceBucket.URGENT: [
        "A severity of {severity} out of 10 is high. Please consider contacting a healthcare provider today, "
        "or visit urgent care if your symptoms get worse.",
        "Symptoms rated {severity} out of 10 deserve prompt attention. I recommend speaking with a doctor "
        "as soon as possible rather than waiting to see if they pass.",
        "Because you rated your symptoms at {severity} out of 10, it would be safest to get medical advice "
        "today. If you experience any sudden worsening, seek emergency care.",
    ],
    GuidanceBucket.MODERATE: [
        "With a severity of {severity} out of 10, it would be a good idea to book an appointment with "
        "your primary care physician in the next few days.",
        "Moderate symptoms like these are worth discussing with a healthcare professional soon, "
        "especially if they are not improving.",
        "A rating of {severity} out of 10 suggests you should keep a close eye on things and arrange "
        "a consultation if there's no improvement within 48 hours.",
    ],
    GuidanceBucket.MILD: [
        "Your symptoms sound mild for now. Rest, fluids and monitoring are a sensible first step.",
        "Since the severity is low, home care may be enough, but contact a healthcare provider if "
        "anything changes or new symptoms appear.",
        "Mild symptoms often improve on their own. Keep track of how you feel over the next few days.",
    ],
    GuidanceBucket.FOLLOW_UP: [
        "Because you've had these symptoms for {duration_phrase}, I'd recommend scheduling a follow-up "
        "with your doctor so they can look into what's causing them.",
        "Symptoms that have lasted {duration_phrase} should be reviewed by a healthcare professional, "
        "even if they feel manageable day to day.",
        "Long-lasting symptoms are worth a proper check-up. Please book a visit with your primary care "
        "physician to discuss them.",
    ],
}

NEXT_STEPS_TEMPLATES: List[str] = [
    "Based on what you've shared, I recommend scheduling a consultation with your primary care "
    "physician to discuss these symptoms in more detail.",
    "Your symptoms suggest you might benefit from speaking with a healthcare professional. "
    "Consider booking an appointment in the next few days.",
    "I'd advise you to monitor these symptoms for the next 24-48 hours. If they persist or worsen, "
    "please contact your healthcare provider immediately.",
    "Given what you've described, it would be best to speak with a specialist. Would you like "
    "information on how to find the right specialist for your concerns?",
]

GUIDANCE_CLOSING = "Is there anything specific you'd like me to explain further about what you should do next?"


# ========================
# Detailed next steps
# ========================

URGENCY_FRAMING: Dict[GuidanceBucket, str] = {
    GuidanceBucket.URGENT: (
        "Given a severity of {severity}/10, please contact a healthcare provider today. "
        "If symptoms escalate quickly, go to the nearest emergency room."
    ),
    GuidanceBucket.MODERATE: (
        "With a severity of {severity}/10, aim to see your primary care provider within the next 24-48 hours."
    ),
    GuidanceBucket.MILD: (
        "With a severity of {severity}/10, you can likely start with self-care, "
        "but book an appointment if things don't improve within a few days."
    ),
    GuidanceBucket.FOLLOW_UP: (
        "Because your symptoms have lasted {duration}, schedule a follow-up with your doctor "
        "in the coming week, even though the severity is {severity}/10."
    ),
}

DOCUMENTATION_ADVICE: List[str] = [
    "Write down when each symptom started and any changes since then",
    "Note what makes the symptoms better or worse",
    "Record your severity rating once or twice a day",
]

APPOINTMENT_PREP: List[str] = [
    "Your symptoms: \"{symptoms}\"",
    "How long you've had them: \"{duration}\"",
    "Current severity: {severity}/10",
    "A list of medications you take: {medications}",
    "Any known allergies: {allergies}",
]

SELF_CARE: List[str] = [
    "Stay hydrated and get adequate rest",
    "Avoid strenuous activity until you feel better",
    "Use over-the-counter remedies only as directed on the label",
]

# Keyword found in the symptom text -> warning signs
WARNING_SIGNS: Tuple[Tuple[str, List[str]], ...] = (
    ("head", [
        "Sudden, severe headache unlike any you've had before",
        "Confusion, slurred speech or trouble seeing",
        "Stiff neck with fever",
    ]),
    ("chest", [
        "Pressure or squeezing pain spreading to the arm, jaw or back",
        "Shortness of breath at rest",
        "Fainting or a racing, irregular heartbeat",
    ]),
    ("stomach", [
        "Severe or worsening abdominal pain",
        "Vomiting blood or passing black stools",
        "Inability to keep fluids down for more than a day",
    ]),
)

GENERIC_WARNING_SIGNS: List[str] = [
    "High fever that doesn't come down",
    "Difficulty breathing",
    "Symptoms that suddenly get much worse",
]

DETAILED_NEXT_STEPS_TEMPLATE = (
    "Based on the symptoms you've described, their duration, and severity, here is what I recommend:"
    "\n\n**How soon to seek care**\n{urgency}"
    "\n\n**Keep a record**\n{documentation}"
    "\n\n**Bring to your appointment**\n{appointment_prep}"
    "\n\n**Self-care in the meantime**\n{self_care}"
    "\n\n**Seek emergency care if you notice**\n{warning_signs}"
    "\n\nWould you like me to help you find healthcare providers in your area?"
)

NOT_PROVIDED = "not provided yet"


# ========================
# System messages
# ========================

INVALID_API_KEY_MESSAGE = (
    "The API key provided is invalid or has been revoked. Please check your key and try again."
)

PROVIDER_RESULTS_MESSAGE = (
    "I found {count} healthcare providers near {location}. Here are the closest options:"
)
PROVIDER_NO_RESULTS_MESSAGE = (
    "I couldn't find any healthcare providers near {location}. "
    "You could try a nearby city or zip code instead."
)
PROVIDER_NEED_LOCATION_MESSAGE = (
    "I can help you find healthcare providers nearby. "
    "Could you share your street address or zip code?"
)
PROVIDER_LOOKUP_FAILED_MESSAGE = (
    "I'm sorry, I wasn't able to search for healthcare providers at that location. "
    "Please check the address and try again, or search for a nearby city or zip code."
)
