"""
Conversation State - Per-conversation intake record

Responsibilities:
- Hold the six tracked fields (symptoms, duration, severity, history,
  medications, allergies) with collected/value/importance
- Hold the conversation goal, greeted flag and last-interaction timestamp
- Reset to defaults while keeping each field's importance
- Snapshot to / restore from a JSON-safe dict

Design principles:
- One ConversationContext per conversation, passed explicitly into every
  engine call (never module-level state)
- Dumb container: no planning or classification logic here
- Importance is fixed at construction and survives reset()

Field importance:
- high: symptoms, duration, severity (gate progression to guidance)
- medium: history, medications, allergies (optional enrichment)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from healthbot.utils.conversation_goals import ConversationGoal, VALID_GOALS
from healthbot.utils.helpers import generate_conversation_id

logger = logging.getLogger(__name__)

IMPORTANCE_HIGH = "high"
IMPORTANCE_MEDIUM = "medium"

# Field name -> importance, in the order fields are reported
FIELD_IMPORTANCE = {
    'symptoms': IMPORTANCE_HIGH,
    'duration': IMPORTANCE_HIGH,
    'severity': IMPORTANCE_HIGH,
    'history': IMPORTANCE_MEDIUM,
    'medications': IMPORTANCE_MEDIUM,
    'allergies': IMPORTANCE_MEDIUM,
}

# Order in which unmet high-importance fields are requested
HIGH_IMPORTANCE_ORDER = ('symptoms', 'duration', 'severity')

FieldValue = Optional[Union[str, int]]


@dataclass
class CollectedField:
    """
    One tracked intake datum.

    Attributes:
        importance: 'high' or 'medium'. Fixed at construction.
        collected: Whether the datum has been observed at least once
        value: Last captured value (raw text, or int 0-10 for severity)
        follow_up_needed: Reserved for clarification prompts. Only ever
            cleared by reset(); nothing reads it yet.
    """
    importance: str
    collected: bool = False
    value: FieldValue = None
    follow_up_needed: bool = False

    def reset(self) -> None:
        self.collected = False
        self.value = None
        self.follow_up_needed = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'importance': self.importance,
            'collected': self.collected,
            'value': self.value,
            'follow_up_needed': self.follow_up_needed,
        }


def _default_fields() -> Dict[str, CollectedField]:
    return {name: CollectedField(importance=importance) for name, importance in FIELD_IMPORTANCE.items()}


@dataclass
class ConversationContext:
    """Mutable intake record for one active conversation"""
    conversation_id: str = field(default_factory=generate_conversation_id)
    current_goal: ConversationGoal = ConversationGoal.INITIAL_GREETING
    has_greeted: bool = False
    last_interaction_timestamp: Optional[datetime] = None
    fields: Dict[str, CollectedField] = field(default_factory=_default_fields)

    # ========================
    # Field access
    # ========================

    def get_field(self, name: str) -> CollectedField:
        """
        Raises:
            KeyError: If name is not one of the tracked fields
        """
        if name not in self.fields:
            raise KeyError(f"Unknown intake field: '{name}'")
        return self.fields[name]

    def is_collected(self, name: str) -> bool:
        return self.get_field(name).collected

    def get_value(self, name: str) -> FieldValue:
        return self.get_field(name).value

    def set_value(self, name: str, value: FieldValue, collected: bool = True) -> None:
        """
        Record a value for a field.

        Args:
            name: Field name
            value: Value to store (overwrites any previous value)
            collected: Mark the field as collected. Passing False stores the
                value without changing the collected flag.
        """
        intake_field = self.get_field(name)
        intake_field.value = value
        if collected:
            intake_field.collected = True
        logger.debug(f"Conversation {self.conversation_id}: {name} = {value!r}")

    def all_high_importance_collected(self) -> bool:
        return all(
            f.collected for f in self.fields.values() if f.importance == IMPORTANCE_HIGH
        )

    def next_unmet_field(self) -> Optional[str]:
        """First uncollected high-importance field in request order, or None"""
        for name in HIGH_IMPORTANCE_ORDER:
            if not self.fields[name].collected:
                return name
        return None

    def collected_fields(self) -> List[str]:
        return [name for name, f in self.fields.items() if f.collected]

    def touch(self) -> None:
        """Update last-interaction timestamp"""
        self.last_interaction_timestamp = datetime.now(timezone.utc)

    # ========================
    # Lifecycle
    # ========================

    def reset(self) -> None:
        """
        Reinitialize for a fresh intake.

        All fields go back to collected=False / value=None, the goal returns
        to initial_greeting and the greeting may fire again. Importance is
        left untouched.
        """
        for intake_field in self.fields.values():
            intake_field.reset()
        self.current_goal = ConversationGoal.INITIAL_GREETING
        self.has_greeted = False
        self.last_interaction_timestamp = None
        logger.info(f"Conversation {self.conversation_id} reset")

    # ========================
    # Snapshot / restore
    # ========================

    def snapshot_state(self) -> Dict[str, Any]:
        """
        Export canonical state as a JSON-safe dict.

        Returns:
            dict: {
                'conversation_id': str,
                'current_goal': str,
                'has_greeted': bool,
                'last_interaction_timestamp': ISO string or None,
                'fields': {name: {importance, collected, value, follow_up_needed}}
            }
        """
        timestamp = self.last_interaction_timestamp
        return {
            'conversation_id': self.conversation_id,
            'current_goal': ConversationGoal(self.current_goal).value,
            'has_greeted': self.has_greeted,
            'last_interaction_timestamp': timestamp.isoformat() if timestamp else None,
            'fields': {name: f.to_dict() for name, f in self.fields.items()},
        }

    def restore_state(self, snapshot: Dict[str, Any]) -> None:
        """
        Overwrite this context in place from snapshot_state() output.

        Used to roll a turn back so callers holding a reference to this
        context see the pre-turn state.
        """
        restored = ConversationContext.from_snapshot(snapshot)
        self.conversation_id = restored.conversation_id
        self.current_goal = restored.current_goal
        self.has_greeted = restored.has_greeted
        self.last_interaction_timestamp = restored.last_interaction_timestamp
        self.fields = restored.fields

    @classmethod
    def from_snapshot(cls, snapshot: Dict[str, Any]) -> "ConversationContext":
        """
        Rebuild a context from snapshot_state() output.

        Args:
            snapshot: Dict produced by snapshot_state()

        Returns:
            ConversationContext

        Raises:
            ValueError: If the goal or a field name is not recognized
        """
        goal = snapshot.get('current_goal', ConversationGoal.INITIAL_GREETING.value)
        if goal not in VALID_GOALS:
            raise ValueError(f"Invalid current_goal in snapshot: '{goal}'")

        fields = _default_fields()
        for name, data in snapshot.get('fields', {}).items():
            if name not in fields:
                raise ValueError(f"Unknown intake field in snapshot: '{name}'")
            fields[name] = CollectedField(
                importance=data.get('importance', FIELD_IMPORTANCE[name]),
                collected=data.get('collected', False),
                value=data.get('value'),
                follow_up_needed=data.get('follow_up_needed', False),
            )

        timestamp = snapshot.get('last_interaction_timestamp')
        return cls(
            conversation_id=snapshot.get('conversation_id') or generate_conversation_id(),
            current_goal=ConversationGoal(goal),
            has_greeted=snapshot.get('has_greeted', False),
            last_interaction_timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
            fields=fields,
        )
