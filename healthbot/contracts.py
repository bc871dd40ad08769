"""
Semantic contracts for the health-intake assistant.

This module defines immutable data structures passed between the engine
and its callers (Flask layer, console harness, persistence, provider lookup).
They define shape and semantics, not rules.

Design principles:
- Frozen dataclasses (immutable after creation)
- Tuples instead of lists so contained collections stay immutable
- No dependencies on engine modules
- JSON conversion lives next to the shape it converts

Contents:
- ProviderRecord: One healthcare facility returned by a provider lookup
- Message: One chat message (user or assistant)
- ChatbotResponse: Result of processing one user message

Usage:
    from healthbot.contracts import Message, ChatbotResponse, ProviderRecord
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from healthbot.utils.helpers import generate_message_id

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
VALID_MESSAGE_ROLES = {ROLE_USER, ROLE_ASSISTANT}


@dataclass(frozen=True)
class ProviderRecord:
    """
    Healthcare facility returned by the provider-lookup collaborator.

    Attributes:
        name: Facility name
        address: Display address
        type: Facility kind, e.g. 'Hospital', 'Medical Clinic', 'Pharmacy'
        phone: Contact number, if known
        website: Website URL, if known
        distance: Human-readable distance, e.g. '1.8 miles'
    """
    name: str
    address: str
    type: str
    phone: Optional[str] = None
    website: Optional[str] = None
    distance: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'address': self.address,
            'type': self.type,
            'phone': self.phone,
            'website': self.website,
            'distance': self.distance,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ProviderRecord":
        return ProviderRecord(
            name=data['name'],
            address=data['address'],
            type=data['type'],
            phone=data.get('phone'),
            website=data.get('website'),
            distance=data.get('distance'),
        )


@dataclass(frozen=True)
class Message:
    """
    One chat message.

    Assistant messages are produced only by the engine; user messages are
    produced by callers.

    Attributes:
        content: Message text
        role: 'user' or 'assistant'
        id: Message identifier (msg-<time>-<random>)
        timestamp: Creation time (UTC)
        attachments: Provider records attached to a lookup reply, else None
    """
    content: str
    role: str = ROLE_ASSISTANT
    id: str = field(default_factory=generate_message_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    attachments: Optional[Tuple[ProviderRecord, ...]] = None

    def __post_init__(self):
        if self.role not in VALID_MESSAGE_ROLES:
            raise ValueError(
                f"Invalid message role: '{self.role}'. Must be one of: {sorted(VALID_MESSAGE_ROLES)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'content': self.content,
            'role': self.role,
            'timestamp': self.timestamp.isoformat(),
        }
        if self.attachments is not None:
            data['attachments'] = [record.to_dict() for record in self.attachments]
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Message":
        attachments = data.get('attachments')
        return Message(
            id=data['id'],
            content=data['content'],
            role=data['role'],
            timestamp=datetime.fromisoformat(data['timestamp']),
            attachments=(
                tuple(ProviderRecord.from_dict(item) for item in attachments)
                if attachments is not None else None
            ),
        )


def user_message(content: str) -> Message:
    """Wrap caller-supplied text as a user message"""
    return Message(content=content, role=ROLE_USER)


@dataclass(frozen=True)
class ChatbotResponse:
    """
    Result of DialogueManager.process_message().

    Attributes:
        message: Assistant reply
        needs_info: Whether the engine is waiting on an intake field
        info_type: 'symptoms', 'duration' or 'severity' when needs_info is True
    """
    message: Message
    needs_info: bool = False
    info_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'message': self.message.to_dict(),
            'needs_info': self.needs_info,
            'info_type': self.info_type,
        }
