"""
Credential Gate - API key registry

Responsibilities:
- Generate role-scoped API keys
- Validate keys and track the active key
- Revoke keys without deleting them (records stay auditable)
- Answer permission checks against the active key

Roles and default permissions:
- patient: basic_chat, voice_input
- provider: patient permissions + history_access, patient_data

The registry is process-wide: one instance is shared by every
conversation served by a DialogueManager.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional

from healthbot.utils.helpers import random_token, time_token
from healthbot.utils.intents import Role

logger = logging.getLogger(__name__)

PATIENT_PERMISSIONS = frozenset({'basic_chat', 'voice_input'})
PROVIDER_PERMISSIONS = PATIENT_PERMISSIONS | {'history_access', 'patient_data'}

ROLE_PERMISSIONS: Dict[Role, FrozenSet[str]] = {
    Role.PATIENT: PATIENT_PERMISSIONS,
    Role.PROVIDER: PROVIDER_PERMISSIONS,
}


@dataclass
class ApiKeyRecord:
    """
    Attributes:
        key: The key string
        role: Role the key was issued for
        permissions: Permissions granted by the role
        is_valid: False once revoked
    """
    key: str
    role: Role
    permissions: FrozenSet[str] = field(default_factory=frozenset)
    is_valid: bool = True


class ApiKeyRegistry:
    """In-memory API key registry with an active-key pointer"""

    def __init__(self):
        self._records: Dict[str, ApiKeyRecord] = {}
        self.active_key: Optional[str] = None

    @property
    def active_role(self) -> Optional[Role]:
        if self.active_key is None:
            return None
        return self._records[self.active_key].role

    def get_record(self, key: str) -> Optional[ApiKeyRecord]:
        return self._records.get(key)

    def generate_api_key(self, role) -> str:
        """
        Issue a new valid key for a role.

        Format: {role}_{24 random hex chars}_{time_base36}

        Args:
            role: Role enum or its string value ('patient' / 'provider')

        Returns:
            str: The new key

        Raises:
            ValueError: If role is not recognized
        """
        try:
            role = Role(role)
        except ValueError:
            raise ValueError(
                f"Invalid role: '{role}'. Must be one of: {[r.value for r in Role]}"
            ) from None

        key = f"{role.value}_{random_token(24)}_{time_token()}"
        while key in self._records:
            key = f"{role.value}_{random_token(24)}_{time_token()}"

        self._records[key] = ApiKeyRecord(
            key=key,
            role=role,
            permissions=ROLE_PERMISSIONS[role],
        )
        logger.info(f"Generated {role.value} API key ending ...{key[-6:]}")
        return key

    def validate_api_key(self, key: Optional[str]) -> bool:
        """
        Check a key and make it the active key if valid.

        Never raises. An unknown or revoked key leaves the active key as is.

        Returns:
            bool: True if the key exists and has not been revoked
        """
        record = self._records.get(key) if key else None
        if record is None or not record.is_valid:
            logger.warning("Rejected invalid or revoked API key")
            return False

        self.active_key = key
        return True

    def revoke_api_key(self, key: str) -> bool:
        """
        Mark a key invalid. The record is kept.

        Returns:
            bool: True if the key was found
        """
        record = self._records.get(key)
        if record is None:
            return False

        record.is_valid = False
        if self.active_key == key:
            self.active_key = None
        logger.info(f"Revoked API key ending ...{key[-6:]}")
        return True

    def has_permission(self, name: str) -> bool:
        """Permission check against the active key; False when none is active"""
        if self.active_key is None:
            return False
        return name in self._records[self.active_key].permissions
