"""
Conversation transcript persistence.

One JSON file per conversation holding its ordered message list.
The engine only appends; it never reads transcripts back for context.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Sequence

from healthbot.contracts import Message

logger = logging.getLogger(__name__)


class ConversationStore:
    """
    Manages conversation transcript files.

    Layout:
        outputs/conversations/
            conv-m3x9k2p1-a3f7e2.json
            conv-m3x9k7q4-0b1c2d.json
            ...

    File format:
        {
            "id": "conv-...",
            "messages": [Message.to_dict(), ...],
            "created_at": ISO timestamp,
            "updated_at": ISO timestamp
        }

    Design:
    - Append-only message log (existing messages are never rewritten)
    - created_at is set once, updated_at on every append
    """

    def __init__(self, base_dir: str = "outputs/conversations"):
        """
        Args:
            base_dir: Directory for conversation files (created if missing)
        """
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"ConversationStore initialized: {self.base_dir}")

    def _path(self, conversation_id: str) -> Path:
        if not conversation_id or "/" in conversation_id or "\\" in conversation_id or ".." in conversation_id:
            raise ValueError(f"Invalid conversation id: '{conversation_id}'")
        return self.base_dir / f"{conversation_id}.json"

    def exists(self, conversation_id: str) -> bool:
        return self._path(conversation_id).exists()

    def append_messages(self, conversation_id: str, messages: Sequence[Message]) -> str:
        """
        Append messages to a conversation, creating it if needed.

        Args:
            conversation_id: Conversation identifier
            messages: Messages in display order

        Returns:
            str: Absolute path to the conversation file
        """
        filepath = self._path(conversation_id)
        now = datetime.now(timezone.utc).isoformat()

        if filepath.exists():
            with open(filepath, 'r') as f:
                record = json.load(f)
        else:
            record = {'id': conversation_id, 'messages': [], 'created_at': now}

        record['messages'].extend(message.to_dict() for message in messages)
        record['updated_at'] = now

        with open(filepath, 'w') as f:
            json.dump(record, f, indent=2, ensure_ascii=False)

        logger.debug(f"Appended {len(messages)} messages to {conversation_id}")
        return str(filepath.absolute())

    def load(self, conversation_id: str) -> Dict[str, Any]:
        """
        Load a conversation record.

        Raises:
            FileNotFoundError: If the conversation has never been saved
        """
        filepath = self._path(conversation_id)
        if not filepath.exists():
            raise FileNotFoundError(f"Conversation not found: {conversation_id}")

        with open(filepath, 'r') as f:
            return json.load(f)

    def load_messages(self, conversation_id: str) -> List[Message]:
        return [Message.from_dict(item) for item in self.load(conversation_id)['messages']]

    def list_conversations(self) -> List[str]:
        return sorted(path.stem for path in self.base_dir.glob("*.json"))
