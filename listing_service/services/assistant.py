"""
AI assistant chat sessions.

Holds the per-conversation chat handles and starts new Gemini sessions seeded
with a conversation's stored message history.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

import google.generativeai as genai

from listing_service.config import Settings, get_settings
from listing_service.models.conversation import Message, MessageSender

logger = logging.getLogger(__name__)


class ChatModelClient(Protocol):
    """Starts chat sessions from a role-tagged history."""

    def start_chat(self, history: List[Dict[str, Any]]) -> Any:
        ...


class ChatSessionRegistry:
    """
    Live chat sessions keyed by conversation id.

    One instance is created per process and handed to the services that need
    it. Concurrent writers for the same conversation resolve last-write-wins.
    """

    def __init__(self):
        self._sessions: Dict[str, Any] = {}

    @staticmethod
    def _key(conversation_id) -> str:
        return str(conversation_id)

    def get(self, conversation_id) -> Optional[Any]:
        return self._sessions.get(self._key(conversation_id))

    def set(self, conversation_id, session: Any) -> None:
        self._sessions[self._key(conversation_id)] = session

    def delete(self, conversation_id) -> None:
        self._sessions.pop(self._key(conversation_id), None)

    def __contains__(self, conversation_id) -> bool:
        return self._key(conversation_id) in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


def build_chat_history(messages: Iterable[Message]) -> List[Dict[str, Any]]:
    """
    Map stored messages to the Gemini history format.
    AI replies become "model" turns; system and user messages become "user" turns.
    """
    return [
        {
            "role": "model" if message.sender == MessageSender.AI else "user",
            "parts": [message.content],
        }
        for message in messages
    ]


class GeminiChatClient:
    """Gemini model factory for assistant chat sessions."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        genai.configure(api_key=self.settings.gemini_api_key)

    def start_chat(self, history: List[Dict[str, Any]]):
        """
        Start a new chat session seeded with history.

        Args:
            history: Message dicts with ``role`` and ``parts``.

        Returns:
            A ``google.generativeai.ChatSession``.
        """
        model = genai.GenerativeModel(
            model_name=self.settings.gemini_model,
            generation_config={"max_output_tokens": self.settings.gemini_max_output_tokens},
        )
        logger.debug("Starting %s chat with %d history messages", self.settings.gemini_model, len(history))
        return model.start_chat(history=history)
