from abc import ABC, abstractmethod
from typing import Any

from app.domain.entities.conversation_state import ConversationState


class SessionStorePort(ABC):
    @abstractmethod
    def get(self, identifier: str) -> ConversationState | None:
        raise NotImplementedError

    @abstractmethod
    def put(self, identifier: str, state: ConversationState) -> None:
        """Overwrite the stored state (last writer wins)."""
        raise NotImplementedError

    @abstractmethod
    def append_message(self, identifier: str, sender: str, text: str, meta: dict[str, Any] | None = None) -> None:
        """Log one chat message. `sender` is "customer" or "bot"."""
        raise NotImplementedError

    @abstractmethod
    def get_history(self, identifier: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def has_processed(self, identifier: str, message_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def mark_processed(self, identifier: str, message_id: str) -> None:
        raise NotImplementedError
