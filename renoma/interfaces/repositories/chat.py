from abc import ABC, abstractmethod
from uuid import UUID

from renoma.domains.messages import Character, Chat, ChatMessage


class NotFoundError(LookupError):
    """Raised when a chat, character or message does not exist."""

    def __init__(self, entity: str, entity_id: UUID):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ChatRepository(ABC):
    """Interface for chat storage."""

    @abstractmethod
    async def get_chat(self, chat_id: UUID) -> Chat:
        """Get a chat with its messages."""
        pass

    @abstractmethod
    async def get_character(self, character_id: UUID) -> Character:
        """Get a character profile."""
        pass

    @abstractmethod
    async def get_message(self, chat_id: UUID, message_id: UUID) -> ChatMessage:
        """Get a single message of a chat."""
        pass

    @abstractmethod
    async def create_character(self, character: Character) -> None:
        """Store a new character."""
        pass

    @abstractmethod
    async def create_chat(self, chat: Chat) -> None:
        """Store a new chat."""
        pass

    @abstractmethod
    async def append_message(self, chat_id: UUID, message: ChatMessage) -> None:
        """Append a message to a chat."""
        pass

    @abstractmethod
    async def append_alternative(
        self, chat_id: UUID, message_id: UUID, content: str
    ) -> None:
        """Add a content variant to a message and make it active."""
        pass
