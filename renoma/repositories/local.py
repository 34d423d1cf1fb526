"""
Local chat repository.

Keeps characters and chats in memory and, when a path is configured,
mirrors them to a pretty-printed JSON file after every change.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError

from renoma.domains.messages import Character, Chat, ChatMessage
from renoma.interfaces.repositories.chat import ChatRepository, NotFoundError

logger = logging.getLogger(__name__)


class LocalDatabase(BaseModel):
    characters: List[Character] = Field(default_factory=list)
    chats: List[Chat] = Field(default_factory=list)


class LocalChatRepository(ChatRepository):
    """In-memory chat repository with optional JSON file persistence."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self.db = self._load()

    def _load(self) -> LocalDatabase:
        if self.path is None or not self.path.exists():
            return LocalDatabase()
        try:
            return LocalDatabase.model_validate_json(self.path.read_text("utf-8"))
        except (OSError, ValidationError) as e:
            logger.error(f"Failed to load local database from {self.path}: {e}")
            return LocalDatabase()

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.db.model_dump_json(indent=2), "utf-8")

    def _find_chat(self, chat_id: UUID) -> Chat:
        chat = next((c for c in self.db.chats if c.id == chat_id), None)
        if chat is None:
            raise NotFoundError("Chat", chat_id)
        return chat

    def _find_message(self, chat_id: UUID, message_id: UUID) -> ChatMessage:
        chat = self._find_chat(chat_id)
        message = next((m for m in chat.messages if m.id == message_id), None)
        if message is None:
            raise NotFoundError("Message", message_id)
        return message

    async def get_chat(self, chat_id: UUID) -> Chat:
        return self._find_chat(chat_id).model_copy(deep=True)

    async def get_character(self, character_id: UUID) -> Character:
        character = next(
            (c for c in self.db.characters if c.id == character_id), None
        )
        if character is None:
            raise NotFoundError("Character", character_id)
        return character.model_copy(deep=True)

    async def get_message(self, chat_id: UUID, message_id: UUID) -> ChatMessage:
        return self._find_message(chat_id, message_id).model_copy(deep=True)

    async def create_character(self, character: Character) -> None:
        self.db.characters.append(character.model_copy(deep=True))
        self._save()

    async def create_chat(self, chat: Chat) -> None:
        self.db.chats.append(chat.model_copy(deep=True))
        self._save()

    async def append_message(self, chat_id: UUID, message: ChatMessage) -> None:
        self._find_chat(chat_id).messages.append(message.model_copy(deep=True))
        self._save()

    async def append_alternative(
        self, chat_id: UUID, message_id: UUID, content: str
    ) -> None:
        message = self._find_message(chat_id, message_id)
        message.alternatives.append(content)
        message.active_index = len(message.alternatives)
        self._save()
