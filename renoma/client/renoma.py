"""
Simplified client interface for interacting with the Renoma plugin host.

This module provides a clean API for end users to drive chats and manage
plugins without dealing with internal wiring.
"""

import importlib.util
import json
from typing import Any, AsyncGenerator, Dict, List, Optional, Union
from uuid import UUID

from renoma.domains.messages import (
    ROLE_ASSISTANT,
    ROLE_USER,
    Character,
    Chat,
    ChatMessage,
    CompletionRequest,
)
from renoma.domains.plugins import PluginManifest
from renoma.factories.renoma_factory import RenomaFactory
from renoma.interfaces.client.client import Renoma as RenomaInterface


class Renoma(RenomaInterface):
    """Simplified client interface for interacting with the plugin host."""

    def __init__(self, config_path: str = None, config: Dict[str, Any] = None):
        """Initialize the host from config file or dictionary.

        Args:
            config_path: Path to configuration file (JSON or Python)
            config: Configuration dictionary
        """
        if not config and not config_path:
            raise ValueError("Either config or config_path must be provided")

        if config_path:
            with open(config_path, "r") as f:
                if config_path.endswith(".json"):
                    config = json.load(f)
                else:
                    # Assume it's a Python file
                    spec = importlib.util.spec_from_file_location("config", config_path)
                    config_module = importlib.util.module_from_spec(spec)
                    spec.loader.exec_module(config_module)
                    config = config_module.config

        self.completion_service = RenomaFactory.create_from_config(config)
        self.plugin_manager = self.completion_service.plugin_manager
        self.repository = self.completion_service.repository

    async def start(self) -> List[str]:
        return await self.plugin_manager.discover()

    async def create_chat(self, character: Character) -> Chat:
        """Store a character and open a chat seeded with its first message."""
        await self.repository.create_character(character)
        chat = Chat(character_id=character.id)
        if character.first_message:
            chat.messages.append(
                ChatMessage(
                    role=ROLE_ASSISTANT,
                    content=character.first_message,
                    sender_id=character.id,
                )
            )
        await self.repository.create_chat(chat)
        return chat

    def _request(
        self, chat_id: Union[str, UUID], model: Optional[str], **kwargs
    ) -> CompletionRequest:
        return CompletionRequest(
            chat_id=chat_id,
            model=model or self.completion_service.llm_provider.text_model,
            **kwargs,
        )

    async def process(
        self,
        chat_id: Union[str, UUID],
        message: str,
        model: Optional[str] = None,
    ) -> AsyncGenerator[str, None]:
        """Append a user message and stream the completion frames.

        Args:
            chat_id: Chat to continue
            message: User message text
            model: Optional model override

        Returns:
            Async generator yielding server-sent event frames
        """
        request = self._request(chat_id, model)
        await self.repository.append_message(
            request.chat_id, ChatMessage(role=ROLE_USER, content=message)
        )
        async for frame in self.completion_service.generate_response(request):
            yield frame

    async def regenerate(
        self,
        chat_id: Union[str, UUID],
        message_id: Union[str, UUID],
        model: Optional[str] = None,
    ) -> AsyncGenerator[str, None]:
        request = self._request(chat_id, model, regenerate=True, message_id=message_id)
        async for frame in self.completion_service.generate_response(request):
            yield frame

    def list_plugins(self) -> List[PluginManifest]:
        return self.plugin_manager.list_manifests()

    async def toggle_plugin(self, name: str) -> bool:
        return await self.plugin_manager.toggle(name)

    async def install_plugin(self, filename: str, data: bytes) -> PluginManifest:
        return await self.plugin_manager.install(filename, data)

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        return await self.plugin_manager.call_tool(name, arguments)

    async def shutdown(self) -> None:
        await self.plugin_manager.shutdown()
