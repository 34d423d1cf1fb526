from abc import ABC, abstractmethod
from typing import Any, AsyncGenerator, Dict, List, Optional, Union
from uuid import UUID

from renoma.domains.messages import Character, Chat
from renoma.domains.plugins import PluginManifest


class Renoma(ABC):
    """Interface for the Renoma client."""

    @abstractmethod
    async def start(self) -> List[str]:
        """Load the plugins found in the configured plugin directory."""
        pass

    @abstractmethod
    async def create_chat(self, character: Character) -> Chat:
        """Store a character and open a new chat with it."""
        pass

    @abstractmethod
    async def process(
        self,
        chat_id: Union[str, UUID],
        message: str,
        model: Optional[str] = None,
    ) -> AsyncGenerator[str, None]:
        """Append a user message and stream the completion frames."""
        pass

    @abstractmethod
    async def regenerate(
        self,
        chat_id: Union[str, UUID],
        message_id: Union[str, UUID],
        model: Optional[str] = None,
    ) -> AsyncGenerator[str, None]:
        """Generate an alternative for an existing message."""
        pass

    @abstractmethod
    def list_plugins(self) -> List[PluginManifest]:
        """List the loaded plugins."""
        pass

    @abstractmethod
    async def toggle_plugin(self, name: str) -> bool:
        """Enable or disable a plugin."""
        pass

    @abstractmethod
    async def install_plugin(self, filename: str, data: bytes) -> PluginManifest:
        """Install a plugin executable and load it."""
        pass

    @abstractmethod
    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        """Call a tool directly, bypassing the model."""
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Stop every plugin process."""
        pass
