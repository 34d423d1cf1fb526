"""
Plugin system interfaces.

These interfaces define the contracts for the plugin host: a transport that
talks to one plugin process and the manager that routes tools across all of
them.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from renoma.domains.plugins import PluginManifest, RegisteredTool
from renoma.plugins.protocol import Request, Response


class PluginTransport(ABC):
    """Interface for a connection to a single plugin process."""

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Whether the plugin process is still alive."""
        pass

    @abstractmethod
    async def send_request(self, request: Request) -> Response:
        """Send a request and wait for the matching response."""
        pass

    @abstractmethod
    async def kill(self) -> None:
        """Terminate the plugin process."""
        pass


class PluginManager(ABC):
    """Interface for the plugin manager."""

    @abstractmethod
    async def discover(self, directory: Union[str, Path]) -> List[str]:
        """Load every executable found directly inside a directory."""
        pass

    @abstractmethod
    async def load(self, path: Union[str, Path]) -> PluginManifest:
        """Spawn a plugin and perform the initialize handshake."""
        pass

    @abstractmethod
    async def unload(self, name: str) -> None:
        """Remove a plugin and kill its process."""
        pass

    @abstractmethod
    async def toggle(self, name: str) -> bool:
        """Flip a plugin's enabled flag and return the new value."""
        pass

    @abstractmethod
    async def call_tool(self, name: str, arguments: Any) -> Any:
        """Execute a tool through its owning plugin."""
        pass

    @abstractmethod
    def list_manifests(self) -> List[PluginManifest]:
        """List all loaded plugins."""
        pass

    @abstractmethod
    def list_tools(self, include_disabled: bool = True) -> List[RegisteredTool]:
        """List all routed tools with their owning plugin."""
        pass

    @abstractmethod
    def get_tool_owner(self, name: str) -> Optional[str]:
        """Get the name of the plugin routing a tool."""
        pass

    @abstractmethod
    def check_health(self) -> Dict[str, bool]:
        """Report which plugins still have a live process."""
        pass
