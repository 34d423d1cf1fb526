"""
Plugin manager for the Renoma plugin host.

This module implements the concrete PluginManager that discovers, loads and
unloads plugin processes and routes tool calls to the plugin that owns them.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from renoma.domains.plugins import PluginManifest, RegisteredTool
from renoma.interfaces.plugins.plugins import PluginManager as PluginManagerInterface
from renoma.plugins.errors import (
    PluginDisabledError,
    PluginError,
    PluginHandshakeError,
    PluginNotFoundError,
    PluginTransportError,
    ToolExecutionError,
    ToolNotFoundError,
)
from renoma.plugins.instance import PluginInstance
from renoma.plugins.protocol import (
    METHOD_CALL_TOOL,
    METHOD_INITIALIZE,
    CallToolParams,
    InitializeParams,
    InitializeResult,
    Request,
    new_request_id,
)

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_HOST_NAME = "renoma"
DEFAULT_HOST_VERSION = "0.1.0"
DEFAULT_PLUGIN_DIRECTORY = "./plugins"
DEFAULT_REQUEST_TIMEOUT = 30.0


class PluginManager(PluginManagerInterface):
    """Manager for discovering, loading and calling plugin processes."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize with optional plugin configuration.

        Args:
            config: The "plugins" section of the host configuration
        """
        self.config = config or {}
        self.host_name = self.config.get("host_name", DEFAULT_HOST_NAME)
        self.host_version = self.config.get("host_version", DEFAULT_HOST_VERSION)
        self.directory = Path(self.config.get("directory", DEFAULT_PLUGIN_DIRECTORY))
        self.request_timeout = self.config.get(
            "request_timeout", DEFAULT_REQUEST_TIMEOUT
        )
        self._plugins: Dict[str, PluginInstance] = {}  # plugin name -> instance
        self._tools: Dict[str, str] = {}  # tool name -> plugin name
        self._lock = asyncio.Lock()

    async def discover(self, directory: Union[str, Path, None] = None) -> List[str]:
        """Load every executable file directly inside a directory.

        Args:
            directory: Directory to scan, defaults to the configured one

        Returns:
            Names of the plugins that loaded successfully
        """
        directory = Path(directory) if directory is not None else self.directory
        if not directory.is_dir():
            logger.info(f"Plugin directory {directory} does not exist, nothing to load")
            return []

        loaded = []
        for path in sorted(directory.iterdir()):
            if not path.is_file() or not os.access(path, os.X_OK):
                continue
            try:
                manifest = await self.load(path)
                loaded.append(manifest.name)
            except PluginError as e:
                logger.error(f"Failed to load plugin from {path}: {e}")
            except Exception as e:
                logger.exception(f"Unexpected error loading plugin from {path}: {e}")
        return loaded

    async def load(self, path: Union[str, Path]) -> PluginManifest:
        """Spawn a plugin and register it after a successful handshake.

        Args:
            path: Path to the plugin executable

        Returns:
            Manifest declared by the plugin

        Raises:
            PluginTransportError: If the process cannot be reached
            PluginHandshakeError: If initialize fails or returns a bad result
        """
        instance = await PluginInstance.start(path, request_timeout=self.request_timeout)
        try:
            manifest = await self._handshake(instance)
        except BaseException:
            await instance.kill()
            raise

        instance.manifest = manifest
        async with self._lock:
            previous = self._plugins.get(manifest.name)
            if previous is not None:
                logger.warning(
                    f"Plugin {manifest.name} is already loaded. Replacing it with {path}."
                )
                self._remove(manifest.name)
                await previous.kill()

            self._plugins[manifest.name] = instance
            for tool in manifest.tools:
                existing = self._tools.get(tool.name)
                if existing is not None and existing != manifest.name:
                    logger.warning(
                        f"Tool collision: {tool.name} already registered by {existing}. "
                        f"Overwriting with {manifest.name}."
                    )
                self._tools[tool.name] = manifest.name

        logger.info(f"Loaded plugin: {manifest.name} ({manifest.version})")
        return manifest

    async def _handshake(self, instance: PluginInstance) -> PluginManifest:
        request = Request(
            method=METHOD_INITIALIZE,
            params=InitializeParams(
                host=self.host_name, version=self.host_version
            ).model_dump(),
            id=new_request_id(),
        )
        response = await instance.send_request(request)

        if response.error is not None:
            raise PluginHandshakeError(
                f"Plugin initialization failed: {response.error.message}"
            )
        if response.result is None:
            raise PluginHandshakeError("Plugin initialization failed: Unknown error")

        try:
            result = InitializeResult.model_validate(response.result)
        except ValidationError as e:
            raise PluginHandshakeError(
                f"Plugin initialization failed: malformed result: {e}"
            ) from e

        return PluginManifest(
            name=result.name,
            version=result.version,
            description=result.description,
            enabled=True,
            tools=result.tools,
        )

    def _remove(self, name: str) -> PluginInstance:
        instance = self._plugins.pop(name)
        for tool_name in [t for t, owner in self._tools.items() if owner == name]:
            del self._tools[tool_name]
        return instance

    async def unload(self, name: str) -> None:
        """Remove a plugin, purge its tools and kill its process.

        Raises:
            PluginNotFoundError: If no plugin has this name
        """
        async with self._lock:
            if name not in self._plugins:
                raise PluginNotFoundError(name)
            instance = self._remove(name)
            await instance.kill()
        logger.info(f"Unloaded plugin: {name}")

    async def toggle(self, name: str) -> bool:
        """Flip a plugin's enabled flag.

        Returns:
            The new enabled value

        Raises:
            PluginNotFoundError: If no plugin has this name
        """
        async with self._lock:
            instance = self._plugins.get(name)
            if instance is None:
                raise PluginNotFoundError(name)
            instance.manifest.enabled = not instance.manifest.enabled
            enabled = instance.manifest.enabled
        logger.info(f"Plugin {name} {'enabled' if enabled else 'disabled'}")
        return enabled

    async def call_tool(self, name: str, arguments: Any) -> Any:
        """Execute a tool through the plugin that owns it.

        Args:
            name: Tool name
            arguments: Structured tool arguments

        Returns:
            The result value returned by the plugin

        Raises:
            ToolNotFoundError: If no plugin routes this tool
            PluginDisabledError: If the owning plugin is disabled
            ToolExecutionError: If the plugin fails or cannot be reached
        """
        plugin_name = self._tools.get(name)
        instance = self._plugins.get(plugin_name) if plugin_name else None
        if instance is None:
            raise ToolNotFoundError(name)
        if not instance.manifest.enabled:
            raise PluginDisabledError(plugin_name)

        request = Request(
            method=METHOD_CALL_TOOL,
            params=CallToolParams(name=name, arguments=arguments).model_dump(),
            id=new_request_id(),
        )
        logger.info(f"Calling tool '{name}' on plugin {plugin_name}")
        try:
            response = await instance.send_request(request)
        except PluginTransportError as e:
            raise ToolExecutionError(e.message) from e

        if response.error is not None:
            raise ToolExecutionError(
                response.error.message,
                code=response.error.code,
                data=response.error.data,
            )
        return response.result

    async def install(self, filename: str, data: bytes) -> PluginManifest:
        """Write a plugin executable into the plugin directory and load it.

        Args:
            filename: Name of the uploaded file, reduced to its base name
            data: Executable contents

        Returns:
            Manifest of the loaded plugin
        """
        base_name = Path(filename).name
        if not base_name or base_name in (".", ".."):
            raise ValueError(f"Invalid plugin file name: {filename!r}")

        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / base_name
        path.write_bytes(data)
        path.chmod(0o755)
        logger.info(f"Installed plugin executable {path}")
        return await self.load(path)

    def get_plugin(self, name: str) -> Optional[PluginInstance]:
        return self._plugins.get(name)

    def get_tool_owner(self, name: str) -> Optional[str]:
        return self._tools.get(name)

    def list_manifests(self) -> List[PluginManifest]:
        """List all loaded plugins with their details."""
        return [
            instance.manifest.model_copy(deep=True)
            for instance in self._plugins.values()
        ]

    def list_tools(self, include_disabled: bool = True) -> List[RegisteredTool]:
        """List every routed tool together with the plugin owning it.

        Args:
            include_disabled: Whether to include tools of disabled plugins
        """
        tools = []
        for tool_name, plugin_name in self._tools.items():
            instance = self._plugins.get(plugin_name)
            if instance is None:
                continue
            manifest = instance.manifest
            if not include_disabled and not manifest.enabled:
                continue
            tool = next((t for t in manifest.tools if t.name == tool_name), None)
            if tool is None:
                continue
            tools.append(
                RegisteredTool(
                    **tool.model_dump(),
                    plugin=plugin_name,
                    enabled=manifest.enabled,
                )
            )
        logger.debug(f"Routed tools: {[t.name for t in tools]}")
        return tools

    def check_health(self) -> Dict[str, bool]:
        """Report which loaded plugins still have a running process."""
        health = {}
        for name, instance in self._plugins.items():
            health[name] = instance.is_running
            if not instance.is_running:
                logger.warning(
                    f"Plugin {name} is not running (exit code {instance.returncode})"
                )
        return health

    async def shutdown(self) -> None:
        """Unload every plugin."""
        for name in list(self._plugins.keys()):
            try:
                await self.unload(name)
            except PluginNotFoundError:
                continue
