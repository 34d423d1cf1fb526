"""
Plugin host errors.

Every failure raised by the plugin layer derives from PluginError so callers
can catch the whole family at a boundary.
"""
from typing import Any, Optional


class PluginError(Exception):
    """Base error for the plugin host"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PluginTransportError(PluginError):
    """Subprocess spawn failure, broken pipe or process exit"""
    pass


class PluginTimeoutError(PluginTransportError):
    """No response arrived within the request timeout"""

    def __init__(self, method: str, timeout: float):
        super().__init__(f"Plugin request '{method}' timed out after {timeout}s")
        self.method = method
        self.timeout = timeout


class PluginProtocolError(PluginError):
    """Malformed or unsendable envelope"""
    pass


class PluginHandshakeError(PluginError):
    """The initialize exchange failed"""
    pass


class PluginNotFoundError(PluginError):
    """No plugin is registered under the given name"""

    def __init__(self, name: str):
        super().__init__(f"Plugin not found: {name}")
        self.name = name


class PluginDisabledError(PluginError):
    """The plugin owning a tool is disabled"""

    def __init__(self, name: str):
        super().__init__(f"Plugin {name} is disabled")
        self.name = name


class ToolNotFoundError(PluginError):
    """No loaded plugin routes the given tool"""

    def __init__(self, name: str):
        super().__init__(f"Tool not found: {name}")
        self.name = name


class ToolExecutionError(PluginError):
    """The plugin failed to execute a tool"""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Optional[Any] = None,
    ):
        super().__init__(f"Tool execution error: {message}")
        self.code = code
        self.error_message = message
        self.data = data
