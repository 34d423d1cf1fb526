"""
AutoTool implementation for Renoma plugins.

This module provides the base AutoTool class that plugin executables written
in Python extend to declare and implement the tools they serve.
"""
from typing import Any, Dict

from renoma.domains.plugins import Tool


class ToolArgumentError(ValueError):
    """Raised by a tool when its arguments are invalid."""
    pass


class AutoTool:
    """Base class for tools served by a PluginServer."""

    def __init__(self, name: str, description: str):
        """Initialize the tool with name and description."""
        self._name = name
        self._description = description

    @property
    def name(self) -> str:
        """Get the name of the tool."""
        return self._name

    @property
    def description(self) -> str:
        """Get the description of the tool."""
        return self._description

    def get_schema(self) -> Dict[str, Any]:
        """Return the JSON schema for this tool's parameters."""
        # Override in subclasses
        return {"type": "object", "properties": {}}

    def to_tool(self) -> Tool:
        """Describe this tool for the initialize handshake."""
        return Tool(
            name=self.name,
            description=self.description,
            parameters=self.get_schema(),
        )

    def execute(self, **params) -> Any:
        """Execute the tool with the provided parameters."""
        # Override in subclasses
        raise NotImplementedError("Tool must implement execute method")
