"""
Plugin domain models.

These models describe what a plugin declares about itself during the
initialize handshake and how its tools are exposed to the rest of the host.
"""
from typing import Any, Dict, List
from pydantic import BaseModel, Field, field_validator


class Tool(BaseModel):
    """A single named capability exposed by a plugin."""

    name: str = Field(..., description="Tool name, unique across loaded plugins")
    description: str = Field("", description="Human readable description")
    parameters: Dict[str, Any] = Field(
        default_factory=dict,
        description="JSON Schema describing the tool arguments"
    )

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Validate that the tool name is not empty."""
        if not v.strip():
            raise ValueError("Tool name cannot be empty")
        return v

    def to_function_schema(self) -> Dict[str, Any]:
        """Render the tool as an OpenAI function-tool entry."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
                "strict": False,
            },
        }


class RegisteredTool(Tool):
    """A tool together with the plugin currently routing it."""

    plugin: str = Field(..., description="Name of the owning plugin")
    enabled: bool = Field(True, description="Whether the owning plugin is enabled")


class PluginManifest(BaseModel):
    """Identity and tool catalog of a loaded plugin."""

    name: str
    version: str
    description: str = ""
    enabled: bool = True
    tools: List[Tool] = Field(default_factory=list)
