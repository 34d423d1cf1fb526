"""
Tests for the AutoTool base class.

This module covers the tool description sent during the handshake and the
default behaviour of the base class.
"""

import pytest

from renoma.domains.plugins import Tool
from renoma.plugins.tools.auto_tool import AutoTool, ToolArgumentError


class GreetTool(AutoTool):
    """Concrete implementation of AutoTool for testing."""

    def __init__(self):
        super().__init__(name="greet", description="Say hello")

    def get_schema(self):
        return {
            "type": "object",
            "properties": {"who": {"type": "string"}},
            "required": ["who"],
        }

    def execute(self, who):
        return f"Hello, {who}!"


def test_properties():
    tool = GreetTool()
    assert tool.name == "greet"
    assert tool.description == "Say hello"


def test_to_tool_uses_schema():
    tool = GreetTool().to_tool()
    assert isinstance(tool, Tool)
    assert tool.name == "greet"
    assert tool.parameters["required"] == ["who"]


def test_default_schema_and_execute():
    tool = AutoTool("bare", "Nothing to see")
    assert tool.get_schema() == {"type": "object", "properties": {}}
    with pytest.raises(NotImplementedError):
        tool.execute()


def test_argument_error_is_value_error():
    assert issubclass(ToolArgumentError, ValueError)
