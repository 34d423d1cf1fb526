"""
Tests for chat and plugin domain models.

This module tests the chat message variants, tool call fragment
aggregation and tool validation, using both standard pytest tests and
property-based testing with hypothesis.
"""

import pytest
from hypothesis import given, strategies as st
from pydantic import ValidationError

from renoma.domains.messages import ChatMessage, CompletionRequest, ToolCallFragment
from renoma.domains.plugins import PluginManifest, RegisteredTool, Tool


class TestChatMessage:
    def test_defaults(self):
        message = ChatMessage(role="user", content="hi")
        assert message.alternatives == []
        assert message.active_index == 0
        assert message.tool_calls is None
        assert message.variant_count() == 1
        assert message.active_content() == "hi"

    def test_active_alternative(self):
        message = ChatMessage(
            role="assistant", content="a", alternatives=["b", "c"], active_index=2
        )
        assert message.active_content() == "c"
        assert message.variant_count() == 3

    def test_out_of_range_index_falls_back(self):
        message = ChatMessage(role="assistant", content="a", alternatives=["b"], active_index=5)
        assert message.active_content() == "a"


class TestToolCallFragment:
    def test_concatenates_split_pieces(self):
        fragment = ToolCallFragment(index=0)
        fragment.append(id="call_", name="roll_")
        fragment.append(id="abc", name="dice", arguments='{"notation"')
        fragment.append(arguments=': "2d6"}')

        call = fragment.to_tool_call()
        assert call.id == "call_abc"
        assert call.type == "function"
        assert call.function.name == "roll_dice"
        assert call.function.arguments == '{"notation": "2d6"}'

    def test_identical_split_pieces_are_concatenated(self):
        fragment = ToolCallFragment(index=0)
        fragment.append(id="ab")
        fragment.append(id="ab", name="roll_")
        fragment.append(name="roll_")
        assert fragment.id == "abab"
        assert fragment.name == "roll_roll_"

    @given(pieces=st.lists(st.text(), max_size=10))
    def test_arguments_are_concatenated_in_order(self, pieces):
        fragment = ToolCallFragment(index=0)
        for piece in pieces:
            fragment.append(arguments=piece)
        assert fragment.arguments == "".join(pieces)


class TestCompletionRequest:
    def test_defaults(self):
        request = CompletionRequest(chat_id="7f3c5a52-0a31-4c5b-9d8e-0c3c7a1b2d4e", model="m")
        assert request.temperature == 0.7
        assert request.max_tokens == 4096
        assert request.reasoning_effort == "medium"
        assert request.regenerate is False

    def test_rejects_unknown_effort(self):
        with pytest.raises(ValidationError):
            CompletionRequest(
                chat_id="7f3c5a52-0a31-4c5b-9d8e-0c3c7a1b2d4e",
                model="m",
                reasoning_effort="extreme",
            )


class TestPluginModels:
    def test_tool_name_cannot_be_blank(self):
        with pytest.raises(ValidationError):
            Tool(name="   ")

    def test_manifest_defaults(self):
        manifest = PluginManifest(name="dice_roll", version="0.1.0")
        assert manifest.enabled is True
        assert manifest.tools == []
        assert manifest.description == ""

    def test_registered_tool_keeps_owner(self):
        tool = RegisteredTool(name="roll_dice", plugin="dice_roll", enabled=False)
        assert tool.to_function_schema()["function"]["name"] == "roll_dice"
        assert tool.plugin == "dice_roll"
        assert tool.enabled is False
