"""
Tests for server-sent event framing.
"""

import json

from renoma.domains.messages import FunctionCall, ToolCall
from renoma.services.events import (
    done_event,
    error_event,
    parse_frame,
    text_event,
    tool_calls_event,
    tool_result_event,
)


def test_text_is_json_encoded():
    frame = text_event('say "hi"\n')
    assert frame == 'data: "say \\"hi\\"\\n"\n\n'
    assert parse_frame(frame) == ("text", 'say "hi"\n')


def test_marker_text_is_not_a_control_frame():
    assert parse_frame(text_event("[DONE]")) == ("text", "[DONE]")


def test_control_frames():
    assert done_event() == "data: [DONE]\n\n"
    assert error_event("boom") == "data: [ERROR] boom\n\n"
    assert parse_frame(error_event("boom")) == ("error", "boom")


def test_tool_frames():
    call = ToolCall(id="c1", function=FunctionCall(name="roll_dice", arguments="{}"))
    frame = tool_calls_event([call])
    assert frame.startswith("data: [TOOL_CALLS] ")
    kind, payload = parse_frame(frame)
    assert kind == "tool_calls"
    assert payload[0]["function"]["name"] == "roll_dice"

    assert parse_frame(tool_result_event("c1", result="7")) == (
        "tool_result",
        {"id": "c1", "result": "7"},
    )
    body = json.loads(tool_result_event("c1", error="nope")[len("data: [TOOL_RESULT] "):])
    assert body == {"id": "c1", "error": "nope"}
