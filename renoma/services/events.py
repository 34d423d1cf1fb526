"""
Server-sent event framing for the completion stream.

Each frame is ``data: <payload>\\n\\n``. Text deltas are JSON-encoded
strings; control payloads start with a bracketed marker.
"""
import json
from typing import Any, List, Optional, Tuple

from renoma.domains.messages import ToolCall

DONE = "[DONE]"
ERROR = "[ERROR]"
TOOL_CALLS = "[TOOL_CALLS]"
TOOL_RESULT = "[TOOL_RESULT]"


def sse(payload: str) -> str:
    return f"data: {payload}\n\n"


def text_event(text: str) -> str:
    return sse(json.dumps(text))


def done_event() -> str:
    return sse(DONE)


def error_event(message: str) -> str:
    return sse(f"{ERROR} {message}")


def tool_calls_event(tool_calls: List[ToolCall]) -> str:
    payload = json.dumps([tc.model_dump() for tc in tool_calls])
    return sse(f"{TOOL_CALLS} {payload}")


def tool_result_event(
    tool_call_id: str, result: Optional[Any] = None, error: Optional[str] = None
) -> str:
    body = {"id": tool_call_id}
    if error is not None:
        body["error"] = error
    else:
        body["result"] = result
    return sse(f"{TOOL_RESULT} {json.dumps(body)}")


def parse_frame(frame: str) -> Tuple[str, Any]:
    """Split a frame into its kind and decoded payload.

    Kinds are ``text``, ``done``, ``error``, ``tool_calls`` and ``tool_result``.
    """
    payload = frame.strip()
    if payload.startswith("data:"):
        payload = payload[len("data:"):].strip()

    if payload == DONE:
        return "done", None
    if payload.startswith(ERROR):
        return "error", payload[len(ERROR):].strip()
    if payload.startswith(TOOL_CALLS):
        return "tool_calls", json.loads(payload[len(TOOL_CALLS):])
    if payload.startswith(TOOL_RESULT):
        return "tool_result", json.loads(payload[len(TOOL_RESULT):])
    return "text", json.loads(payload)
