"""
Tests for the plugin-side PluginServer.
"""

import io
import json

from renoma.plugins.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    Request,
)
from renoma.plugins.runtime import PluginServer
from renoma.plugins.tools.auto_tool import AutoTool, ToolArgumentError


class AddTool(AutoTool):
    def __init__(self):
        super().__init__(name="add", description="Add two numbers")

    def execute(self, a, b):
        if not isinstance(a, int) or not isinstance(b, int):
            raise ToolArgumentError("a and b must be integers")
        return a + b


class BrokenTool(AutoTool):
    def __init__(self):
        super().__init__(name="broken", description="Always fails")

    def execute(self, **params):
        raise RuntimeError("kaboom")


def make_server():
    return PluginServer("math", "1.2.3", "Math helpers", [AddTool(), BrokenTool()])


def call(server, method, params=None, id=1):
    return server.handle_request(Request(method=method, params=params, id=id))


def test_initialize_returns_manifest():
    response = call(make_server(), "initialize", {"host": "renoma", "version": "0.1.0"})

    assert response.error is None
    assert response.result["name"] == "math"
    assert response.result["version"] == "1.2.3"
    assert [t["name"] for t in response.result["tools"]] == ["add", "broken"]


def test_call_tool_success():
    response = call(make_server(), "call_tool", {"name": "add", "arguments": {"a": 2, "b": 3}}, id="r")
    assert response.id == "r"
    assert response.result == 5


def test_unknown_method():
    response = call(make_server(), "shutdown")
    assert response.error.code == METHOD_NOT_FOUND
    assert response.error.message == "Method not found: shutdown"


def test_unknown_tool():
    response = call(make_server(), "call_tool", {"name": "mul", "arguments": {}})
    assert response.error.code == METHOD_NOT_FOUND


def test_invalid_params():
    server = make_server()
    assert call(server, "call_tool", {"arguments": {}}).error.code == INVALID_PARAMS
    assert call(server, "call_tool", {"name": "add", "arguments": [1, 2]}).error.code == INVALID_PARAMS
    assert call(server, "call_tool", {"name": "add", "arguments": {"a": 1}}).error.code == INVALID_PARAMS
    assert (
        call(server, "call_tool", {"name": "add", "arguments": {"a": "1", "b": 2}}).error.code
        == INVALID_PARAMS
    )


def test_tool_crash_is_internal_error():
    response = call(make_server(), "call_tool", {"name": "broken", "arguments": {}})
    assert response.error.code == INTERNAL_ERROR
    assert response.error.message == "kaboom"


def test_handle_line_edge_cases():
    server = make_server()
    assert server.handle_line("") is None
    assert server.handle_line('{"jsonrpc":"2.0","method":"log"}') is None
    assert server.handle_line('{"jsonrpc":"2.0","result":1,"id":1}') is None
    assert server.handle_line("{oops").error.code == PARSE_ERROR
    assert server.handle_line("[1]").error.code == INVALID_REQUEST


def test_serve_writes_one_line_per_request():
    requests = "\n".join(
        [
            '{"jsonrpc":"2.0","method":"initialize","params":{},"id":1}',
            "",
            '{"json_rpc":"2.0","method":"call_tool","params":{"name":"add","arguments":{"a":1,"b":1}},"id":2}',
            '{"jsonrpc":"2.0","method":"log","params":null}',
        ]
    )
    stdout = io.BytesIO()
    make_server().serve(io.StringIO(requests + "\n"), stdout)

    lines = stdout.getvalue().decode("utf-8").splitlines()
    assert len(lines) == 2
    first, second = (json.loads(line) for line in lines)
    assert first["id"] == 1 and first["result"]["name"] == "math"
    assert second == {"jsonrpc": "2.0", "result": 2, "error": None, "id": 2}
