"""
Plugin-side runtime.

A PluginServer reads requests from stdin, answers ``initialize`` with the
plugin manifest and dispatches ``call_tool`` to its AutoTool instances,
writing one response line per request to stdout. Logging goes to stderr,
which the host passes through untouched.
"""

import json
import logging
import sys
from typing import IO, Iterable, List, Optional

from pydantic import ValidationError

from renoma.plugins.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_CALL_TOOL,
    METHOD_INITIALIZE,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    CallToolParams,
    InitializeResult,
    Request,
    Response,
    decode_message,
    encode_message,
)
from renoma.plugins.tools.auto_tool import AutoTool, ToolArgumentError

logger = logging.getLogger(__name__)


class PluginServer:
    """Serves a set of tools over the line protocol."""

    def __init__(
        self,
        name: str,
        version: str,
        description: str,
        tools: Iterable[AutoTool],
    ):
        self.name = name
        self.version = version
        self.description = description
        self.tools = {tool.name: tool for tool in tools}

    def manifest(self) -> InitializeResult:
        return InitializeResult(
            name=self.name,
            version=self.version,
            description=self.description,
            tools=[tool.to_tool() for tool in self.tools.values()],
        )

    def handle_line(self, line: str) -> Optional[Response]:
        """Handle one input line, returning the response to write if any."""
        if not line.strip():
            return None
        try:
            json.loads(line)
        except ValueError as e:
            return Response.failure(None, PARSE_ERROR, f"Parse error: {e}")

        message = decode_message(line)
        if message is None:
            return Response.failure(None, INVALID_REQUEST, "Invalid request")
        if not isinstance(message, Request):
            # Notifications and stray responses need no reply
            return None
        return self.handle_request(message)

    def handle_request(self, request: Request) -> Response:
        if request.method == METHOD_INITIALIZE:
            logger.info(f"Initialize from host: {request.params}")
            return Response.success(request.id, self.manifest().model_dump())
        if request.method == METHOD_CALL_TOOL:
            return self._call_tool(request)
        return Response.failure(
            request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}"
        )

    def _call_tool(self, request: Request) -> Response:
        try:
            params = CallToolParams.model_validate(request.params or {})
        except ValidationError as e:
            return Response.failure(request.id, INVALID_PARAMS, f"Invalid params: {e}")

        tool = self.tools.get(params.name)
        if tool is None:
            return Response.failure(
                request.id, METHOD_NOT_FOUND, f"Method not found: {params.name}"
            )

        arguments = params.arguments if params.arguments is not None else {}
        if not isinstance(arguments, dict):
            return Response.failure(
                request.id, INVALID_PARAMS, "Tool arguments must be an object"
            )

        try:
            result = tool.execute(**arguments)
        except (ToolArgumentError, TypeError) as e:
            return Response.failure(request.id, INVALID_PARAMS, str(e))
        except Exception as e:
            logger.exception(f"Tool {params.name} failed: {e}")
            return Response.failure(request.id, INTERNAL_ERROR, str(e))
        return Response.success(request.id, result)

    def serve(self, stdin: IO[str] = None, stdout: IO[bytes] = None) -> None:
        """Answer requests until stdin is closed."""
        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout.buffer
        for line in stdin:
            response = self.handle_line(line)
            if response is None:
                continue
            stdout.write(encode_message(response))
            stdout.flush()


def run_plugin(name: str, version: str, description: str, tools: List[AutoTool]) -> None:
    """Entry point helper for plugin executables."""
    logging.basicConfig(
        level=logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    PluginServer(name, version, description, tools).serve()
