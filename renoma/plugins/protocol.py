"""
Wire protocol between the host and plugin processes.

Every message is a single line of UTF-8 JSON terminated by a newline. Three
envelope shapes exist and are told apart by structure alone: a Response
carries result/error and an id, a Notification carries a method without an
id, and a Request carries a method and an id. Decoding tries them in that
order; each shape rejects the keys that identify the others and ignores
any other unknown key.

The version marker is written as ``jsonrpc``. The legacy ``json_rpc`` spelling
is accepted on input.
"""

import json
import logging
import uuid
from typing import Any, ClassVar, FrozenSet, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)

from renoma.domains.plugins import Tool

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

METHOD_INITIALIZE = "initialize"
METHOD_CALL_TOOL = "call_tool"

RequestId = Union[StrictInt, StrictStr]


def new_request_id() -> str:
    """Generate a fresh correlation id."""
    return uuid.uuid4().hex


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Keys that identify another envelope shape
    foreign_keys: ClassVar[FrozenSet[str]] = frozenset()

    jsonrpc: str = Field(
        JSONRPC_VERSION,
        validation_alias=AliasChoices("jsonrpc", "json_rpc"),
    )

    @model_validator(mode="before")
    @classmethod
    def reject_foreign_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            foreign = cls.foreign_keys.intersection(data)
            if foreign:
                raise ValueError(
                    f"Unexpected keys for {cls.__name__}: {sorted(foreign)}"
                )
        return data


class JsonRpcError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: int
    message: str
    data: Optional[Any] = None


class Request(_Envelope):
    foreign_keys = frozenset({"result", "error"})

    method: str
    params: Optional[Any] = None
    id: Optional[RequestId] = None


class Response(_Envelope):
    foreign_keys = frozenset({"method", "params"})

    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None
    id: Optional[RequestId] = None

    @classmethod
    def success(cls, id: Optional[RequestId], result: Any) -> "Response":
        return cls(result=result, id=id)

    @classmethod
    def failure(
        cls,
        id: Optional[RequestId],
        code: int,
        message: str,
        data: Optional[Any] = None,
    ) -> "Response":
        return cls(error=JsonRpcError(code=code, message=message, data=data), id=id)


class Notification(_Envelope):
    foreign_keys = frozenset({"id", "result", "error"})

    method: str
    params: Optional[Any] = None


Envelope = Union[Request, Response, Notification]

# Structural decode order
_DECODE_ORDER = (Response, Notification, Request)


class InitializeParams(BaseModel):
    host: str
    version: str


class InitializeResult(BaseModel):
    name: str
    version: str
    description: str = ""
    tools: List[Tool] = Field(default_factory=list)


class CallToolParams(BaseModel):
    name: str
    arguments: Any = Field(default_factory=dict)


def encode_message(envelope: Envelope) -> bytes:
    """Serialize an envelope to one newline-terminated UTF-8 JSON line."""
    return (envelope.model_dump_json() + "\n").encode("utf-8")


def decode_message(line: Union[str, bytes]) -> Optional[Envelope]:
    """Decode one line into an envelope.

    Returns None for anything that is not a recognizable envelope, including
    blank lines and invalid JSON.
    """
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Ignoring non UTF-8 line from plugin")
            return None
    if not line.strip():
        return None

    try:
        data = json.loads(line)
    except ValueError:
        logger.debug(f"Ignoring non JSON line from plugin: {line[:200]!r}")
        return None

    if not isinstance(data, dict):
        return None

    for model in _DECODE_ORDER:
        try:
            return model.model_validate(data)
        except ValidationError:
            continue

    logger.debug(f"Ignoring line matching no envelope shape: {line[:200]!r}")
    return None
