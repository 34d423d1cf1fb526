"""
Tests for the OpenAIAdapter completion client.

The AsyncOpenAI client is replaced with a mock whose create() returns an
async iterator of chunk namespaces shaped like the SDK's stream chunks.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from openai import OpenAIError

from renoma.adapters.openai_adapter import (
    DEFAULT_API_BASE,
    DEFAULT_CHAT_MODEL,
    OpenAIAdapter,
)


def chunk(content=None, tool_calls=None, finish_reason=None):
    delta = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(delta=delta, finish_reason=finish_reason)]
    )


def tool_call_chunk(index, id=None, name=None, arguments=None):
    function = SimpleNamespace(name=name, arguments=arguments)
    return chunk(tool_calls=[SimpleNamespace(index=index, id=id, function=function)])


class FakeStream:
    def __init__(self, chunks):
        self._chunks = list(chunks)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._chunks:
            raise StopAsyncIteration
        return self._chunks.pop(0)


@pytest.fixture
def adapter():
    with patch("renoma.adapters.openai_adapter.AsyncOpenAI") as client_class:
        client = MagicMock()
        client.chat.completions.create = AsyncMock()
        client_class.return_value = client
        yield OpenAIAdapter(api_key="test-key")


async def collect(adapter, **kwargs):
    return [event async for event in adapter.chat_stream(**kwargs)]


def test_defaults():
    with patch("renoma.adapters.openai_adapter.AsyncOpenAI") as client_class:
        adapter = OpenAIAdapter(api_key="k")
    client_class.assert_called_once_with(api_key="k", base_url=DEFAULT_API_BASE)
    assert adapter.text_model == DEFAULT_CHAT_MODEL
    assert adapter.logfire is False


def test_logfire_instrumentation():
    with patch("renoma.adapters.openai_adapter.AsyncOpenAI"), patch(
        "renoma.adapters.openai_adapter.logfire"
    ) as logfire:
        adapter = OpenAIAdapter(api_key="k", logfire_api_key="lf")
    logfire.configure.assert_called_once_with(token="lf")
    logfire.instrument_openai.assert_called_once_with(adapter.client)
    assert adapter.logfire is True


def test_logfire_failure_is_tolerated():
    with patch("renoma.adapters.openai_adapter.AsyncOpenAI"), patch(
        "renoma.adapters.openai_adapter.logfire"
    ) as logfire:
        logfire.configure.side_effect = RuntimeError("no network")
        adapter = OpenAIAdapter(api_key="k", logfire_api_key="lf")
    assert adapter.logfire is False


@pytest.mark.asyncio
async def test_streams_content_and_tool_call_deltas(adapter):
    adapter.client.chat.completions.create.return_value = FakeStream(
        [
            SimpleNamespace(choices=[]),
            chunk(content="Rolling"),
            tool_call_chunk(0, id="call_1", name="roll_dice", arguments=""),
            tool_call_chunk(0, arguments='{"notation":"2d6"}'),
            chunk(finish_reason="tool_calls"),
        ]
    )

    events = await collect(
        adapter,
        messages=[{"role": "user", "content": "roll"}],
        tools=[{"type": "function", "function": {"name": "roll_dice"}}],
        temperature=0.7,
        max_tokens=4096,
        reasoning_effort="medium",
    )

    assert events == [
        {"type": "content", "delta": "Rolling"},
        {
            "type": "tool_call_delta",
            "index": 0,
            "id": "call_1",
            "name": "roll_dice",
            "arguments_delta": "",
        },
        {
            "type": "tool_call_delta",
            "index": 0,
            "id": None,
            "name": None,
            "arguments_delta": '{"notation":"2d6"}',
        },
        {"type": "message_end", "finish_reason": "tool_calls"},
    ]
    kwargs = adapter.client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == DEFAULT_CHAT_MODEL
    assert kwargs["stream"] is True
    assert kwargs["tools"][0]["function"]["name"] == "roll_dice"
    assert kwargs["temperature"] == 0.7
    assert kwargs["max_tokens"] == 4096
    assert kwargs["reasoning_effort"] == "medium"


@pytest.mark.asyncio
async def test_omits_unset_options(adapter):
    adapter.client.chat.completions.create.return_value = FakeStream([])

    await collect(adapter, messages=[], model="other/model")

    kwargs = adapter.client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "other/model"
    for key in ("tools", "temperature", "max_tokens", "reasoning_effort"):
        assert key not in kwargs


@pytest.mark.asyncio
async def test_api_error_becomes_error_event(adapter):
    adapter.client.chat.completions.create.side_effect = OpenAIError("rate limited")

    events = await collect(adapter, messages=[])

    assert events == [{"type": "error", "error": "OpenAI Error: rate limited"}]


@pytest.mark.asyncio
async def test_unexpected_error_becomes_error_event(adapter):
    adapter.client.chat.completions.create.side_effect = RuntimeError("boom")

    events = await collect(adapter, messages=[])

    assert events == [{"type": "error", "error": "boom"}]
