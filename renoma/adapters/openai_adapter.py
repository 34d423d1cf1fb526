"""
Completion client adapter for OpenAI-compatible APIs.

This adapter implements the LLMProvider interface on top of the OpenAI SDK's
streaming chat completions, which OpenRouter and most self-hosted gateways
also speak.
"""

import logging
from typing import Any, AsyncGenerator, Dict, List, Literal, Optional

import logfire
from openai import AsyncOpenAI, OpenAIError

from renoma.interfaces.providers.llm import LLMProvider

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://openrouter.ai/api/v1"
DEFAULT_CHAT_MODEL = "tngtech/deepseek-r1t2-chimera:free"


class OpenAIAdapter(LLMProvider):
    """OpenAI-compatible implementation of LLMProvider using Chat Completions."""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        logfire_api_key: Optional[str] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url or DEFAULT_API_BASE
        self.client = AsyncOpenAI(api_key=api_key, base_url=self.base_url)
        self.text_model = model or DEFAULT_CHAT_MODEL

        self.logfire = False
        if logfire_api_key:
            try:
                logfire.configure(token=logfire_api_key)
                self.logfire = True
                logfire.instrument_openai(self.client)
                logger.info(
                    "Logfire configured and OpenAI client instrumented successfully."
                )
            except Exception as e:
                logger.error(f"Failed to configure Logfire: {e}")
                self.logfire = False

    async def chat_stream(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        reasoning_effort: Optional[Literal["none", "low", "medium", "high"]] = None,
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """Stream content and tool call deltas from the chat completions API."""
        request_params: Dict[str, Any] = {
            "model": model or self.text_model,
            "messages": messages,
            "stream": True,
        }
        if tools:
            request_params["tools"] = tools
        if temperature is not None:
            request_params["temperature"] = temperature
        if max_tokens is not None:
            request_params["max_tokens"] = max_tokens
        if reasoning_effort:
            request_params["reasoning_effort"] = reasoning_effort

        try:
            stream = await self.client.chat.completions.create(**request_params)
            async for chunk in stream:
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                delta = choice.delta

                content = getattr(delta, "content", None)
                if content:
                    yield {"type": "content", "delta": content}

                for tc in getattr(delta, "tool_calls", None) or []:
                    function = getattr(tc, "function", None)
                    yield {
                        "type": "tool_call_delta",
                        "index": tc.index,
                        "id": tc.id,
                        "name": getattr(function, "name", None),
                        "arguments_delta": getattr(function, "arguments", None) or "",
                    }

                if choice.finish_reason:
                    yield {"type": "message_end", "finish_reason": choice.finish_reason}
        except OpenAIError as e:
            logger.error(f"OpenAI API error during chat stream: {e}")
            yield {"type": "error", "error": f"OpenAI Error: {e}"}
        except Exception as e:
            logger.exception(f"Error in chat_stream: {e}")
            yield {"type": "error", "error": str(e)}
