"""
Completion service implementation.

This service runs the tool orchestration loop for a single completion
request: it streams model output, aggregates tool-call fragments, executes
the requested tools through the plugin manager and persists every turn.
"""

import json
import logging
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple
from uuid import UUID

from renoma.domains.messages import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_TOOL,
    ROLE_USER,
    Character,
    ChatMessage,
    CompletionRequest,
    ToolCall,
    ToolCallFragment,
)
from renoma.interfaces.plugins.plugins import PluginManager
from renoma.interfaces.providers.llm import LLMProvider
from renoma.interfaces.repositories.chat import ChatRepository, NotFoundError
from renoma.interfaces.services.completion import (
    CompletionService as CompletionServiceInterface,
)
from renoma.plugins.errors import PluginError
from renoma.services.events import (
    done_event,
    error_event,
    text_event,
    tool_calls_event,
    tool_result_event,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 5


class CompletionService(CompletionServiceInterface):
    """Service driving model generation interleaved with tool execution."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        plugin_manager: PluginManager,
        repository: ChatRepository,
        max_turns: int = DEFAULT_MAX_TURNS,
    ):
        """Initialize the completion service.

        Args:
            llm_provider: Streaming completion client
            plugin_manager: Router used to execute tool calls
            repository: Chat storage receiving every persisted turn
            max_turns: Maximum number of model turns per request
        """
        self.llm_provider = llm_provider
        self.plugin_manager = plugin_manager
        self.repository = repository
        self.max_turns = max_turns

    @staticmethod
    def build_system_prompt(character: Character) -> str:
        """Build the system prompt from a character profile."""
        system_prompt = f"Name: {character.name}"
        if character.description:
            system_prompt += f"\nDescription: {character.description}"
        if character.personality:
            system_prompt += f"\nPersonality: {character.personality}"
        if character.scenario:
            system_prompt += f"\nScenario: {character.scenario}"
        if character.example_messages:
            system_prompt += f"\nExample messages: {character.example_messages}"
        return system_prompt

    @staticmethod
    def _to_conversation_entry(message: ChatMessage) -> Optional[Dict[str, Any]]:
        content = message.active_content()
        if message.role == ROLE_USER:
            return {"role": ROLE_USER, "content": content}
        if message.role == ROLE_ASSISTANT:
            if message.tool_calls:
                return {
                    "role": ROLE_ASSISTANT,
                    "content": content or None,
                    "tool_calls": [tc.model_dump() for tc in message.tool_calls],
                }
            return {"role": ROLE_ASSISTANT, "content": content}
        if message.role == ROLE_TOOL:
            return {
                "role": ROLE_TOOL,
                "content": content,
                "tool_call_id": message.tool_call_id or "",
            }
        if message.role == ROLE_SYSTEM:
            return {"role": ROLE_SYSTEM, "content": content}
        return None

    def build_conversation(
        self,
        messages: List[ChatMessage],
        character: Optional[Character] = None,
        truncate_at: Optional[UUID] = None,
    ) -> List[Dict[str, Any]]:
        """Build the conversation, stopping before truncate_at if given.

        Args:
            messages: Stored chat messages in order
            character: Character whose profile becomes the system prompt
            truncate_at: Id of the first message to leave out

        Returns:
            Role-tagged message dicts
        """
        conversation: List[Dict[str, Any]] = []
        if character is not None:
            conversation.append(
                {"role": ROLE_SYSTEM, "content": self.build_system_prompt(character)}
            )

        for message in messages:
            if truncate_at is not None and message.id == truncate_at:
                break
            entry = self._to_conversation_entry(message)
            if entry is None:
                logger.debug(f"Skipping message {message.id} with role {message.role}")
                continue
            conversation.append(entry)
        return conversation

    def tool_schemas(self) -> List[Dict[str, Any]]:
        """Get the enabled tool catalog as function-tool entries."""
        return [
            tool.to_function_schema()
            for tool in self.plugin_manager.list_tools(include_disabled=False)
        ]

    @staticmethod
    def _collect_tool_calls(fragments: Dict[int, ToolCallFragment]) -> List[ToolCall]:
        tool_calls = []
        for index in sorted(fragments):
            fragment = fragments[index]
            if not fragment.name.strip():
                logger.warning(
                    f"Skipping unnamed tool call at index {index}; cannot send empty function name."
                )
                continue
            if not fragment.id:
                fragment.id = f"call_{index}"
            tool_calls.append(fragment.to_tool_call())
        return tool_calls

    async def _execute_tool_call(self, tool_call: ToolCall) -> Tuple[str, bool]:
        """Run one tool call, returning (content, is_error)."""
        name = tool_call.function.name
        text = tool_call.function.arguments.strip()
        try:
            arguments = json.loads(text) if text else {}
        except ValueError as e:
            logger.warning(f"Invalid arguments for tool '{name}': {e}")
            return f"Error parsing arguments: {e}", True

        try:
            result = await self.plugin_manager.call_tool(name, arguments)
        except PluginError as e:
            logger.warning(f"Tool '{name}' failed: {e}")
            return f"Error executing tool: {e}", True

        logger.info(f"Tool '{name}' executed for call {tool_call.id}")
        return json.dumps(result), False

    async def generate_response(
        self, request: CompletionRequest
    ) -> AsyncGenerator[str, None]:
        """Generate a response with tool calling and full streaming support.

        Raises (before the first frame):
            NotFoundError: If the chat, or the message to regenerate, is missing
            ValueError: If regeneration is requested without a message id
        """
        chat = await self.repository.get_chat(request.chat_id)

        truncate_at = None
        if request.regenerate:
            if request.message_id is None:
                raise ValueError("Missing message_id for regeneration")
            if not any(m.id == request.message_id for m in chat.messages):
                raise NotFoundError("Message", request.message_id)
            truncate_at = request.message_id

        try:
            character = await self.repository.get_character(chat.character_id)
        except NotFoundError:
            logger.warning(f"Character {chat.character_id} not found, no system prompt")
            character = None

        conversation = self.build_conversation(chat.messages, character, truncate_at)
        tools = self.tool_schemas()

        for turn in range(self.max_turns):
            full_response = ""
            fragments: Dict[int, ToolCallFragment] = {}

            async for event in self.llm_provider.chat_stream(
                messages=conversation,
                model=request.model,
                tools=tools if tools else None,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
                reasoning_effort=request.reasoning_effort,
            ):
                etype = event.get("type")
                if etype == "content":
                    delta = event.get("delta", "")
                    if delta:
                        full_response += delta
                        yield text_event(delta)
                elif etype == "tool_call_delta":
                    index_raw = event.get("index")
                    try:
                        index = int(index_raw) if index_raw is not None else 0
                    except (TypeError, ValueError):
                        index = 0
                    fragment = fragments.setdefault(index, ToolCallFragment(index=index))
                    fragment.append(
                        id=event.get("id"),
                        name=event.get("name"),
                        arguments=event.get("arguments_delta"),
                    )
                elif etype == "error":
                    yield error_event(event.get("error", "Unknown error"))
                    return

            tool_calls = self._collect_tool_calls(fragments)

            if not tool_calls:
                if full_response:
                    try:
                        if request.regenerate:
                            await self.repository.append_alternative(
                                request.chat_id, request.message_id, full_response
                            )
                        else:
                            await self.repository.append_message(
                                request.chat_id,
                                ChatMessage(role=ROLE_ASSISTANT, content=full_response),
                            )
                    except Exception as e:
                        logger.error(f"Failed to save response: {e}")
                        yield error_event(f"Failed to save response: {e}")
                yield done_event()
                return

            logger.info(
                f"Turn {turn + 1}: executing {len(tool_calls)} tool call(s) "
                f"{[tc.function.name for tc in tool_calls]}"
            )
            yield tool_calls_event(tool_calls)

            assistant_message = ChatMessage(
                role=ROLE_ASSISTANT, content=full_response, tool_calls=tool_calls
            )
            try:
                await self.repository.append_message(request.chat_id, assistant_message)
            except Exception as e:
                logger.error(f"Failed to save tool calls: {e}")
                yield error_event(f"Failed to save tool calls: {e}")
            conversation.append(self._to_conversation_entry(assistant_message))

            for tool_call in tool_calls:
                content, is_error = await self._execute_tool_call(tool_call)
                tool_message = ChatMessage(
                    role=ROLE_TOOL, content=content, tool_call_id=tool_call.id
                )
                conversation.append(self._to_conversation_entry(tool_message))
                try:
                    await self.repository.append_message(request.chat_id, tool_message)
                except Exception as e:
                    logger.error(f"Failed to save tool result: {e}")
                    yield error_event(f"Failed to save tool result: {e}")

                if is_error:
                    yield tool_result_event(tool_call.id, error=content)
                else:
                    yield tool_result_event(tool_call.id, result=content)

        logger.warning(
            f"Tool call limit reached after {self.max_turns} turns for chat {request.chat_id}"
        )
        yield error_event(f"Tool call limit reached after {self.max_turns} turns")
