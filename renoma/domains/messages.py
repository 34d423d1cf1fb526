"""
Chat domain models.

These models mirror the chat entities owned by the storage layer, including
the tool-call fields that the orchestration loop persists.
"""
from typing import List, Literal, Optional
from uuid import UUID, uuid4
from pydantic import BaseModel, Field

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_SYSTEM = "system"
ROLE_TOOL = "tool"


class FunctionCall(BaseModel):
    """Function name and raw argument text requested by the model."""
    name: str
    arguments: str = ""


class ToolCall(BaseModel):
    """A complete tool call attached to an assistant message."""
    id: str
    type: str = "function"
    function: FunctionCall


class ToolCallFragment(BaseModel):
    """Partially streamed tool call, keyed by its stream index."""
    index: int
    id: str = ""
    name: str = ""
    arguments: str = ""

    def append(
        self,
        id: Optional[str] = None,
        name: Optional[str] = None,
        arguments: Optional[str] = None,
    ) -> None:
        """Append the pieces carried by one stream delta."""
        if id:
            self.id += id
        if name:
            self.name += name
        if arguments:
            self.arguments += arguments

    def to_tool_call(self) -> ToolCall:
        return ToolCall(
            id=self.id,
            function=FunctionCall(name=self.name, arguments=self.arguments),
        )


class ChatMessage(BaseModel):
    """A single chat message with optional swipe alternatives."""

    id: UUID = Field(default_factory=uuid4)
    role: str = Field(..., description="user, assistant, system or tool")
    content: str = ""
    sender_id: Optional[UUID] = Field(
        None, description="For group chats: which character sent this"
    )
    alternatives: List[str] = Field(
        default_factory=list, description="Swipe alternatives (content variants)"
    )
    active_index: int = Field(
        0, description="Which variant is shown (0 = primary content)"
    )
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None

    def active_content(self) -> str:
        """Get the currently active content, considering alternatives."""
        if self.active_index == 0 or not self.alternatives:
            return self.content
        if self.active_index - 1 < len(self.alternatives):
            return self.alternatives[self.active_index - 1]
        return self.content

    def variant_count(self) -> int:
        """Total number of variants (primary plus alternatives)."""
        return 1 + len(self.alternatives)


class Character(BaseModel):
    """Character profile used to build the system prompt."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    description: str = ""
    personality: str = ""
    scenario: str = ""
    first_message: str = ""
    example_messages: str = ""


class Chat(BaseModel):
    """A chat with one character and its message history."""

    id: UUID = Field(default_factory=uuid4)
    character_id: UUID
    messages: List[ChatMessage] = Field(default_factory=list)


class CompletionRequest(BaseModel):
    """Parameters of a single completion request."""

    chat_id: UUID
    regenerate: bool = False
    message_id: Optional[UUID] = None
    model: str
    temperature: float = 0.7
    max_tokens: int = 4096
    reasoning_effort: Literal["none", "low", "medium", "high"] = "medium"
