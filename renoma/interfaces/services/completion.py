from abc import ABC, abstractmethod
from typing import Any, AsyncGenerator, Dict, List, Optional
from uuid import UUID

from renoma.domains.messages import Character, ChatMessage, CompletionRequest


class CompletionService(ABC):
    """Interface for the tool orchestration loop."""

    @abstractmethod
    def build_conversation(
        self,
        messages: List[ChatMessage],
        character: Optional[Character] = None,
        truncate_at: Optional[UUID] = None,
    ) -> List[Dict[str, Any]]:
        """Build the role-tagged conversation sent to the model."""
        pass

    @abstractmethod
    def tool_schemas(self) -> List[Dict[str, Any]]:
        """Get the tool catalog in model function-tool format."""
        pass

    @abstractmethod
    async def generate_response(
        self, request: CompletionRequest
    ) -> AsyncGenerator[str, None]:
        """Run the orchestration loop, yielding server-sent event frames."""
        pass
