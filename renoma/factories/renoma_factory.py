"""
Factory for creating and wiring components of the Renoma plugin host.

This module validates the configuration dictionary and handles the
dependency injection between the completion client, the plugin manager,
the chat repository and the completion service.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from renoma.adapters.openai_adapter import (
    DEFAULT_API_BASE,
    DEFAULT_CHAT_MODEL,
    OpenAIAdapter,
)
from renoma.plugins.manager import (
    DEFAULT_HOST_NAME,
    DEFAULT_HOST_VERSION,
    DEFAULT_PLUGIN_DIRECTORY,
    DEFAULT_REQUEST_TIMEOUT,
    PluginManager,
)
from renoma.repositories.local import LocalChatRepository
from renoma.services.completion import DEFAULT_MAX_TURNS, CompletionService

# Setup logger for this module
logger = logging.getLogger(__name__)


class OpenAIConfig(BaseModel):
    api_key: str
    base_url: str = DEFAULT_API_BASE
    model: str = DEFAULT_CHAT_MODEL


class LogfireConfig(BaseModel):
    api_key: str


class PluginsConfig(BaseModel):
    directory: str = DEFAULT_PLUGIN_DIRECTORY
    request_timeout: Optional[float] = Field(DEFAULT_REQUEST_TIMEOUT, gt=0)
    host_name: str = DEFAULT_HOST_NAME
    host_version: str = DEFAULT_HOST_VERSION


class StorageConfig(BaseModel):
    path: Optional[str] = None


class CompletionConfig(BaseModel):
    max_turns: int = Field(DEFAULT_MAX_TURNS, ge=1)


class RenomaConfig(BaseModel):
    """Validated host configuration."""

    openai: OpenAIConfig
    logfire: Optional[LogfireConfig] = None
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    completion: CompletionConfig = Field(default_factory=CompletionConfig)


class RenomaFactory:
    """Factory for creating and wiring components of the Renoma host."""

    @staticmethod
    def load_config(config: Dict[str, Any]) -> RenomaConfig:
        """Validate a configuration dictionary.

        Raises:
            ValueError: If the OpenAI API key is missing or a section is invalid
        """
        if "openai" not in config or "api_key" not in (config.get("openai") or {}):
            raise ValueError("OpenAI API key is required in config.")
        if "logfire" in config and "api_key" not in (config.get("logfire") or {}):
            raise ValueError("Pydantic Logfire API key is required.")
        try:
            return RenomaConfig.model_validate(config)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    @staticmethod
    def create_from_config(config: Dict[str, Any]) -> CompletionService:
        """Create the host components from configuration.

        Plugins are not spawned here; call ``discover`` on the returned
        service's plugin manager from a running event loop.

        Args:
            config: Configuration dictionary

        Returns:
            Configured CompletionService instance
        """
        settings = RenomaFactory.load_config(config)

        logger.info(
            f"Using OpenAI-compatible provider at {settings.openai.base_url} "
            f"with model: {settings.openai.model}"
        )
        llm_adapter = OpenAIAdapter(
            api_key=settings.openai.api_key,
            base_url=settings.openai.base_url,
            model=settings.openai.model,
            logfire_api_key=settings.logfire.api_key if settings.logfire else None,
        )

        plugin_manager = PluginManager(config=settings.plugins.model_dump())

        repository = LocalChatRepository(path=settings.storage.path)
        if settings.storage.path:
            logger.info(f"Using local chat storage at {settings.storage.path}")
        else:
            logger.info("Using in-memory chat storage")

        return CompletionService(
            llm_provider=llm_adapter,
            plugin_manager=plugin_manager,
            repository=repository,
            max_turns=settings.completion.max_turns,
        )
