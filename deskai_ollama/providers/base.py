"""
Provider Protocols - the contract the host application loads providers by.

This is the WHAT (interface), not the HOW (implementation).
See ollama.py for the concrete implementation.
"""

from typing import Any, Optional, Protocol, Union

import httpx

from deskai_ollama.config import (
    ChatMessage, ChatOptions, EmbedOptions, EmbeddingResult,
    ModelDescriptor, ProviderResponse,
)


class ConfigurableProvider(Protocol):
    """
    Metadata and settings shared by every provider kind.

    The host renders `config_schema` as a settings form, seeds it with
    `default_config`, then calls `load_config` on startup and `set_config`
    whenever the user edits a single field.
    """

    name: str
    description: str
    icon: str

    @property
    def config_schema(self) -> dict[str, Any]:
        ...

    @property
    def default_config(self) -> dict[str, Any]:
        ...

    def load_config(self, config: dict[str, Any]) -> None:
        ...

    def set_config(self, key: str, value: Any) -> None:
        ...

    async def get_models(self) -> list[ModelDescriptor]:
        """Return the models this provider can serve."""
        ...


class LLMProvider(ConfigurableProvider, Protocol):
    """Chat-model provider."""

    async def chat(
        self,
        messages: list[Union[ChatMessage, dict]],
        options: Optional[ChatOptions] = None,
    ) -> Union[ProviderResponse, httpx.Response]:
        """
        Run one chat turn.

        Returns:
            ProviderResponse whose body yields StreamChunk values, or the
            upstream's failing response unmodified.
        """
        ...


class EmbeddingProvider(ConfigurableProvider, Protocol):
    """Embedding-model provider."""

    async def embed(
        self,
        text: str,
        options: Optional[EmbedOptions] = None,
    ) -> EmbeddingResult:
        ...
