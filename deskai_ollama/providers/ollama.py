"""
Ollama implementations of the LLMProvider and EmbeddingProvider protocols.

Both providers share one settings shape (a single `model` field chosen from
the locally pulled models) and talk to the same Ollama server.
"""

import logging
from typing import Any, Optional, Union

import httpx

from deskai_ollama import core
from deskai_ollama.config import (
    ChatMessage, ChatOptions, EmbedOptions, EmbeddingResult,
    ModelDescriptor, ProviderConfig, ProviderResponse,
    PROVIDER_DESCRIPTION, PROVIDER_ICON, PROVIDER_NAME,
    get_base_url, get_default_chat_model, get_default_embedding_model,
    get_timeout_seconds,
)

logger = logging.getLogger(__name__)


class _OllamaProvider:
    """Settings and model discovery common to both Ollama providers."""

    name = PROVIDER_NAME
    description = PROVIDER_DESCRIPTION
    icon = PROVIDER_ICON

    # Title of the model picker in the host's settings form
    model_title = "Model"

    def __init__(
        self,
        default_model: str,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self._base_url = (base_url or get_base_url()).rstrip("/")
        self._timeout = timeout_seconds or get_timeout_seconds()
        self._default_model = default_model
        self._config = ProviderConfig(model=default_model)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def default_config(self) -> dict[str, Any]:
        return {"model": self._default_model}

    @property
    def config_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "model": {
                    "type": "dynamic-enum",
                    "title": self.model_title,
                    "dynamic_handler": self.model_choices,
                },
            },
        }

    def load_config(self, config: dict[str, Any]) -> None:
        """Replace the settings with a stored config dict."""
        self._config = ProviderConfig(model=config.get("model") or self._default_model)

    def set_config(self, key: str, value: Any) -> None:
        """Apply a single edited field. Only `model` is recognised."""
        if key != "model":
            logger.debug(f"Ignoring unknown {self.name} config key '{key}'")
            return
        self._config = self._config.model_copy(update={"model": value})

    def resolve_model(self, requested: Optional[str]) -> str:
        return requested or self._config.model

    async def get_models(self) -> list[ModelDescriptor]:
        return await core.fetch_models(self._base_url, timeout_seconds=self._timeout)

    async def model_choices(self) -> dict[str, list[str]]:
        """Dynamic-enum handler: model ids and their display names."""
        models = await self.get_models()
        return {
            "enum": [m.value for m in models],
            "enumNames": [m.label for m in models],
        }


class OllamaChatProvider(_OllamaProvider):
    """
    Chat provider backed by Ollama's /api/chat.

    Streaming replies are re-framed into cumulative StreamChunk values:
    each chunk repeats the whole reply so far, so consumers replace their
    view with every chunk instead of appending.
    """

    model_title = "Chat Model"

    def __init__(
        self,
        default_model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        super().__init__(
            default_model or get_default_chat_model(),
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    async def chat(
        self,
        messages: list[Union[ChatMessage, dict]],
        options: Optional[Union[ChatOptions, dict]] = None,
    ) -> Union[ProviderResponse, httpx.Response]:
        if not isinstance(options, ChatOptions):
            options = ChatOptions.model_validate(options or {})
        model = self.resolve_model(options.model)

        return await core.chat(
            self._base_url,
            model,
            messages,
            stream=options.stream,
            tools=options.tools,
            timeout_seconds=self._timeout,
        )


class OllamaEmbeddingProvider(_OllamaProvider):
    """Embedding provider backed by Ollama's /api/embed."""

    model_title = "Embedding Model"

    def __init__(
        self,
        default_model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        super().__init__(
            default_model or get_default_embedding_model(),
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    async def embed(
        self,
        text: str,
        options: Optional[Union[EmbedOptions, dict]] = None,
    ) -> EmbeddingResult:
        if not isinstance(options, EmbedOptions):
            options = EmbedOptions.model_validate(options or {})
        model = self.resolve_model(options.model)

        return await core.embed(
            self._base_url,
            model,
            text,
            timeout_seconds=self._timeout,
        )
