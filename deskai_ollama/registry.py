"""
Provider Registry - where the host looks up chat and embedding providers.

Chat and embedding providers are registered separately and keyed by their
`name`, so one backend can offer both under the same name.

Usage:
    # At startup
    register_default_providers()

    # In host code
    provider = get_llm_provider("ollama")
    response = await provider.chat(messages, {"stream": True})
    async for chunk in response.body:
        ...
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deskai_ollama.providers.base import EmbeddingProvider, LLMProvider

_llm_providers: dict[str, "LLMProvider"] = {}
_embedding_providers: dict[str, "EmbeddingProvider"] = {}


def add_llm_provider(provider: "LLMProvider") -> None:
    """Register a chat provider under its name, replacing any previous one."""
    _llm_providers[provider.name] = provider


def add_embedding_provider(provider: "EmbeddingProvider") -> None:
    """Register an embedding provider under its name, replacing any previous one."""
    _embedding_providers[provider.name] = provider


def get_llm_provider(name: str) -> "LLMProvider":
    """
    Look up a registered chat provider.

    Raises:
        KeyError: If no chat provider has that name
    """
    try:
        return _llm_providers[name]
    except KeyError:
        raise KeyError(
            f"Unknown LLM provider '{name}'. Available: {sorted(_llm_providers)}"
        ) from None


def get_embedding_provider(name: str) -> "EmbeddingProvider":
    """
    Look up a registered embedding provider.

    Raises:
        KeyError: If no embedding provider has that name
    """
    try:
        return _embedding_providers[name]
    except KeyError:
        raise KeyError(
            f"Unknown embedding provider '{name}'. Available: {sorted(_embedding_providers)}"
        ) from None


def list_llm_providers() -> list[str]:
    return sorted(_llm_providers)


def list_embedding_providers() -> list[str]:
    return sorted(_embedding_providers)


def clear_providers() -> None:
    """
    Clear all registered providers.

    Primarily useful for testing to reset state between tests.
    """
    _llm_providers.clear()
    _embedding_providers.clear()


def register_default_providers() -> None:
    """
    Register the Ollama chat and embedding providers.

    Base URL, timeout and default models come from the environment
    (OLLAMA_HOST, OLLAMA_TIMEOUT_SECONDS, DESKAI_OLLAMA_CHAT_MODEL,
    DESKAI_OLLAMA_EMBEDDING_MODEL).
    """
    from deskai_ollama.providers.ollama import OllamaChatProvider, OllamaEmbeddingProvider

    add_llm_provider(OllamaChatProvider())
    add_embedding_provider(OllamaEmbeddingProvider())
