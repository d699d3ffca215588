"""
Configuration constants and Pydantic models for deskai-ollama.
"""

import os
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Literal, Optional, Union


# ─────────────────────────────────────────────────────────────────────
# DEFAULTS
# ─────────────────────────────────────────────────────────────────────

DEFAULT_BASE_URL: str = "http://localhost:11434"
DEFAULT_TIMEOUT_SECONDS: int = 300  # 5 minutes
DEFAULT_CHAT_MODEL: str = "qwen2.5:7b"
DEFAULT_EMBEDDING_MODEL: str = "nomic-embed-text:latest"

PROVIDER_NAME: str = "ollama"
PROVIDER_DESCRIPTION: str = "Get up and running with large language models."
PROVIDER_ICON: str = (
    "https://github.com/ollama/ollama/assets/3325447/"
    "0d0b44e2-8f4a-4e99-9b52-a5c1c741c8f7"
)


# ─────────────────────────────────────────────────────────────────────
# ENVIRONMENT LOADING
# ─────────────────────────────────────────────────────────────────────

def get_base_url() -> str:
    """
    Get the Ollama base URL from environment or default.

    Reads OLLAMA_HOST, the same variable the ollama CLI uses. A bare
    "host:port" value gets an http:// scheme.
    """
    value = os.environ.get("OLLAMA_HOST", "").strip()
    if not value:
        return DEFAULT_BASE_URL
    if "://" not in value:
        value = f"http://{value}"
    return value.rstrip("/")


def get_timeout_seconds() -> int:
    """
    Get request timeout in seconds.

    Set OLLAMA_TIMEOUT_SECONDS in .env (default: 300).
    """
    try:
        return int(os.environ.get("OLLAMA_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS


def get_default_chat_model() -> str:
    return os.environ.get("DESKAI_OLLAMA_CHAT_MODEL") or DEFAULT_CHAT_MODEL


def get_default_embedding_model() -> str:
    return os.environ.get("DESKAI_OLLAMA_EMBEDDING_MODEL") or DEFAULT_EMBEDDING_MODEL


# ─────────────────────────────────────────────────────────────────────
# DATA MODELS
# ─────────────────────────────────────────────────────────────────────

Role = Literal["assistant", "user", "system", "tool"]


class ModelDescriptor(BaseModel):
    """A locally available model as shown in the host's model picker."""
    label: str
    value: str


class ToolFunction(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    # Structured upstream; the host may hand it over as a JSON string
    arguments: Any = None


class ToolCall(BaseModel):
    # Ollama sends neither type nor id, plus an extra function.index
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    id: Union[int, str, None] = None
    function: ToolFunction


class ChatMessage(BaseModel):
    """A single chat turn in the host's message format."""
    model_config = ConfigDict(extra="allow")

    role: Role
    content: str = ""
    tool_calls: Optional[list[ToolCall]] = None


class StreamChunk(BaseModel):
    """
    Accumulated assistant message as seen by the host.

    Content only grows while a stream is open, so every emitted chunk
    carries the whole reply so far rather than the latest delta.
    """
    model_config = ConfigDict(extra="allow")

    role: str = "assistant"
    content: str = ""
    tool_calls: Optional[list[ToolCall]] = None


class EmbeddingResult(BaseModel):
    model: str
    embeddings: list[float]
    length: int


class ProviderConfig(BaseModel):
    """Host-editable provider settings. Replaced, never mutated."""
    model_config = ConfigDict(frozen=True)

    model: str


class ChatOptions(BaseModel):
    stream: bool = True
    model: Optional[str] = None
    tools: Optional[list[dict[str, Any]]] = None

    @field_validator("stream", mode="before")
    @classmethod
    def _null_stream_means_default(cls, value: Any) -> Any:
        return True if value is None else value


class EmbedOptions(BaseModel):
    model: Optional[str] = None


class ProviderResponse(BaseModel):
    """
    Adapter output handed back to the host.

    `body` is an async iterator of StreamChunk; it yields once for a
    non-streaming call and once per upstream line otherwise. A streaming
    body that is not read to the end should be closed with aclose().
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status_code: int = 200
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None
