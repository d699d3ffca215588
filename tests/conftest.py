"""Shared test fixtures for deskai-ollama tests."""

import json
import pytest

from deskai_ollama.registry import clear_providers


# ─────────────────────────────────────────────────────────────────────
# MOCK DATA
# ─────────────────────────────────────────────────────────────────────

MOCK_BASE_URL = "http://ollama.test:11434"

MOCK_CHAT_MODEL = "qwen2.5:7b"
MOCK_EMBED_MODEL = "nomic-embed-text:latest"

MOCK_TAGS_RESPONSE = {
    "models": [
        {
            "name": MOCK_CHAT_MODEL,
            "model": MOCK_CHAT_MODEL,
            "size": 4683087332,
            "details": {"family": "qwen2", "parameter_size": "7.6B"},
        },
        {
            "name": MOCK_EMBED_MODEL,
            "model": MOCK_EMBED_MODEL,
            "size": 274302450,
            "details": {"family": "nomic-bert", "parameter_size": "137M"},
        },
    ]
}

MOCK_CHAT_RESPONSE = {
    "model": MOCK_CHAT_MODEL,
    "created_at": "2024-11-02T10:00:00.000Z",
    "message": {
        "role": "assistant",
        "content": "The capital of France is Paris.",
    },
    "done": True,
    "done_reason": "stop",
}

MOCK_STREAM_LINES = [
    '{"model":"qwen2.5:7b","created_at":"2024-11-02T10:00:00.0Z","message":{"role":"assistant","content":"The"},"done":false}',
    '{"model":"qwen2.5:7b","created_at":"2024-11-02T10:00:00.1Z","message":{"role":"assistant","content":" capital"},"done":false}',
    '{"model":"qwen2.5:7b","created_at":"2024-11-02T10:00:00.2Z","message":{"role":"assistant","content":" is"},"done":false}',
    '{"model":"qwen2.5:7b","created_at":"2024-11-02T10:00:00.3Z","message":{"role":"assistant","content":" Paris."},"done":false}',
    '{"model":"qwen2.5:7b","created_at":"2024-11-02T10:00:00.4Z","message":{"role":"assistant","content":""},"done":true,"done_reason":"stop"}',
]

MOCK_EMBED_RESPONSE = {
    "model": MOCK_EMBED_MODEL,
    "embeddings": [[0.1, 0.2, 0.3, 0.4]],
}

WEATHER_TOOL = {
    "type": "function",
    "function": {
        "name": "get_weather",
        "description": "Get the current weather for a city",
        "parameters": {
            "type": "object",
            "properties": {"city": {"type": "string"}},
            "required": ["city"],
        },
    },
}


def ndjson(*lines: str) -> bytes:
    """Build an Ollama NDJSON stream body."""
    return ("\n".join(lines) + "\n").encode()


def envelope(content: str, role: str = "assistant", done: bool = False) -> str:
    """Build one streamed chat envelope line."""
    return json.dumps({
        "model": MOCK_CHAT_MODEL,
        "message": {"role": role, "content": content},
        "done": done,
    })


async def collect(body) -> list:
    """Drain an async iterator into a list."""
    return [item async for item in body]


# ─────────────────────────────────────────────────────────────────────
# FIXTURES
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def weather_tool():
    return json.loads(json.dumps(WEATHER_TOOL))


@pytest.fixture
def sample_messages():
    """Return a short conversation in host format."""
    return [
        {"role": "system", "content": "You are a helpful assistant."},
        {"role": "user", "content": "What is the capital of France?"},
    ]


@pytest.fixture(autouse=True)
def clean_registry():
    """Reset provider registrations between tests."""
    clear_providers()
    yield
    clear_providers()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove environment overrides so defaults apply."""
    for key in (
        "OLLAMA_HOST",
        "OLLAMA_TIMEOUT_SECONDS",
        "DESKAI_OLLAMA_CHAT_MODEL",
        "DESKAI_OLLAMA_EMBEDDING_MODEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
