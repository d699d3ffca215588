"""
Core logic: model discovery, chat stream re-framing, embeddings.

Talks to a local Ollama server over its native HTTP API:
    GET  /api/tags   model catalog
    POST /api/chat   chat turns (NDJSON stream or single JSON body)
    POST /api/embed  embedding vectors
"""

import copy
import json
import logging
import time
from typing import AsyncGenerator, Optional, Union

import httpx

from deskai_ollama.config import (
    ChatMessage, EmbeddingResult, ModelDescriptor, ProviderResponse,
    StreamChunk, ToolCall, ToolFunction,
    DEFAULT_TIMEOUT_SECONDS,
)
from deskai_ollama.tool_calls import ToolCallFound, parse_tool_call

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class OllamaError(Exception):
    """Human-readable error from the Ollama API."""
    pass


class OllamaStreamError(OllamaError):
    """Transport failure while a chat stream was open."""
    pass


def parse_ollama_error(response: httpx.Response) -> str:
    """Extract a user-friendly error message from an Ollama response."""
    try:
        data = response.json()
        # Ollama returns {"error": "model 'x' not found"}
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, str) and error:
                return error
            if isinstance(error, dict) and error.get("message"):
                return error["message"]
        return f"HTTP {response.status_code}: {response.text[:200]}"
    except Exception:
        return f"HTTP {response.status_code}: {response.text[:200]}"


# ─────────────────────────────────────────────────────────────────────
# MODEL DISCOVERY
# ─────────────────────────────────────────────────────────────────────

async def fetch_models(
    base_url: str,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[ModelDescriptor]:
    """
    Fetch the local model catalog.

    Network, HTTP status and body errors propagate to the caller.
    """
    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        response = await client.get(f"{base_url}/api/tags")
        response.raise_for_status()
        data = response.json()
    # Ollama returns {"models": [{"name": "qwen2.5:7b", ...}, ...]}
    return [
        ModelDescriptor(label=m["name"], value=m["name"])
        for m in data["models"]
    ]


# ─────────────────────────────────────────────────────────────────────
# CHAT
# ─────────────────────────────────────────────────────────────────────

def normalize_messages(messages: list[Union[ChatMessage, dict]]) -> list[dict]:
    """
    Convert host messages to the payload Ollama expects.

    Tool call arguments arrive from the host as serialized JSON strings
    (OpenAI style); Ollama wants objects. Input messages are not mutated.
    """
    normalized = []
    for message in messages:
        if isinstance(message, ChatMessage):
            item = message.model_dump(exclude_none=True)
        else:
            item = copy.deepcopy(message)

        for tool_call in item.get("tool_calls") or []:
            func = tool_call.get("function") or {}
            arguments = func.get("arguments")
            if isinstance(arguments, str) and arguments:
                func["arguments"] = json.loads(arguments)
        normalized.append(item)
    return normalized


def _response_headers(model: str, stream: bool) -> dict[str, str]:
    return {
        "Content-Type": "text/event-stream" if stream else "application/json",
        "model": model,
    }


async def _single_chunk(message: dict) -> AsyncGenerator[StreamChunk, None]:
    yield StreamChunk.model_validate(message)


def _tool_call_chunk(chunk: StreamChunk, found: ToolCallFound) -> StreamChunk:
    """Final chunk carrying a tool call recovered from plain-text content."""
    tool_call = ToolCall(
        type="function",
        id=int(time.time() * 1000),
        function=ToolFunction(name=found.name, arguments=found.arguments),
    )
    return chunk.model_copy(update={"tool_calls": [tool_call]}, deep=True)


async def reframe_stream(
    lines: AsyncGenerator[str, None],
    tools: Optional[list[dict]] = None,
) -> AsyncGenerator[StreamChunk, None]:
    """
    Re-frame Ollama's NDJSON chat stream into cumulative chunks.

    Each envelope's message content is appended to one accumulator and a
    snapshot of the accumulator is yielded after every decoded line. Lines
    that do not decode are logged and skipped. Once the upstream is
    exhausted the full content is checked for a text-encoded tool call; if
    one names an offered tool, a last chunk carrying it is yielded.
    """
    chunk = StreamChunk(role="assistant", content="")

    async for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            envelope = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping undecodable stream line {line[:200]!r}: {e}")
            continue
        if not isinstance(envelope, dict):
            logger.warning(f"Skipping non-object stream line {line[:200]!r}")
            continue

        message = envelope.get("message")
        if not isinstance(message, dict):
            message = {}
        if message.get("role"):
            chunk.role = message["role"]
        if message.get("content"):
            chunk.content += message["content"]
        yield chunk.model_copy(deep=True)

    outcome = parse_tool_call(chunk.content, tools)
    if isinstance(outcome, ToolCallFound):
        logger.debug(f"Recovered tool call '{outcome.name}' from content")
        yield _tool_call_chunk(chunk, outcome)


async def _stream_body(
    client: httpx.AsyncClient,
    response: httpx.Response,
    model: str,
    tools: Optional[list[dict]],
) -> AsyncGenerator[StreamChunk, None]:
    """Drive reframe_stream() over an open response and own its cleanup."""
    try:
        async for chunk in reframe_stream(response.aiter_lines(), tools):
            yield chunk
    except httpx.HTTPError as e:
        logger.error(f"Ollama stream for '{model}' failed: {e}")
        raise OllamaStreamError(f"Ollama stream failed for '{model}': {e}") from e
    finally:
        await response.aclose()
        await client.aclose()


class ChunkStream:
    """
    Body of a streaming ProviderResponse.

    Iterating it drains the upstream and releases the connection at the
    end. A caller that stops early, or never starts, must call aclose().
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        response: httpx.Response,
        model: str,
        tools: Optional[list[dict]] = None,
    ):
        self._client = client
        self._response = response
        self._chunks = _stream_body(client, response, model, tools)

    def __aiter__(self) -> AsyncGenerator[StreamChunk, None]:
        return self._chunks

    async def aclose(self) -> None:
        await self._chunks.aclose()
        await self._response.aclose()
        await self._client.aclose()


async def chat(
    base_url: str,
    model: str,
    messages: list[Union[ChatMessage, dict]],
    stream: bool = True,
    tools: Optional[list[dict]] = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> Union[ProviderResponse, httpx.Response]:
    """
    Send a chat turn to Ollama.

    Returns a ProviderResponse whose body yields StreamChunk values. When
    Ollama answers with a non-2xx status the failing httpx.Response is
    returned as-is, already read and closed.
    """
    payload = {
        "messages": normalize_messages(messages),
        "model": model,
        "stream": stream,
    }
    if tools is not None:
        payload["tools"] = tools
    url = f"{base_url}/api/chat"
    logger.debug(f"POST {url} model={model} stream={stream} messages={len(messages)}")

    if not stream:
        async with httpx.AsyncClient(timeout=timeout_seconds) as client:
            response = await client.post(url, json=payload, headers=JSON_HEADERS)
        if not response.is_success:
            logger.debug(f"Ollama chat error for '{model}': {parse_ollama_error(response)}")
            return response
        data = response.json()
        return ProviderResponse(
            status_code=200,
            headers=_response_headers(model, stream=False),
            body=_single_chunk(data["message"]),
        )

    client = httpx.AsyncClient(timeout=timeout_seconds)
    try:
        request = client.build_request("POST", url, json=payload, headers=JSON_HEADERS)
        response = await client.send(request, stream=True)
    except BaseException:
        await client.aclose()
        raise

    if not response.is_success:
        try:
            await response.aread()
        finally:
            await response.aclose()
            await client.aclose()
        logger.debug(f"Ollama chat error for '{model}': {parse_ollama_error(response)}")
        return response

    return ProviderResponse(
        status_code=200,
        headers=_response_headers(model, stream=True),
        body=ChunkStream(client, response, model, tools),
    )


# ─────────────────────────────────────────────────────────────────────
# EMBEDDINGS
# ─────────────────────────────────────────────────────────────────────

async def embed(
    base_url: str,
    model: str,
    text: str,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> EmbeddingResult:
    """
    Embed a single text.

    Ollama returns {"model": ..., "embeddings": [[...]]}; the first (only)
    vector is unwrapped.
    """
    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        response = await client.post(
            f"{base_url}/api/embed",
            json={"input": [text], "model": model},
            headers=JSON_HEADERS,
        )
        response.raise_for_status()
        data = response.json()

    embeddings = data.get("embeddings") or []
    if not embeddings:
        raise OllamaError(f"Ollama returned no embedding for '{model}'")
    vector = embeddings[0]
    return EmbeddingResult(
        model=data.get("model", model),
        embeddings=vector,
        length=len(vector),
    )
