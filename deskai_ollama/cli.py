"""CLI entry point for deskai-ollama.

Exercises the registered providers from a terminal, the same way the host
application calls them.

Entry point:
    deskai-ollama models [--json]
    deskai-ollama chat PROMPT [--model M] [--system S] [--no-stream]
    deskai-ollama embed TEXT [--model M]
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# ARGUMENT PARSING
# ─────────────────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deskai-ollama",
        description="Ollama chat and embedding providers.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command")

    # models
    models_p = sub.add_parser("models", help="List locally available models")
    models_p.add_argument(
        "--json", action="store_true", dest="json_output",
        help="Print model descriptors as JSON",
    )

    # chat
    chat_p = sub.add_parser("chat", help="Send one chat turn")
    chat_p.add_argument("prompt", help="User message")
    chat_p.add_argument("--model", "-m", default=None, help="Chat model (default: configured)")
    chat_p.add_argument("--system", "-s", default=None, help="System prompt")
    chat_p.add_argument(
        "--no-stream", action="store_false", dest="stream",
        help="Wait for the full reply instead of streaming",
    )

    # embed
    embed_p = sub.add_parser("embed", help="Embed one text")
    embed_p.add_argument("text", help="Text to embed")
    embed_p.add_argument("--model", "-m", default=None, help="Embedding model (default: configured)")

    return parser


# ─────────────────────────────────────────────────────────────────────
# COMMANDS
# ─────────────────────────────────────────────────────────────────────


async def _cmd_models(json_output: bool = False) -> int:
    """List available models. Returns exit code."""
    from deskai_ollama.config import PROVIDER_NAME
    from deskai_ollama.registry import get_llm_provider

    provider = get_llm_provider(PROVIDER_NAME)
    try:
        models = await provider.get_models()
    except httpx.HTTPError as e:
        print(f"Error: could not list models: {e}", file=sys.stderr)
        return 1

    if json_output:
        json.dump([m.model_dump() for m in models], sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        for model in models:
            print(model.value)
    return 0


async def _cmd_chat(
    prompt: str,
    model: Optional[str] = None,
    system: Optional[str] = None,
    stream: bool = True,
) -> int:
    """Send a chat turn and print the reply. Returns exit code."""
    from deskai_ollama.config import PROVIDER_NAME, ChatOptions
    from deskai_ollama.core import OllamaError, parse_ollama_error
    from deskai_ollama.registry import get_llm_provider

    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    provider = get_llm_provider(PROVIDER_NAME)
    try:
        response = await provider.chat(messages, ChatOptions(stream=stream, model=model))
    except httpx.HTTPError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if isinstance(response, httpx.Response):
        print(f"Error: {parse_ollama_error(response)}", file=sys.stderr)
        return 1

    # Chunks are cumulative: print only what each one adds
    printed = 0
    tool_calls = None
    try:
        async for chunk in response.body:
            sys.stdout.write(chunk.content[printed:])
            sys.stdout.flush()
            printed = len(chunk.content)
            if chunk.tool_calls:
                tool_calls = chunk.tool_calls
    except OllamaError as e:
        sys.stdout.write("\n")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sys.stdout.write("\n")
    if tool_calls:
        json.dump(
            [tc.model_dump() for tc in tool_calls], sys.stdout, indent=2
        )
        sys.stdout.write("\n")
    return 0


async def _cmd_embed(text: str, model: Optional[str] = None) -> int:
    """Embed a text and print the result as JSON. Returns exit code."""
    from deskai_ollama.config import PROVIDER_NAME, EmbedOptions
    from deskai_ollama.core import OllamaError
    from deskai_ollama.registry import get_embedding_provider

    provider = get_embedding_provider(PROVIDER_NAME)
    try:
        result = await provider.embed(text, EmbedOptions(model=model))
    except (httpx.HTTPError, OllamaError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    json.dump(result.model_dump(), sys.stdout)
    sys.stdout.write("\n")
    return 0


# ─────────────────────────────────────────────────────────────────────
# ENTRY POINT
# ─────────────────────────────────────────────────────────────────────


def main():
    parser = _build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s %(message)s", stream=sys.stderr)

    # Load env
    from dotenv import load_dotenv
    load_dotenv()

    # Register providers from environment
    from deskai_ollama.registry import register_default_providers
    register_default_providers()

    # Dispatch
    if args.command == "models":
        code = asyncio.run(_cmd_models(json_output=args.json_output))
    elif args.command == "chat":
        code = asyncio.run(_cmd_chat(
            prompt=args.prompt,
            model=args.model,
            system=args.system,
            stream=args.stream,
        ))
    elif args.command == "embed":
        code = asyncio.run(_cmd_embed(text=args.text, model=args.model))
    else:
        parser.print_help()
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
