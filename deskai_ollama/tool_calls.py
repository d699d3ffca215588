"""
Tool call detection for models that answer in plain text.

Ollama reports native tool calls in `message.tool_calls`, but many local
models (Qwen, Hermes finetunes) write the call into the content instead:

    <tool_call>{"name": "get_weather", "arguments": {"city": "Tokyo"}}</tool_call>

or emit the bare JSON object. parse_tool_call() turns the final
accumulated content into an explicit outcome: ToolCallFound when the text
is a call to one of the offered tools, PlainText otherwise.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional, Union


TOOL_CALL_PATTERN = re.compile(r"<tool_call>(.*?)</tool_call>", re.DOTALL)


@dataclass
class ToolCallFound:
    """Content was a call to an offered tool."""
    name: str
    arguments: Any


@dataclass
class PlainText:
    """Content is an ordinary reply."""
    text: str


ToolCallOutcome = Union[ToolCallFound, PlainText]


def extract_tool_call(text: str) -> Optional[str]:
    """Return the trimmed payload of the first <tool_call> wrapper, if any."""
    match = TOOL_CALL_PATTERN.search(text)
    if match and match.group(1):
        return match.group(1).strip()
    return None


def tool_names(tools: Optional[list[dict]]) -> set[str]:
    """
    Collect function names from tool definitions.

    Accepts OpenAI nested format ({"type": "function", "function": {...}})
    and the flat {"name": ...} format.
    """
    names = set()
    for tool in tools or []:
        if not isinstance(tool, dict):
            continue
        func = tool.get("function")
        if isinstance(func, dict) and func.get("name"):
            names.add(func["name"])
        elif tool.get("name"):
            names.add(tool["name"])
    return names


def _first_set(*values: Any) -> Any:
    """
    First value that counts as given.

    Empty objects and lists count (a zero-argument call is `"arguments": {}`);
    null, false, 0 and "" do not.
    """
    for value in values:
        if isinstance(value, (dict, list)) or value:
            return value
    return None


def parse_tool_call(text: str, tools: Optional[list[dict]]) -> ToolCallOutcome:
    """
    Interpret a finished reply as a tool invocation.

    Args:
        text: Full accumulated assistant content
        tools: Tool definitions that were offered to the model

    Returns:
        ToolCallFound if the text is a JSON object naming an offered tool
        and carrying `parameters` or `arguments`, PlainText otherwise.
    """
    payload = extract_tool_call(text) or text
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, TypeError):
        return PlainText(text)

    if not isinstance(data, dict):
        return PlainText(text)

    name = data.get("name")
    arguments = _first_set(data.get("parameters"), data.get("arguments"))
    if not isinstance(name, str) or not name or arguments is None:
        return PlainText(text)

    if name not in tool_names(tools):
        return PlainText(text)

    return ToolCallFound(name=name, arguments=arguments)
