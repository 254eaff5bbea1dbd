"""
Text-embedded tool calling for backends without native tool support.

The model is told to answer with a JSON object of the form
``{"tool": "<name>", "arguments": {...}}`` somewhere in its reply. The first
greedy brace-to-brace span containing ``"tool"`` is decoded; when decoding
succeeds that span is removed from the visible text.
"""

import json
import logging
import re
from typing import Any, Iterable, Optional, Tuple

from ..errors import ParseError
from .conversation import NormalizedResponse, ToolCall, ToolSchema

logger = logging.getLogger("agentflow.tool_protocol")

TOOL_CALL_PATTERN = re.compile(r'\{[\s\S]*"tool"[\s\S]*\}')


def build_tools_prompt(tools: Iterable[ToolSchema]) -> str:
    """System instruction describing the tools and the JSON convention."""
    tools = list(tools)
    lines = ["You are an AI assistant with access to the following tools:"]
    for i, tool in enumerate(tools, 1):
        params = []
        for name in tool.properties:
            params.append(name if name in tool.required else f"{name}?")
        lines.append(f"{i}. {tool.name}({', '.join(params)}) - {tool.description}")

    lines.append("")
    lines.append("When you need to use a tool, respond with a JSON object like:")
    example = tools[0].name if tools else "google_search"
    lines.append(encode_tool_call(example, {"query": "search term"}))

    for tool in tools:
        workflow = tool.properties.get("workflow", {})
        if workflow.get("enum"):
            lines.append("")
            lines.append(f"Available workflows for {tool.name}: {', '.join(workflow['enum'])}")

    return "\n".join(lines)


def encode_tool_call(name: str, arguments: Any) -> str:
    return json.dumps({"tool": name, "arguments": arguments if arguments is not None else {}})


def embed_tool_call(text: Optional[str], name: str, arguments: Any) -> str:
    """Append a tool call to model-style text."""
    encoded = encode_tool_call(name, arguments)
    return f"{text}\n\n{encoded}" if text else encoded


def _decode(fragment: str) -> ToolCall:
    try:
        data = json.loads(fragment)
    except json.JSONDecodeError as e:
        raise ParseError(f"Tool call is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Tool call must be a JSON object")

    name = data.get("tool")
    arguments = data.get("arguments")
    if not name or not isinstance(name, str) or not isinstance(arguments, dict):
        raise ParseError("Tool call needs a 'tool' name and an 'arguments' object")

    return ToolCall.create(name, arguments)


def extract_tool_call(text: Optional[str]) -> Tuple[Optional[str], Optional[ToolCall]]:
    """Split model text into (visible text, tool call).

    Never raises: anything that fails to decode leaves the text untouched
    and yields no tool call.
    """
    if not text:
        return text, None

    match = TOOL_CALL_PATTERN.search(text)
    if not match:
        return text, None

    try:
        call = _decode(match.group(0))
    except ParseError as e:
        logger.debug(f"Ignoring malformed tool call: {e}")
        return text, None

    cleaned = (text[:match.start()] + text[match.end():]).strip()
    return cleaned or None, call


def parse_response(text: Optional[str]) -> NormalizedResponse:
    """Normalize a plain-text reply, pulling out an embedded tool call."""
    content, call = extract_tool_call(text)
    return NormalizedResponse(content=content, tool_calls=(call,) if call else None)


def render_tool_calls(content: Optional[str], tool_calls: Optional[Iterable[ToolCall]]) -> str:
    """Re-embed earlier tool calls so text-only backends see their own history."""
    text = content or ""
    for call in tool_calls or ():
        try:
            arguments = call.arguments
        except json.JSONDecodeError:
            arguments = call.arguments_json
        text = embed_tool_call(text, call.name, arguments)
    return text
