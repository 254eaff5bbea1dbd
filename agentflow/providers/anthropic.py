"""Anthropic Claude provider with native tool calling."""

import json
from typing import List

from ..core.conversation import ASSISTANT, TOOL, USER, ConversationEntry, NormalizedResponse, ToolCall, ToolSchema
from .base import BaseProvider


class AnthropicProvider(BaseProvider):
    """Anthropic Messages API provider with native tool calling."""

    name = "anthropic"
    default_model = "claude-3-sonnet-20240229"
    max_tokens = 1000

    MODELS = [
        "claude-sonnet-4-5",
        "claude-opus-4-1",
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-20241022",
        "claude-3-sonnet-20240229",
    ]

    def __init__(self, model: str = None, api_key: str = None, **kwargs):
        super().__init__(model=model, api_key=api_key, **kwargs)

        if self.api_key:
            try:
                import anthropic
                self.client = anthropic.Anthropic(
                    api_key=self.api_key,
                    timeout=kwargs.get("timeout", 120.0),
                )
            except ImportError:
                raise ImportError("anthropic package required: pip install anthropic")
        else:
            self.client = None

    @staticmethod
    def _convert_tools_to_anthropic(tools: List[ToolSchema]) -> List[dict]:
        return [
            {"name": tool.name, "description": tool.description, "input_schema": tool.parameters}
            for tool in tools
        ]

    @staticmethod
    def build_messages(conversation: List[ConversationEntry]) -> List[dict]:
        """Map transcript entries onto Messages API turns.

        Tool results travel as ``tool_result`` blocks in a user turn; the
        results of one tool block share a single turn. The API requires the
        first turn to be a user turn, so leading assistant entries (the
        welcome seed) are dropped.
        """
        messages: List[dict] = []
        for entry in conversation:
            if not messages and entry.role != USER:
                continue

            if entry.role == TOOL:
                block = {
                    "type": "tool_result",
                    "tool_use_id": entry.tool_call_id,
                    "content": entry.content or "",
                }
                if entry.content and entry.content.startswith("Error:"):
                    block["is_error"] = True
                last = messages[-1]
                if last["role"] == "user" and isinstance(last["content"], list) \
                        and last["content"] and last["content"][0].get("type") == "tool_result":
                    last["content"].append(block)
                else:
                    messages.append({"role": "user", "content": [block]})
            elif entry.role == ASSISTANT and entry.tool_calls:
                blocks = []
                if entry.content:
                    blocks.append({"type": "text", "text": entry.content})
                for call in entry.tool_calls:
                    try:
                        tool_input = call.arguments
                    except json.JSONDecodeError:
                        tool_input = {}
                    blocks.append({
                        "type": "tool_use",
                        "id": call.id,
                        "name": call.name,
                        "input": tool_input if isinstance(tool_input, dict) else {},
                    })
                messages.append({"role": "assistant", "content": blocks})
            else:
                role = "assistant" if entry.role == ASSISTANT else "user"
                messages.append({"role": role, "content": entry.content or ""})
        return messages

    def _complete(self, conversation: List[ConversationEntry], tools: List[ToolSchema]) -> NormalizedResponse:
        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": self.build_messages(conversation),
        }
        if tools:
            kwargs["tools"] = self._convert_tools_to_anthropic(tools)

        response = self.client.messages.create(**kwargs)

        texts = []
        tool_calls = []
        for block in response.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(ToolCall.create(block.name, block.input, call_id=block.id))

        return NormalizedResponse(
            content="\n".join(t for t in texts if t) or None,
            tool_calls=tuple(tool_calls) or None,
        )

    def get_config_help(self) -> str:
        return """Anthropic Claude

1. Get API key: https://console.anthropic.com/
2. Set environment variable:
   export ANTHROPIC_API_KEY=sk-ant-...

Or add to ~/.agentflow/.env:
   ANTHROPIC_API_KEY=sk-ant-..."""
