"""OpenAI GPT provider with native tool calling."""

from typing import List

from ..core.conversation import ASSISTANT, TOOL, ConversationEntry, NormalizedResponse, ToolCall, ToolSchema
from .base import BaseProvider


class OpenAIProvider(BaseProvider):
    """OpenAI Chat Completions provider with native tool calling."""

    name = "openai"
    default_model = "gpt-3.5-turbo"

    MODELS = [
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-3.5-turbo",
    ]

    def __init__(self, model: str = None, api_key: str = None, **kwargs):
        super().__init__(model=model, api_key=api_key, **kwargs)
        self.base_url = kwargs.get("base_url")  # For OpenAI-compatible APIs

        if self.api_key:
            try:
                from openai import OpenAI
                self.client = OpenAI(
                    api_key=self.api_key,
                    base_url=self.base_url,
                    timeout=kwargs.get("timeout", 120.0),
                )
            except ImportError:
                raise ImportError("openai package required: pip install openai")
        else:
            self.client = None

    @staticmethod
    def build_messages(conversation: List[ConversationEntry]) -> List[dict]:
        """Map transcript entries onto Chat Completions messages."""
        messages = []
        for entry in conversation:
            if entry.role == TOOL:
                messages.append({
                    "role": "tool",
                    "tool_call_id": entry.tool_call_id,
                    "content": entry.content or "",
                })
            elif entry.role == ASSISTANT and entry.tool_calls:
                messages.append({
                    "role": "assistant",
                    "content": entry.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": call.arguments_json},
                        }
                        for call in entry.tool_calls
                    ],
                })
            else:
                messages.append({"role": entry.role, "content": entry.content or ""})
        return messages

    def _complete(self, conversation: List[ConversationEntry], tools: List[ToolSchema]) -> NormalizedResponse:
        kwargs = {
            "model": self.model,
            "messages": self.build_messages(conversation),
        }
        if tools:
            kwargs["tools"] = self.convert_tools_to_schema(tools)
            kwargs["tool_choice"] = "auto"

        response = self.client.chat.completions.create(**kwargs)
        if not response.choices:
            raise self.error("No choices in response")
        msg = response.choices[0].message

        tool_calls = None
        if msg.tool_calls:
            tool_calls = tuple(
                ToolCall.create(tc.function.name, tc.function.arguments or "{}", call_id=tc.id)
                for tc in msg.tool_calls
            )

        return NormalizedResponse(content=msg.content, tool_calls=tool_calls)

    def get_config_help(self) -> str:
        return """OpenAI GPT

1. Get API key: https://platform.openai.com/api-keys
2. Set environment variable:
   export OPENAI_API_KEY=sk-...

Or add to ~/.agentflow/.env:
   OPENAI_API_KEY=sk-..."""
