"""Ollama provider with native or prompt-based tool calling."""

import json
from typing import List

from ..core import tool_protocol
from ..core.conversation import ASSISTANT, TOOL, ConversationEntry, NormalizedResponse, ToolCall, ToolSchema
from .base import BaseProvider


class OllamaProvider(BaseProvider):
    """Ollama LLM provider.

    The configured host is the credential: with no host the offline
    simulator answers instead.
    """

    name = "ollama"
    default_model = "llama3.1"

    # Model capability mapping for tool calling reliability
    # format: "native" = use Ollama's native tool calling
    #         "prompt" = use the text tool-call protocol
    TOOL_CAPABLE_MODELS = {
        "qwen3": {"reliability": "high", "format": "native"},
        "qwen2.5": {"reliability": "high", "format": "native"},
        "llama3.2": {"reliability": "high", "format": "native"},
        "llama3.1": {"reliability": "medium", "format": "native"},
        "mistral": {"reliability": "medium", "format": "native"},
        "gpt-oss": {"reliability": "medium", "format": "native"},

        # Low reliability - prefer prompt-based
        "deepseek-r1": {"reliability": "low", "format": "prompt"},
        "qwq": {"reliability": "low", "format": "prompt"},
        "llava": {"reliability": "low", "format": "prompt"},
    }

    def __init__(self, model: str = None, api_key: str = None, **kwargs):
        host = kwargs.pop("host", None) or api_key
        super().__init__(model=model, api_key=host, **kwargs)
        self.host = host
        timeout = kwargs.get("timeout", 120.0)

        if self.host:
            try:
                import httpx
                import ollama
                self.client = ollama.Client(
                    host=self.host,
                    timeout=httpx.Timeout(timeout, connect=30.0),
                )
            except ImportError:
                raise ImportError("ollama package required: pip install ollama")
        else:
            self.client = None

    def _should_use_native_tools(self) -> bool:
        """Check if current model reliably supports native tool calling."""
        model_base = (self.model or "").split(":")[0].lower()
        for name, info in self.TOOL_CAPABLE_MODELS.items():
            if name in model_base:
                return info["format"] == "native" and info["reliability"] != "low"
        # Unknown models: let Ollama handle it
        return True

    @staticmethod
    def build_messages(conversation: List[ConversationEntry], native: bool = True) -> List[dict]:
        messages = []
        for entry in conversation:
            if entry.role == TOOL:
                if native:
                    messages.append({"role": "tool", "content": entry.content or ""})
                else:
                    messages.append({"role": "user", "content": f"Tool result ({entry.tool_call_id}):\n{entry.content or ''}"})
            elif entry.role == ASSISTANT and entry.tool_calls:
                if native:
                    calls = []
                    for call in entry.tool_calls:
                        try:
                            arguments = call.arguments
                        except json.JSONDecodeError:
                            arguments = {}
                        calls.append({"function": {"name": call.name, "arguments": arguments}})
                    messages.append({"role": "assistant", "content": entry.content or "", "tool_calls": calls})
                else:
                    messages.append({
                        "role": "assistant",
                        "content": tool_protocol.render_tool_calls(entry.content, entry.tool_calls),
                    })
            else:
                messages.append({"role": entry.role, "content": entry.content or ""})
        return messages

    def _complete(self, conversation: List[ConversationEntry], tools: List[ToolSchema]) -> NormalizedResponse:
        native = self._should_use_native_tools()
        messages = self.build_messages(conversation, native=native)
        kwargs = {"model": self.model, "messages": messages, "stream": False}

        if tools and native:
            kwargs["tools"] = self.convert_tools_to_schema(tools)
        elif tools:
            messages.insert(0, {"role": "system", "content": tool_protocol.build_tools_prompt(tools)})

        response = self.client.chat(**kwargs)
        msg = response.message
        content = msg.content or ""

        if not native:
            return tool_protocol.parse_response(content)

        tool_calls = None
        if msg.tool_calls:
            # Ollama does not assign ids to tool calls
            tool_calls = tuple(
                ToolCall.create(tc.function.name, dict(tc.function.arguments or {}))
                for tc in msg.tool_calls
            )
        return NormalizedResponse(content=content, tool_calls=tool_calls)

    def get_config_help(self) -> str:
        return """Ollama

1. Install Ollama: https://ollama.ai
2. Start server: ollama serve
3. Pull a model: ollama pull llama3.1
4. Point AgentFlow at it:
   export OLLAMA_HOST=http://localhost:11434

For native tool calling, use: qwen3, llama3.2, llama3.1, or mistral"""
