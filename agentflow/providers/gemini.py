"""Google Gemini provider using the text tool-call protocol."""

from typing import List

from ..core import tool_protocol
from ..core.conversation import ASSISTANT, TOOL, ConversationEntry, NormalizedResponse, ToolSchema
from .base import BaseProvider

# Finish reasons that mean the candidate was withheld
BLOCKED_FINISH_REASONS = {"SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"}


class GeminiProvider(BaseProvider):
    """Google Gemini API provider.

    Tools are described in a leading instruction and called through the
    ``{"tool": ..., "arguments": ...}`` text convention.
    """

    name = "gemini"
    default_model = "gemini-1.5-flash"

    generation_config = {"temperature": 0.7, "max_output_tokens": 1000}

    MODELS = [
        "gemini-2.5-pro",
        "gemini-2.5-flash",
        "gemini-2.0-flash",
        "gemini-1.5-pro",
        "gemini-1.5-flash",
    ]

    def __init__(self, model: str = None, api_key: str = None, **kwargs):
        super().__init__(model=model, api_key=api_key, **kwargs)
        self.timeout = kwargs.get("timeout", 120.0)

        if self.api_key:
            try:
                import google.generativeai as genai
                genai.configure(api_key=self.api_key)
                self.genai = genai
            except ImportError:
                raise ImportError("google-generativeai package required: pip install google-generativeai")
        else:
            self.genai = None

    @property
    def model_name(self) -> str:
        return self.model if self.model.startswith("models/") else f"models/{self.model}"

    @staticmethod
    def build_contents(conversation: List[ConversationEntry], tools: List[ToolSchema]) -> List[dict]:
        """Map transcript entries onto Gemini contents.

        Earlier tool calls are re-embedded in the model turn that made them
        and tool results are passed back as user text, so the model sees the
        whole exchange in the same convention it is asked to use.
        """
        contents = []
        if tools:
            contents.append({"role": "user", "parts": [{"text": tool_protocol.build_tools_prompt(tools)}]})

        for entry in conversation:
            if entry.role == TOOL:
                text = f"Tool result ({entry.tool_call_id}):\n{entry.content or ''}"
                role = "user"
            elif entry.role == ASSISTANT:
                text = tool_protocol.render_tool_calls(entry.content, entry.tool_calls)
                role = "model"
            else:
                text = entry.content or ""
                role = "user"

            if text.strip():
                contents.append({"role": role, "parts": [{"text": text}]})
        return contents

    def _complete(self, conversation: List[ConversationEntry], tools: List[ToolSchema]) -> NormalizedResponse:
        model = self.genai.GenerativeModel(self.model_name)
        response = model.generate_content(
            self.build_contents(conversation, tools),
            generation_config=self.generation_config,
            request_options={"timeout": self.timeout},
        )

        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            raise self.error(f"Prompt blocked: {getattr(block_reason, 'name', block_reason)}")

        if not response.candidates:
            raise self.error("No response candidates from Google Gemini API")

        candidate = response.candidates[0]
        finish_reason = getattr(candidate.finish_reason, "name", str(candidate.finish_reason))
        if finish_reason in BLOCKED_FINISH_REASONS:
            raise self.error(f"Google Gemini blocked the response ({finish_reason})")

        content = candidate.content
        if not content or not content.parts:
            raise self.error("Invalid response structure from Google Gemini API")

        text = next((part.text for part in content.parts if getattr(part, "text", None)), "")
        return tool_protocol.parse_response(text)

    def get_config_help(self) -> str:
        return """Google Gemini

1. Get API key: https://aistudio.google.com/apikey
2. Set environment variable:
   export GOOGLE_API_KEY=...

Or add to ~/.agentflow/.env:
   GOOGLE_API_KEY=..."""
