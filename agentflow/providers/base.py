"""Base provider interface for LLM backends."""

import logging
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..core.conversation import ConversationEntry, NormalizedResponse, ToolSchema
from ..errors import ProviderError, provider_error_from

logger = logging.getLogger("agentflow.providers")


class BaseProvider(ABC):
    """Abstract base class for LLM providers.

    Subclasses implement ``_complete``. ``complete`` is the public entry
    point: it falls back to the offline simulator when no credential is
    configured and maps any SDK exception to ProviderError.
    """

    name: str = "base"
    default_model: str = ""

    def __init__(
        self,
        model: str = None,
        api_key: str = None,
        offline: Optional["BaseProvider"] = None,
        **kwargs,
    ):
        self.model = model or self.default_model
        self.api_key = api_key
        self.kwargs = kwargs
        self._offline = offline

    def is_configured(self) -> bool:
        """Check if provider has the credential it needs."""
        return bool(self.api_key)

    def get_config_help(self) -> str:
        """Get help text for configuring this provider."""
        return f"{self.name} provider"

    @property
    def offline(self) -> "BaseProvider":
        """Stand-in used while unconfigured; built on first use unless injected."""
        if self._offline is None:
            from .offline import OfflineSimulator
            self._offline = OfflineSimulator()
        return self._offline

    def complete(
        self,
        conversation: Sequence[ConversationEntry],
        tools: Sequence[ToolSchema],
    ) -> NormalizedResponse:
        """
        Ask the model for the next turn.

        Args:
            conversation: Full transcript, oldest first
            tools: Tool catalog the model may call

        Returns:
            NormalizedResponse with content and/or tool calls

        Raises:
            ProviderError: transport, auth or backend-side failure
        """
        if not self.is_configured():
            logger.debug(f"{self.name}: no credential configured, using offline simulator")
            return self.offline.complete(conversation, tools)

        start = time.time()
        try:
            response = self._complete(list(conversation), list(tools))
        except ProviderError:
            raise
        except Exception as e:
            raise provider_error_from(e, self.name) from e

        logger.debug(
            f"{self.name}/{self.model} answered in {time.time() - start:.2f}s "
            f"(content={bool(response.content)}, tool_calls={len(response.tool_calls or ())})"
        )
        return response

    @abstractmethod
    def _complete(
        self,
        conversation: List[ConversationEntry],
        tools: List[ToolSchema],
    ) -> NormalizedResponse:
        """Provider-specific request shaping and response normalization."""

    def error(self, message: str, status: Optional[int] = None) -> ProviderError:
        return ProviderError(message, status=status, provider=self.name)

    # === Unified Tool Schema Generation ===

    @staticmethod
    def convert_tools_to_schema(tools: Sequence[ToolSchema]) -> List[dict]:
        """Convert the tool catalog to OpenAI-compatible function schema."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }
            for tool in tools
        ]
