"""Error taxonomy for the agent loop.

Provider errors end the current turn. Tool errors are contained by the
dispatcher and turned into tool-result content. Parse errors from the text
tool-call protocol never leave that module.
"""

from enum import Enum
from typing import Optional


class AgentFlowError(Exception):
    """Base class for all AgentFlow errors."""


class ConfigError(AgentFlowError):
    """Invalid or unusable configuration."""


class ConversationError(AgentFlowError):
    """An append would break the transcript invariants."""


class ProviderError(AgentFlowError):
    """Transport, auth or backend-side failure from an LLM provider."""

    def __init__(self, message: str, status: Optional[int] = None, provider: str = ""):
        self.status = status
        self.message = message
        self.provider = provider
        super().__init__(str(self))

    def __str__(self) -> str:
        prefix = f"{self.provider.upper()} API Error" if self.provider else "Provider error"
        if self.status is not None:
            return f"{prefix}: {self.status} - {self.message}"
        return f"{prefix}: {self.message}"


class ParseError(AgentFlowError):
    """Model text claimed to hold a tool call but it could not be decoded."""


class ToolError(AgentFlowError):
    """Raised by a tool implementation when it cannot produce a result."""


class ToolExecutionError(ToolError):
    """A tool raised or timed out while running."""


class DispatchErrorKind(Enum):
    UNKNOWN_TOOL = "unknown_tool"
    BAD_ARGUMENTS = "bad_arguments"


class ToolDispatchError(AgentFlowError):
    """The dispatcher could not route a tool call to a handler."""

    def __init__(self, kind: DispatchErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


def provider_error_from(exc: Exception, provider: str) -> ProviderError:
    """Wrap an SDK exception in a ProviderError, keeping any HTTP status.

    SDKs expose the status under different attribute names
    (``status_code`` for openai/anthropic/ollama, ``code`` for google).
    """
    if isinstance(exc, ProviderError):
        return exc

    status = getattr(exc, "status_code", None)
    if status is None:
        code = getattr(exc, "code", None)
        status = code if isinstance(code, int) else None

    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    error = ProviderError(str(message), status=status, provider=provider)
    error.__cause__ = exc
    return error
