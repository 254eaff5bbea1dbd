from .conversation import (
    Conversation,
    ConversationEntry,
    NormalizedResponse,
    ToolCall,
    ToolResult,
    ToolSchema,
)
from .display import Display, NullDisplay

__all__ = [
    "Conversation",
    "ConversationEntry",
    "NormalizedResponse",
    "ToolCall",
    "ToolResult",
    "ToolSchema",
    "Display",
    "NullDisplay",
]
