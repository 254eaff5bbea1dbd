# Skills module
# Each skill is a tool the agent can call. The catalog below is what the
# model sees; build_tool_map() binds each name to its implementation.

from functools import partial
from typing import Callable, Dict, Tuple

from ..core.conversation import ToolSchema
from .ai_pipe import WORKFLOWS, ai_pipe
from .javascript import execute_javascript
from .web_search import google_search

TOOL_SCHEMAS: Tuple[ToolSchema, ...] = (
    ToolSchema(
        name="google_search",
        description="Search Google for information and return relevant snippets",
        parameters={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query to execute",
                },
                "num_results": {
                    "type": "integer",
                    "description": "Number of results to return (default: 5)",
                    "default": 5,
                },
            },
            "required": ["query"],
        },
    ),
    ToolSchema(
        name="ai_pipe",
        description="Execute an AI workflow using the AI Pipe API for data processing and analysis",
        parameters={
            "type": "object",
            "properties": {
                "workflow": {
                    "type": "string",
                    "description": "The AI workflow to execute",
                    "enum": list(WORKFLOWS),
                },
                "data": {
                    "type": "string",
                    "description": "Input data for the workflow",
                },
            },
            "required": ["workflow", "data"],
        },
    ),
    ToolSchema(
        name="execute_javascript",
        description="Execute JavaScript code in an isolated sandbox and return the result",
        parameters={
            "type": "object",
            "properties": {
                "code": {
                    "type": "string",
                    "description": "The JavaScript code to execute",
                },
            },
            "required": ["code"],
        },
    ),
)


def build_tool_map(settings=None) -> Dict[str, Callable]:
    """Bind every catalog entry to its implementation.

    Credentials and limits come from settings and are never taken from
    model-supplied arguments (the dispatcher rejects unknown parameters).
    """
    if settings is None:
        return {
            "google_search": google_search,
            "ai_pipe": ai_pipe,
            "execute_javascript": execute_javascript,
        }

    return {
        "google_search": partial(
            google_search,
            api_key=settings.search_api_key,
            engine_id=settings.search_engine_id,
            timeout=settings.search_timeout,
        ),
        "ai_pipe": partial(ai_pipe, latency=settings.ai_pipe_latency),
        "execute_javascript": partial(
            execute_javascript,
            timeout=settings.javascript_timeout,
            memory_mb=settings.javascript_memory_mb,
            node_path=settings.node_path,
            enabled=settings.javascript_enabled,
        ),
    }


__all__ = [
    "TOOL_SCHEMAS",
    "build_tool_map",
    "google_search",
    "ai_pipe",
    "execute_javascript",
]
