"""
Async parallel tool dispatcher with display notifications.

Executes the tool calls of one model response concurrently, running the
synchronous tool functions on a thread pool, and hands results back
in the order the calls were made. Failures never escape: they come back as
ToolResult objects with success=False and an "Error: ..." content string.
"""

import asyncio
import json
import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..errors import DispatchErrorKind, ToolDispatchError, ToolExecutionError
from .conversation import ToolCall, ToolResult, ToolSchema
from .display import Display, NullDisplay

logger = logging.getLogger("agentflow.tool_executor")


def format_tool_result(result: Any) -> str:
    """Human-readable rendering of a tool payload for the display."""
    if isinstance(result, dict) and isinstance(result.get("results"), list):
        source = f" (via {result['source']})" if result.get("source") else ""
        lines = [f'Search Results for "{result.get("query", "")}"{source}:', ""]
        for i, item in enumerate(result["results"], 1):
            lines.append(f"{i}. **{item.get('title', '')}**")
            lines.append(f"   {item.get('snippet', '')}")
            lines.append(f"   🔗 {item.get('link', '')}")
            lines.append("")
        return "\n".join(lines)
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, default=str)


def _error_content(name: str, error: Exception) -> str:
    return f"Error: {name} failed: {error}"


class ToolDispatcher:
    """
    Routes tool calls to handlers and contains every failure.

    Usage:
        dispatcher = ToolDispatcher(build_tool_map(settings), TOOL_SCHEMAS, display)
        results = await dispatcher.invoke_all(response.tool_calls)
    """

    def __init__(
        self,
        tool_map: Mapping[str, Callable],
        schemas: Sequence[ToolSchema] = (),
        display: Optional[Display] = None,
        timeout: float = 30.0,
        max_parallel: int = 5,
        executor: Optional[Executor] = None,
    ):
        self.tool_map = dict(tool_map)
        self.schemas: Dict[str, ToolSchema] = {s.name: s for s in schemas}
        self.display = display or NullDisplay()
        self.timeout = timeout
        self.max_parallel = max_parallel
        self.executor = executor or ThreadPoolExecutor(thread_name_prefix="agentflow-tool")

    def _resolve(self, tool_call: ToolCall) -> Callable:
        func = self.tool_map.get(tool_call.name)
        if func is None:
            raise ToolDispatchError(DispatchErrorKind.UNKNOWN_TOOL, f"Unknown tool: {tool_call.name}")
        return func

    def _parse_arguments(self, tool_call: ToolCall) -> dict:
        try:
            args = tool_call.arguments
        except json.JSONDecodeError as e:
            raise ToolDispatchError(DispatchErrorKind.BAD_ARGUMENTS, f"Malformed arguments JSON: {e}")
        if args is None:
            args = {}
        if not isinstance(args, dict):
            raise ToolDispatchError(
                DispatchErrorKind.BAD_ARGUMENTS,
                f"Arguments must be a JSON object, got {type(args).__name__}",
            )

        schema = self.schemas.get(tool_call.name)
        if schema is not None:
            unexpected = sorted(set(args) - set(schema.properties))
            if unexpected:
                raise ToolDispatchError(
                    DispatchErrorKind.BAD_ARGUMENTS,
                    f"Unexpected argument(s): {', '.join(unexpected)}",
                )
            missing = [name for name in schema.required if name not in args]
            if missing:
                raise ToolDispatchError(
                    DispatchErrorKind.BAD_ARGUMENTS,
                    f"Missing required argument(s): {', '.join(missing)}",
                )
        return args

    async def _run(self, func: Callable, args: dict, name: str) -> Any:
        try:
            loop = asyncio.get_running_loop()
            return await asyncio.wait_for(
                loop.run_in_executor(self.executor, partial(func, **args)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ToolExecutionError(f"timed out after {self.timeout}s")
        except Exception as e:
            logger.debug(f"{name} raised", exc_info=True)
            raise ToolExecutionError(str(e) or type(e).__name__) from e

    async def invoke(self, tool_call: ToolCall) -> ToolResult:
        """Execute a single tool call. Never raises."""
        name = tool_call.name
        self.display.on_tool_started(name)
        start = time.time()

        try:
            func = self._resolve(tool_call)
            args = self._parse_arguments(tool_call)
            output = await self._run(func, args, name)
            content = json.dumps(output, default=str)
        except (ToolDispatchError, ToolExecutionError) as e:
            duration = time.time() - start
            error_msg = _error_content(name, e)
            logger.warning(error_msg)
            self.display.on_tool_finished(name, error_msg)
            return ToolResult(
                tool_call_id=tool_call.id,
                name=name,
                content=error_msg,
                success=False,
                duration=duration,
            )

        duration = time.time() - start
        logger.debug(f"{name} completed in {duration:.2f}s")
        self.display.on_tool_finished(name, format_tool_result(output))
        return ToolResult(
            tool_call_id=tool_call.id,
            name=name,
            content=content,
            success=True,
            duration=duration,
        )

    async def invoke_all(self, tool_calls: Sequence[ToolCall]) -> List[ToolResult]:
        """
        Execute tool calls concurrently.

        Results are placed by the index of their call, not by completion
        order, so the returned list lines up with ``tool_calls``.
        """
        if not tool_calls:
            return []

        if len(tool_calls) == 1:
            return [await self.invoke(tool_calls[0])]

        semaphore = asyncio.Semaphore(self.max_parallel)

        async def _invoke_at(index: int, tc: ToolCall):
            async with semaphore:
                return index, await self.invoke(tc)

        slots: List[Optional[ToolResult]] = [None] * len(tool_calls)
        for finished in asyncio.as_completed([_invoke_at(i, tc) for i, tc in enumerate(tool_calls)]):
            index, result = await finished
            slots[index] = result

        return [r for r in slots if r is not None]

