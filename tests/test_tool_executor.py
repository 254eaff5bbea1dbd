"""Tests for the tool dispatcher: routing, failure containment, ordering."""

import asyncio
import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from unittest.mock import MagicMock

from agentflow.core.conversation import ToolCall, ToolSchema
from agentflow.core.tool_executor import ToolDispatcher, format_tool_result
from agentflow.errors import ToolError
from agentflow.skills import TOOL_SCHEMAS


# ──────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────

ECHO_SCHEMA = ToolSchema(
    name="echo",
    description="Echo text back",
    parameters={
        "type": "object",
        "properties": {"text": {"type": "string"}, "delay": {"type": "number"}},
        "required": ["text"],
    },
)


def echo(text, delay=0.0):
    time.sleep(delay)
    return {"text": text}


def explode(text, delay=0.0):
    raise ToolError("boom")


@pytest.fixture
def display():
    return MagicMock()


@pytest.fixture
def dispatcher(display):
    return ToolDispatcher({"echo": echo, "explode": explode}, schemas=[ECHO_SCHEMA], display=display)


def _finished_names(display):
    return [c.args[0] for c in display.on_tool_finished.call_args_list]


# ──────────────────────────────────────────────
# invoke
# ──────────────────────────────────────────────

class TestInvoke:

    def test_success(self, dispatcher, display):
        call = ToolCall.create("echo", {"text": "hi"}, call_id="call_1")
        result = asyncio.run(dispatcher.invoke(call))
        assert result.success
        assert result.tool_call_id == "call_1"
        assert result.name == "echo"
        assert json.loads(result.content) == {"text": "hi"}
        display.on_tool_started.assert_called_once_with("echo")
        display.on_tool_finished.assert_called_once()

    def test_unknown_tool(self, dispatcher, display):
        call = ToolCall.create("nope", {}, call_id="call_1")
        result = asyncio.run(dispatcher.invoke(call))
        assert not result.success
        assert result.content == "Error: nope failed: Unknown tool: nope"
        display.on_tool_started.assert_called_once_with("nope")
        display.on_tool_finished.assert_called_once_with("nope", result.content)

    def test_malformed_arguments(self, dispatcher):
        call = ToolCall(id="call_1", name="echo", arguments_json="{not json")
        result = asyncio.run(dispatcher.invoke(call))
        assert not result.success
        assert "Malformed arguments JSON" in result.content

    def test_non_object_arguments(self, dispatcher):
        call = ToolCall(id="call_1", name="echo", arguments_json="[1, 2]")
        result = asyncio.run(dispatcher.invoke(call))
        assert "Arguments must be a JSON object" in result.content

    def test_unexpected_argument(self, dispatcher):
        call = ToolCall.create("echo", {"text": "hi", "api_key": "stolen"})
        result = asyncio.run(dispatcher.invoke(call))
        assert not result.success
        assert "Unexpected argument(s): api_key" in result.content

    def test_missing_required_argument(self, dispatcher):
        call = ToolCall.create("echo", {"delay": 0})
        result = asyncio.run(dispatcher.invoke(call))
        assert "Missing required argument(s): text" in result.content

    def test_tool_exception_contained(self, dispatcher):
        call = ToolCall.create("explode", {"text": "x"})
        result = asyncio.run(dispatcher.invoke(call))
        assert not result.success
        assert result.content == "Error: explode failed: boom"

    def test_timeout(self, display):
        slow = ToolDispatcher({"echo": echo}, schemas=[ECHO_SCHEMA], display=display, timeout=0.05)
        call = ToolCall.create("echo", {"text": "late", "delay": 1.5})
        start = time.time()
        result = asyncio.run(slow.invoke(call))
        assert time.time() - start < 1.0
        assert not result.success
        assert "timed out" in result.content

    def test_uses_given_executor(self, display):
        seen = []

        def where(text, delay=0.0):
            seen.append(threading.current_thread().name)
            return {"text": text}

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="shared-pool")
        shared = ToolDispatcher({"echo": where}, schemas=[ECHO_SCHEMA], display=display, executor=executor)
        result = asyncio.run(shared.invoke(ToolCall.create("echo", {"text": "hi"})))
        executor.shutdown()
        assert result.success
        assert seen[0].startswith("shared-pool")


# ──────────────────────────────────────────────
# invoke_all
# ──────────────────────────────────────────────

class TestInvokeAll:

    def test_empty(self, dispatcher):
        assert asyncio.run(dispatcher.invoke_all([])) == []

    def test_results_follow_call_order(self, dispatcher, display):
        """Calls finishing C, A, B still come back as A, B, C."""
        calls = [
            ToolCall.create("echo", {"text": "A", "delay": 0.15}, call_id="call_a"),
            ToolCall.create("echo", {"text": "B", "delay": 0.3}, call_id="call_b"),
            ToolCall.create("echo", {"text": "C", "delay": 0.0}, call_id="call_c"),
        ]
        results = asyncio.run(dispatcher.invoke_all(calls))

        assert [r.tool_call_id for r in results] == ["call_a", "call_b", "call_c"]
        assert [json.loads(r.content)["text"] for r in results] == ["A", "B", "C"]
        finished_texts = [
            c.args[1] for c in display.on_tool_finished.call_args_list
        ]
        assert [json.loads(t)["text"] for t in finished_texts] == ["C", "A", "B"]

    def test_runs_concurrently(self, dispatcher):
        calls = [ToolCall.create("echo", {"text": str(i), "delay": 0.2}) for i in range(3)]
        start = time.time()
        asyncio.run(dispatcher.invoke_all(calls))
        assert time.time() - start < 0.55

    def test_failures_do_not_stop_others(self, dispatcher, display):
        calls = [
            ToolCall.create("nope", {}, call_id="call_1"),
            ToolCall.create("echo", {"text": "ok"}, call_id="call_2"),
        ]
        results = asyncio.run(dispatcher.invoke_all(calls))
        assert [r.success for r in results] == [False, True]
        assert sorted(_finished_names(display)) == ["echo", "nope"]

    def test_max_parallel_respected(self, display):
        active = {"now": 0, "peak": 0}

        def tracked(text, delay=0.0):
            active["now"] += 1
            active["peak"] = max(active["peak"], active["now"])
            time.sleep(0.05)
            active["now"] -= 1
            return {"text": text}

        limited = ToolDispatcher({"echo": tracked}, schemas=[ECHO_SCHEMA], display=display, max_parallel=2)
        calls = [ToolCall.create("echo", {"text": str(i)}) for i in range(6)]
        results = asyncio.run(limited.invoke_all(calls))
        assert len(results) == 6
        assert active["peak"] <= 2


# ──────────────────────────────────────────────
# format_tool_result
# ──────────────────────────────────────────────

class TestFormatToolResult:

    def test_search_results(self):
        payload = {
            "query": "ibm",
            "source": "Demo",
            "results": [{"title": "IBM", "link": "https://ibm.com", "snippet": "Big Blue"}],
        }
        text = format_tool_result(payload)
        assert text.startswith('Search Results for "ibm" (via Demo):')
        assert "1. **IBM**" in text
        assert "Big Blue" in text
        assert "https://ibm.com" in text

    def test_search_results_without_source(self):
        text = format_tool_result({"query": "x", "results": []})
        assert text.startswith('Search Results for "x":')

    def test_other_payload_is_pretty_json(self):
        text = format_tool_result({"workflow": "summarize", "output": "done"})
        assert json.loads(text) == {"workflow": "summarize", "output": "done"}
        assert "\n  " in text


class TestCatalogValidation:

    def test_default_schemas_reject_credential_override(self, display):
        dispatcher = ToolDispatcher({"google_search": MagicMock()}, schemas=TOOL_SCHEMAS, display=display)
        call = ToolCall.create("google_search", {"query": "x", "api_key": "k"})
        result = asyncio.run(dispatcher.invoke(call))
        assert "Unexpected argument(s): api_key" in result.content
