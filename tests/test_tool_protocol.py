"""Tests for the text-embedded tool-call convention."""

import pytest

from agentflow.core import tool_protocol
from agentflow.core.conversation import ToolCall
from agentflow.core.tool_protocol import (
    build_tools_prompt, embed_tool_call, extract_tool_call, parse_response, render_tool_calls,
)
from agentflow.errors import ParseError
from agentflow.skills import TOOL_SCHEMAS


# ──────────────────────────────────────────────
# extract_tool_call
# ──────────────────────────────────────────────

class TestExtractToolCall:

    def test_trailing_tool_call(self):
        text = 'Let me look that up.\n\n{"tool": "google_search", "arguments": {"query": "ibm"}}'
        content, call = extract_tool_call(text)
        assert content == "Let me look that up."
        assert call.name == "google_search"
        assert call.arguments == {"query": "ibm"}
        assert call.id.startswith("call_")

    def test_leading_and_trailing_text_kept(self):
        text = 'Before {"tool": "ai_pipe", "arguments": {"workflow": "summarize", "data": "x"}} after'
        content, call = extract_tool_call(text)
        assert content == "Before  after"
        assert call.name == "ai_pipe"

    def test_json_only_gives_no_content(self):
        content, call = extract_tool_call('{"tool": "google_search", "arguments": {"query": "x"}}')
        assert content is None
        assert call is not None

    def test_plain_text(self):
        assert extract_tool_call("Just an answer.") == ("Just an answer.", None)

    def test_empty_text(self):
        assert extract_tool_call("") == ("", None)
        assert extract_tool_call(None) == (None, None)

    def test_malformed_json_leaves_text(self):
        text = 'Oops {"tool": "google_search", "arguments": } done'
        assert extract_tool_call(text) == (text, None)

    def test_missing_arguments_is_not_a_call(self):
        text = 'Here {"tool": "google_search"}'
        assert extract_tool_call(text) == (text, None)

    def test_non_string_tool_is_not_a_call(self):
        text = '{"tool": 3, "arguments": {}}'
        assert extract_tool_call(text) == (text, None)

    def test_empty_arguments_accepted(self):
        _, call = extract_tool_call('{"tool": "execute_javascript", "arguments": {}}')
        assert call.arguments == {}

    def test_greedy_match_spans_two_objects(self):
        """Two calls in one reply form one invalid span, so neither is taken."""
        text = ('{"tool": "a", "arguments": {}} and then '
                '{"tool": "b", "arguments": {}}')
        assert extract_tool_call(text) == (text, None)

    def test_decode_raises_parse_error(self):
        with pytest.raises(ParseError):
            tool_protocol._decode('{"tool": "x", "arguments": []}')


# ──────────────────────────────────────────────
# parse_response / embed / render
# ──────────────────────────────────────────────

class TestParseResponse:

    def test_embedded_call_round_trips(self):
        text = embed_tool_call("Searching.", "google_search", {"query": "quantum", "num_results": 3})
        response = parse_response(text)
        assert response.content == "Searching."
        assert len(response.tool_calls) == 1
        assert response.tool_calls[0].name == "google_search"
        assert response.tool_calls[0].arguments == {"query": "quantum", "num_results": 3}

    def test_plain_reply(self):
        response = parse_response("Hello there")
        assert response.content == "Hello there"
        assert response.tool_calls is None

    def test_embed_without_text(self):
        assert embed_tool_call(None, "t", {"a": 1}) == '{"tool": "t", "arguments": {"a": 1}}'

    def test_render_tool_calls(self):
        call = ToolCall.create("google_search", {"query": "ibm"}, call_id="call_1")
        text = render_tool_calls("Looking.", [call])
        content, parsed = extract_tool_call(text)
        assert content == "Looking."
        assert parsed.name == "google_search"
        assert parsed.arguments == {"query": "ibm"}

    def test_render_without_calls(self):
        assert render_tool_calls("Answer", None) == "Answer"
        assert render_tool_calls(None, None) == ""


# ──────────────────────────────────────────────
# build_tools_prompt
# ──────────────────────────────────────────────

class TestToolsPrompt:

    def test_lists_every_tool(self):
        prompt = build_tools_prompt(TOOL_SCHEMAS)
        for schema in TOOL_SCHEMAS:
            assert schema.name in prompt

    def test_marks_optional_parameters(self):
        prompt = build_tools_prompt(TOOL_SCHEMAS)
        assert "google_search(query, num_results?)" in prompt
        assert "ai_pipe(workflow, data)" in prompt

    def test_lists_workflows(self):
        prompt = build_tools_prompt(TOOL_SCHEMAS)
        assert "Available workflows for ai_pipe:" in prompt
        assert "blog_outline" in prompt

    def test_example_is_parseable(self):
        prompt = build_tools_prompt(TOOL_SCHEMAS)
        example = next(line for line in prompt.splitlines() if line.startswith('{"tool"'))
        _, call = extract_tool_call(example)
        assert call.name == "google_search"
