"""Transcript types shared by the agent loop, dispatcher and providers."""

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from ..errors import ConversationError

USER = "user"
ASSISTANT = "assistant"
TOOL = "tool"
ROLES = (USER, ASSISTANT, TOOL)


def new_call_id() -> str:
    """Generate a tool call id unique within a conversation."""
    return f"call_{uuid.uuid4().hex[:24]}"


@dataclass(frozen=True)
class ToolCall:
    """A model request to run one named tool."""
    id: str
    name: str
    arguments_json: str = "{}"

    @classmethod
    def create(cls, name: str, arguments: Any = None, call_id: Optional[str] = None) -> "ToolCall":
        if isinstance(arguments, str):
            args_json = arguments
        else:
            args_json = json.dumps(arguments if arguments is not None else {})
        return cls(id=call_id or new_call_id(), name=name, arguments_json=args_json)

    @property
    def arguments(self) -> Any:
        """Parsed arguments. Raises json.JSONDecodeError on malformed JSON."""
        return json.loads(self.arguments_json or "{}")


@dataclass(frozen=True)
class ToolSchema:
    """One entry of the static tool catalog."""
    name: str
    description: str
    parameters: dict = field(default_factory=dict)

    @property
    def properties(self) -> dict:
        return self.parameters.get("properties", {})

    @property
    def required(self) -> List[str]:
        return list(self.parameters.get("required", []))


@dataclass(frozen=True)
class ConversationEntry:
    """A single transcript entry (user, assistant or tool)."""
    role: str
    content: Optional[str] = None
    tool_calls: Optional[Tuple[ToolCall, ...]] = None
    tool_call_id: Optional[str] = None

    @classmethod
    def user(cls, content: str) -> "ConversationEntry":
        return cls(role=USER, content=content)

    @classmethod
    def assistant(cls, content: Optional[str], tool_calls: Optional[Sequence[ToolCall]] = None) -> "ConversationEntry":
        return cls(role=ASSISTANT, content=content, tool_calls=tuple(tool_calls) if tool_calls else None)

    @classmethod
    def tool(cls, tool_call_id: str, content: str) -> "ConversationEntry":
        return cls(role=TOOL, content=content, tool_call_id=tool_call_id)


@dataclass(frozen=True)
class NormalizedResponse:
    """What every provider adapter returns."""
    content: Optional[str] = None
    tool_calls: Optional[Tuple[ToolCall, ...]] = None

    def __post_init__(self):
        # Empty text and empty call lists both collapse to None
        if not self.content:
            object.__setattr__(self, "content", None)
        if self.tool_calls is not None:
            calls = tuple(self.tool_calls)
            object.__setattr__(self, "tool_calls", calls or None)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


@dataclass
class ToolResult:
    """Outcome of one tool invocation, keyed to the call that asked for it."""
    tool_call_id: str
    name: str
    content: str
    success: bool = True
    duration: float = 0.0

    def to_entry(self) -> ConversationEntry:
        return ConversationEntry.tool(self.tool_call_id, self.content)


class Conversation:
    """Append-only transcript.

    Tool entries must answer a call made by the assistant entry that opens
    their block, each call at most once.
    """

    def __init__(self, seed: Optional[ConversationEntry] = None):
        self._entries: List[ConversationEntry] = []
        if seed is not None:
            self.append(seed)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConversationEntry]:
        return iter(self._entries)

    def __getitem__(self, index):
        return self._entries[index]

    @property
    def entries(self) -> Tuple[ConversationEntry, ...]:
        return tuple(self._entries)

    @property
    def last(self) -> Optional[ConversationEntry]:
        return self._entries[-1] if self._entries else None

    def last_user_text(self) -> str:
        for entry in reversed(self._entries):
            if entry.role == USER:
                return entry.content or ""
        return ""

    def history_text(self) -> str:
        """All entry text joined and lower-cased."""
        return " ".join(e.content for e in self._entries if e.content).lower()

    def _pending_call_ids(self) -> Optional[set]:
        """Ids the trailing tool block may still answer, or None if not in a block."""
        answered = set()
        for entry in reversed(self._entries):
            if entry.role == TOOL:
                answered.add(entry.tool_call_id)
                continue
            if entry.role == ASSISTANT and entry.tool_calls:
                return {c.id for c in entry.tool_calls} - answered
            return None
        return None

    def append(self, entry: ConversationEntry) -> None:
        if entry.role not in ROLES:
            raise ConversationError(f"Unknown role: {entry.role}")
        if entry.tool_calls and entry.role != ASSISTANT:
            raise ConversationError("Only assistant entries may carry tool calls")
        if entry.role == TOOL:
            pending = self._pending_call_ids()
            if not pending or entry.tool_call_id not in pending:
                raise ConversationError(
                    f"Tool result {entry.tool_call_id!r} does not answer a pending tool call"
                )
        elif entry.tool_call_id is not None:
            raise ConversationError("Only tool entries may reference a tool call id")
        self._entries.append(entry)

    def extend(self, entries: Sequence[ConversationEntry]) -> None:
        for entry in entries:
            self.append(entry)

    def reset(self, seed: ConversationEntry) -> None:
        """Drop everything and start over from a single seed entry."""
        self._entries = []
        self.append(seed)
