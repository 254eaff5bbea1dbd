"""Display collaborator interface used by the agent loop and dispatcher."""

from typing import Protocol


class Display(Protocol):
    """Receives ordered notifications from the core."""

    def on_message(self, role: str, text: str) -> None: ...

    def on_tool_started(self, name: str) -> None: ...

    def on_tool_finished(self, name: str, formatted_result: str) -> None: ...

    def on_error(self, message: str) -> None: ...


class NullDisplay:
    """Discards every notification (headless use)."""

    def on_message(self, role: str, text: str) -> None:
        pass

    def on_tool_started(self, name: str) -> None:
        pass

    def on_tool_finished(self, name: str, formatted_result: str) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass
