"""
Terminal display for AgentFlow - renders agent notifications with Rich.
"""

import time
from typing import Dict, Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from .. import __version__

BANNER = [
    " ▄▀█ █▀▀ █▀▀ █▄ █ ▀█▀ █▀▀ █   █▀█ █ █ █",
    " █▀█ █▄█ ██▄ █ ▀█  █  █▀  █▄▄ █▄█ ▀▄▀▄▀",
]

# Gradient colors for the banner (cyan -> purple)
GRADIENT_COLORS = ["#00d4ff", "#8844aa"]

ROLE_LABELS = {
    "user": ("You", "bold #e07a5f"),
    "assistant": ("AgentFlow", "bold cyan"),
}


class TerminalDisplay:
    """Implements the agent's display protocol on a Rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._tool_started: Dict[str, float] = {}

    # === Display protocol ===

    def on_message(self, role: str, text: str) -> None:
        if role == "user":
            # Already visible at the prompt
            return
        label, style = ROLE_LABELS.get(role, (role.title(), "bold"))
        self.console.print()
        self.console.print(Text(label, style=style))
        self.console.print(text, markup=False, highlight=False)

    def on_tool_started(self, name: str) -> None:
        self._tool_started[name] = time.time()
        self.console.print(f"  [cyan]●[/cyan] [dim]Running {escape(name)}...[/dim]")

    def on_tool_finished(self, name: str, formatted_result: str) -> None:
        started = self._tool_started.pop(name, None)
        duration = time.time() - started if started else 0.0
        success = not formatted_result.startswith("Error:")

        indicator = "[green]●[/green]" if success else "[red]●[/red]"
        self.console.print(f"  {indicator} [dim]{escape(name)} ({duration:.1f}s)[/dim]")
        self.console.print(
            Panel(Text(formatted_result), title=name, border_style="dim" if success else "red", expand=False)
        )

    def on_error(self, message: str) -> None:
        self.console.print(Panel(escape(message), title="Error", border_style="red", expand=False))

    # === Front end helpers ===

    def print_header(self, provider: str, model: str, configured: bool = True):
        """Print startup header with gradient banner."""
        self.console.print()
        self.console.print(f"[bold cyan]AgentFlow[/bold cyan] [dim]v{__version__}[/dim]")
        banner = Text()
        for i, line in enumerate(BANNER):
            banner.append(line + "\n", style=f"bold {GRADIENT_COLORS[i % len(GRADIENT_COLORS)]}")
        self.console.print(banner)

        info = f"{provider} · {model}"
        if not configured:
            info += " · offline simulator (no API key)"
        self.console.print(f"  [dim]{escape(info)}[/dim]")
        self.console.print("[dim]  /help for commands • /quit to exit[/dim]")
        self.console.print()

    def get_input(self, prompt: str = ">") -> str:
        """Read one line. EOF reads as /quit."""
        try:
            return self.console.input(f"[bold #e07a5f]{prompt}[/bold #e07a5f] ")
        except EOFError:
            return "/quit"
        except KeyboardInterrupt:
            self.console.print()
            return "/quit"

    def print_help(self):
        self.console.print(Rule(style="dim"))
        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Command", style="cyan")
        table.add_column("Description")
        for cmd, desc in (
            ("/help", "Show this help"),
            ("/tools", "List available tools"),
            ("/clear", "Clear conversation history"),
            ("/quit", "Exit"),
        ):
            table.add_row(cmd, desc)
        self.console.print(table)
        self.console.print(Rule(style="dim"))

    def print_tools(self, tools: Iterable):
        table = Table(show_header=True, header_style="bold", box=None)
        table.add_column("Tool", style="cyan")
        table.add_column("Arguments")
        table.add_column("Description")
        for tool in tools:
            args = ", ".join(
                name if name in tool.required else f"{name}?" for name in tool.properties
            )
            table.add_row(tool.name, args, tool.description)
        self.console.print()
        self.console.print(table)
        self.console.print()

    def print_providers(self, providers: dict, current: str):
        """Print available providers with their status."""
        table = Table(show_header=True, header_style="bold", box=None)
        table.add_column("Provider")
        table.add_column("Status")
        table.add_column("Model")

        for name, info in providers.items():
            marker = "[cyan]●[/cyan]" if name == current else " "
            status = "[green]✓[/green]" if info.get("configured") else "[red]✗[/red]"
            model = info.get("model") or "-"
            table.add_row(f"{marker} {name}", status, model)

        self.console.print()
        self.console.print(table)
        self.console.print()

    def print_success(self, message: str):
        self.console.print(f"[green]✓ {escape(message)}[/green]")

    def print_warning(self, message: str):
        self.console.print(f"[yellow]{escape(message)}[/yellow]")
