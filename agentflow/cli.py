#!/usr/bin/env python3
"""
AgentFlow CLI - Main entry point for the agentflow command
"""

import logging
from pathlib import Path

import click

from . import __version__, ensure_data_dir
from .config import DEFAULT_MODELS, load_settings
from .errors import ConfigError

logger = logging.getLogger("agentflow.cli")


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # SDK transports are noisy at debug level
    for name in ("httpx", "httpcore", "openai", "anthropic"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _build_agent(ctx):
    from .core.agent import Agent
    from .providers import create_provider
    from .ui import TerminalDisplay

    settings = ctx.obj["settings"]
    display = TerminalDisplay()
    try:
        provider = create_provider(settings)
    except ValueError as e:
        raise click.ClickException(str(e))
    return Agent(provider, display=display, settings=settings), display


@click.group(invoke_without_command=True)
@click.option('--version', '-v', is_flag=True, help='Show version')
@click.option('--verbose', is_flag=True, help='Enable debug logging')
@click.option('--provider', '-p', default=None, help='LLM provider (openai, anthropic, gemini, ollama, offline)')
@click.option('--model', '-m', default=None, help='Model name for the provider')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              default=None, help='Path to settings.yaml')
@click.pass_context
def main(ctx, version, verbose, provider, model, config_path):
    """
    AgentFlow - a conversational agent with web search, AI workflows and code execution.

    Run without arguments for interactive mode. Without an API key for the
    selected provider, answers come from the built-in offline simulator.

    \b
    Examples:
        agentflow                         # Interactive chat
        agentflow -p anthropic            # Use Claude
        agentflow chat "search for IBM"   # Single turn
        agentflow tools                   # List tools
    """
    if version:
        click.echo(f"AgentFlow v{__version__}")
        return

    _setup_logging(verbose)
    ensure_data_dir()

    try:
        settings = load_settings(config_path, provider=provider, model=model)
    except ConfigError as e:
        raise click.ClickException(str(e))

    ctx.obj = {"settings": settings}

    if ctx.invoked_subcommand is None:
        _launch_cli(ctx)


def _launch_cli(ctx):
    """Interactive chat loop."""
    agent, display = _build_agent(ctx)
    settings = ctx.obj["settings"]
    display.print_header(settings.provider, agent.provider.model, agent.provider.is_configured())
    if not agent.provider.is_configured():
        display.print_warning(agent.provider.get_config_help())
    agent.greet()

    try:
        while True:
            text = display.get_input().strip()
            if not text:
                continue

            command = text.lower()
            if command in ("/quit", "/exit", "/q"):
                break
            if command == "/help":
                display.print_help()
                continue
            if command == "/tools":
                display.print_tools(agent.tools)
                continue
            if command == "/clear":
                if agent.clear():
                    display.print_success("Conversation cleared")
                continue

            agent.run_turn(text)
            logger.debug(f"{agent.message_count} entries in conversation")
    finally:
        agent.close()

    display.console.print("[dim]Goodbye![/dim]")


@main.command()
@click.argument('message')
@click.pass_context
def chat(ctx, message):
    """Send a single message and show the reply."""
    agent, _ = _build_agent(ctx)
    try:
        handled = agent.run_turn(message)
    finally:
        agent.close()
    if not handled:
        raise click.ClickException("Message was empty")


@main.command()
def tools():
    """List the tools the agent can call."""
    from .skills import TOOL_SCHEMAS
    from .ui import TerminalDisplay

    TerminalDisplay().print_tools(TOOL_SCHEMAS)


@main.command()
@click.pass_context
def providers(ctx):
    """List LLM providers and whether each has a credential."""
    from .providers import list_providers
    from .ui import TerminalDisplay

    settings = ctx.obj["settings"]
    info = {}
    for name in list_providers():
        if name == "offline":
            info[name] = {"configured": True, "model": "offline-simulator"}
            continue
        candidate = settings if name == settings.provider else settings.with_provider(name)
        info[name] = {
            "configured": candidate.has_credentials,
            "model": candidate.model or DEFAULT_MODELS.get(name),
        }
    TerminalDisplay().print_providers(info, settings.provider)


if __name__ == "__main__":
    main()
