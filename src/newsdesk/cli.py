"""
Newsdesk CLI

Terminal surface for the news assistant.

Usage:
    newsdesk chat              - Interactive chat session
    newsdesk ask "question"    - Single round trip, print the replies
    newsdesk config            - Show effective configuration
    newsdesk version           - Show version
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from newsdesk import __version__
from newsdesk.core import config as config_module
from newsdesk.core.config import get_config_source
from newsdesk.core.logging import set_level
from newsdesk.services.chat.engine import AssistantEngine
from newsdesk.services.chat.messages import Message
from newsdesk.services.voice import CommandVoice

# Initialize Typer app and Rich console
app = typer.Typer(
    name="newsdesk",
    help="Newsdesk - conversational assistant for your news reader",
    add_completion=False
)
console = Console()

EXIT_COMMANDS = ("/quit", "/exit", "/q")


# =============================================================================
# Rendering
# =============================================================================

class PresenceSpinner:
    """Shows a spinner while the engine's busy indicator is on."""

    def __init__(self):
        self._status = console.status("[yellow]typing...[/yellow]", spinner="dots")

    def __call__(self, busy: bool) -> None:
        if busy:
            self._status.start()
        else:
            self._status.stop()


def render_message(message: Message) -> None:
    """Print one message with its results and quick actions."""
    if message.is_user:
        console.print(f"[dim]{message.format_time()}[/dim] [bold blue]You >[/bold blue] {message.text}")
        return

    console.print(f"[dim]{message.format_time()}[/dim] [bold green]Assistant >[/bold green]")
    console.print(Markdown(message.text))

    if message.attached_results:
        table = Table(show_header=True, header_style="bold", box=None)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Source")
        table.add_column("Link", style="dim")
        for index, result in enumerate(message.attached_results, start=1):
            table.add_row(str(index), result.title, result.source_name or result.snippet[:40], result.url)
        console.print(table)

    if message.attribution:
        console.print(f"[dim italic]Source: {message.attribution}[/dim italic]")

    if message.quick_actions:
        buttons = "  ".join(f"[bold][{action.id}][/bold] {action.label}" for action in message.quick_actions)
        console.print(buttons)
    console.print()


def resolve_action_key(message: Optional[Message], choice: str) -> Optional[str]:
    """Map "2" or "/tech_news" to an action key using the last assistant message."""
    if choice.startswith("/"):
        return choice[1:]
    if message is not None and choice.isdigit():
        for action in message.quick_actions:
            if action.id == choice:
                return action.action_key
    return None


def _last_assistant_message(engine: AssistantEngine) -> Optional[Message]:
    for message in reversed(engine.session.messages):
        if not message.is_user:
            return message
    return None


async def _chat_loop(engine: AssistantEngine) -> None:
    session = engine.open()
    session.subscribe(render_message)
    session.presence.subscribe(PresenceSpinner())
    for message in session.messages:
        render_message(message)

    while True:
        try:
            user_input = await asyncio.to_thread(console.input, "")
        except (EOFError, KeyboardInterrupt):
            break

        user_input = user_input.strip()
        if not user_input:
            continue
        if user_input.lower() in EXIT_COMMANDS:
            break
        if user_input.lower() == "/voice":
            state = engine.toggle_voice()
            console.print(f"[dim]Voice output {'on' if state else 'off'}[/dim]")
            if state and isinstance(engine.voice, CommandVoice) and not engine.voice.is_available():
                console.print(f"[yellow]'{engine.voice.command}' not found, nothing will be spoken[/yellow]")
            continue

        action_key = resolve_action_key(_last_assistant_message(engine), user_input)
        if action_key is not None:
            await engine.select_action(action_key)
        elif user_input.isdigit() or user_input.startswith("/"):
            console.print("[yellow]No such quick action[/yellow]")
        else:
            await engine.submit_text(user_input)

    engine.close()
    if isinstance(engine.voice, CommandVoice):
        engine.voice.reap()
    console.print("[dim]Goodbye![/dim]")


# =============================================================================
# Chat Commands
# =============================================================================

@app.command()
def chat(
    voice: bool = typer.Option(False, "--voice", help="Speak assistant replies"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Start an interactive chat session."""
    set_level("DEBUG" if verbose else "WARNING")
    console.print("[bold green]Newsdesk Assistant[/bold green]")
    console.print("[dim]Type a message, a quick-action number, /voice, or /quit[/dim]\n")

    engine = AssistantEngine(voice_enabled=voice or None)
    asyncio.run(_chat_loop(engine))


async def _ask_once(engine: AssistantEngine, text: str) -> None:
    session = engine.open()
    seeded = len(session)
    await engine.submit_text(text)
    for message in session.messages[seeded:]:
        if not message.is_user:
            render_message(message)
    engine.close()


@app.command()
def ask(
    text: str = typer.Argument(..., help="Message to send to the assistant"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Send a single message and print the assistant's replies."""
    set_level("DEBUG" if verbose else "WARNING")
    engine = AssistantEngine(voice_enabled=False)
    asyncio.run(_ask_once(engine, text))


# =============================================================================
# Configuration Commands
# =============================================================================

def _mask(value: str) -> str:
    if not value:
        return "[red]unset[/red]"
    return value[:4] + "..." if len(value) > 8 else "***"


@app.command()
def config():
    """Show the effective configuration and where each value comes from."""
    settings = config_module.settings
    # (dotted yaml key, env var, display value)
    rows = [
        ("news.api_key", "NEWS_API_KEY", _mask(settings.news.api_key)),
        ("news.base_url", "NEWS_API_BASE_URL", settings.news.base_url),
        ("news.country", "NEWS_API_COUNTRY", settings.news.country),
        ("knowledge.api_key", "GEMINI_API_KEY", _mask(settings.knowledge.api_key)),
        ("knowledge.model", "GEMINI_MODEL", settings.knowledge.model),
        ("assistant.min_delay_seconds", "NEWSDESK_MIN_DELAY", str(settings.assistant.min_delay_seconds)),
        ("assistant.max_delay_seconds", "NEWSDESK_MAX_DELAY", str(settings.assistant.max_delay_seconds)),
        ("assistant.max_results", None, str(settings.assistant.max_results)),
        ("assistant.voice_enabled", "NEWSDESK_VOICE", str(settings.assistant.voice_enabled)),
        ("logging.level", "NEWSDESK_LOG_LEVEL", settings.logging.level),
    ]

    table = Table(title="Newsdesk Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")
    for key, env_key, value in rows:
        table.add_row(key, value, get_config_source(key, env_key))
    console.print(table)


# =============================================================================
# Version Command
# =============================================================================

@app.command()
def version():
    """Show Newsdesk version."""
    console.print(f"[bold]Newsdesk {__version__}[/bold]")
    console.print("Conversational news assistant")


# =============================================================================
# Main Entry Point
# =============================================================================

def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
