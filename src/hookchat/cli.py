"""hookchat CLI - Main entry point.

Commands:
- chat: Interactive conversation with the webhook
- send: Send a single message and print the reply
- session: Show or reset the stored session token
"""

import asyncio
import logging
from typing import Annotated, Optional

import typer
from rich.prompt import Prompt

from hookchat import __version__
from hookchat.config import ChatSettings
from hookchat.controller import ConversationController
from hookchat.exceptions import ConfigurationError
from hookchat.render import TranscriptPrinter, console, render_message
from hookchat.session import SessionIdentityManager
from hookchat.storage import FileTokenStore
from hookchat.webhook import WebhookClient

EXIT_COMMANDS = {"/quit", "/exit"}

app = typer.Typer(
    help="hookchat - chat with a workflow-automation webhook.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"hookchat {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """hookchat - chat with a workflow-automation webhook."""


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_settings(url: str | None) -> ChatSettings:
    settings = ChatSettings()
    if url:
        settings = settings.model_copy(update={"webhook_url": url})
    setup_logging(settings.log_level)
    return settings


def create_client(settings: ChatSettings) -> WebhookClient:
    if not settings.webhook_url:
        raise ConfigurationError(
            "No webhook URL configured. Set HOOKCHAT_WEBHOOK_URL or pass --url."
        )
    return WebhookClient(settings.webhook_url, headers=settings.headers)


def create_sessions(settings: ChatSettings) -> SessionIdentityManager:
    return SessionIdentityManager(FileTokenStore(settings.state_file), key=settings.session_key)


def build_controller(settings: ChatSettings, client: WebhookClient) -> ConversationController:
    return ConversationController(
        client,
        create_sessions(settings),
        restore_session=settings.restore_session,
        welcome_message=settings.welcome_message,
        deadline=settings.request_deadline,
    )


async def _chat(settings: ChatSettings) -> None:
    async with create_client(settings) as client:
        controller = build_controller(settings, client)
        controller.subscribe(TranscriptPrinter(console, settings.code_theme))

        with console.status("[dim]Loading conversation...[/]"):
            session = await controller.start()
        console.print(f"[dim]Session {session.session_id}. Type /quit to leave.[/]")

        while True:
            try:
                controller.draft = Prompt.ask("[bold cyan]You[/]", console=console)
            except (EOFError, KeyboardInterrupt):
                console.print()
                break
            if controller.draft.strip() in EXIT_COMMANDS:
                break
            with console.status("[dim]Assistant is typing...[/]"):
                await controller.submit()


async def _send(settings: ChatSettings, text: str) -> bool:
    async with create_client(settings) as client:
        controller = build_controller(settings, client)
        await controller.start()
        if not await controller.submit(text):
            return False
        reply = controller.transcript.last
        console.print(render_message(reply, settings.code_theme))
        return controller.last_error is None


@app.command()
def chat(
    url: Annotated[
        Optional[str], typer.Option("--url", "-u", help="Webhook URL (overrides HOOKCHAT_WEBHOOK_URL)")
    ] = None,
) -> None:
    """Start an interactive conversation."""
    settings = load_settings(url)
    try:
        asyncio.run(_chat(settings))
    except ConfigurationError as e:
        console.print(f"[bold red]✗[/] {e.message}")
        raise typer.Exit(1)


@app.command()
def send(
    text: Annotated[str, typer.Argument(help="Message to send")],
    url: Annotated[
        Optional[str], typer.Option("--url", "-u", help="Webhook URL (overrides HOOKCHAT_WEBHOOK_URL)")
    ] = None,
) -> None:
    """Send one message and print the reply."""
    if not text.strip():
        console.print("[bold red]✗[/] Message is empty")
        raise typer.Exit(1)

    settings = load_settings(url)
    try:
        ok = asyncio.run(_send(settings, text))
    except ConfigurationError as e:
        console.print(f"[bold red]✗[/] {e.message}")
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command()
def session(
    reset: Annotated[bool, typer.Option("--reset", help="Forget the stored session token")] = False,
) -> None:
    """Show or reset the stored session token."""
    settings = load_settings(None)
    sessions = create_sessions(settings)

    if reset:
        if sessions.reset():
            console.print("[bold green]✓[/] Session token cleared")
        else:
            console.print("[bold blue]ℹ[/] No stored session token")
        return

    current = sessions.init()
    console.print(f"[bold]Session:[/] {current.session_id}")
    console.print(f"[bold]Store:[/] {settings.state_file.expanduser()}")
    if not current.persisted:
        console.print("[bold yellow]⚠[/] Session storage unavailable; token is not persisted")


if __name__ == "__main__":
    app()
