"""Rich rendering of the transcript for the terminal."""

from rich.console import Console, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from hookchat.models import Message

console = Console()


def format_body(text: str, code_theme: str = "monokai") -> Markdown:
    """Markdown body with syntax-highlighted fenced code blocks."""
    return Markdown(text, code_theme=code_theme, hyperlinks=True)


def render_message(message: Message, code_theme: str = "monokai") -> RenderableType:
    """Panel for one message: user on the right in cyan, assistant on the left."""
    stamp = message.created_at.astimezone().strftime("%H:%M")
    if message.is_user:
        return Panel(
            Text(message.text),
            title="[bold cyan]You[/]",
            subtitle=f"[dim]{stamp}[/]",
            subtitle_align="right",
            border_style="cyan",
            expand=False,
        )
    return Panel(
        format_body(message.text, code_theme),
        title="[bold green]Assistant[/]",
        subtitle=f"[dim]{stamp}[/]",
        subtitle_align="left",
        border_style="green",
    )


class TranscriptPrinter:
    """Controller listener printing each message once, as it is appended."""

    def __init__(self, out: Console | None = None, code_theme: str = "monokai") -> None:
        self._console = out or console
        self._code_theme = code_theme
        self._printed = 0

    def __call__(self, controller) -> None:
        messages = controller.transcript.all()
        for message in messages[self._printed:]:
            self._console.print(render_message(message, self._code_theme))
        self._printed = len(messages)
