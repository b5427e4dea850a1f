"""Rich Console factory and theme for housectl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

HOUSE_THEME = Theme(
    {
        "house.ok": "bold green",
        "house.error": "bold red",
        "house.warning": "bold yellow",
        "house.op": "bold cyan",
        "house.key": "dim",
        "house.id": "bold blue",
        "house.name": "bold",
        "house.role.owner": "bold magenta",
        "house.role.member": "cyan",
        "house.inactive": "dim strike",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=HOUSE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_role(role: int) -> str:
    """Owners (role 1) stand out from other members."""
    return "house.role.owner" if role == 1 else "house.role.member"
