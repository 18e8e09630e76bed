"""Shared utility functions for appforge.

Provides name/slug helpers used by every generator, file-system helpers for
writing generated trees to disk, and Rich-based progress reporting.
"""

from __future__ import annotations

import asyncio
import re
import unicodedata
from pathlib import Path

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def slugify(text: str) -> str:
    """Convert text to a URL/filename-safe slug (hyphenated).

    Examples::

        slugify("Post Detail") -> "post-detail"
        slugify("  API Docs ") -> "api-docs"
    """
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower().strip())
    return slug.strip("-")


def snake_slugify(text: str) -> str:
    """Convert text to an identifier-safe slug (underscored).

    E.g. ``'Blog Platform'`` -> ``'blog_platform'``.
    """
    slug = re.sub(r"[^a-z0-9]+", "_", text.lower().strip())
    return slug.strip("_")


def to_pascal(name: str) -> str:
    """Convert ``some-thing``, ``some_thing`` or ``some thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", name)
    return "".join(word[:1].upper() + word[1:] for word in parts if word)


def component_name(page: str) -> str:
    """Return the React component name for a page.

    Apostrophes are dropped, every other run of non-alphanumerics splits a
    word, and a ``Page`` suffix is appended.  Names starting with a digit get
    a ``Page`` prefix so the result is a valid identifier::

        component_name("Post Detail") -> "PostDetailPage"
        component_name("Sign-Up")     -> "SignUpPage"
        component_name("404")         -> "Page404Page"
    """
    ascii_page = unicodedata.normalize("NFKD", page).encode("ascii", "ignore").decode("ascii")
    words = re.split(r"[^0-9A-Za-z]+", re.sub(r"['’]", "", ascii_page))
    name = "".join(word[:1].upper() + word[1:] for word in words if word) or "Untitled"
    if name[0].isdigit():
        name = "Page" + name
    return name + "Page"


def route_path(page: str) -> str:
    """Return the router path for a page, e.g. ``"Post Detail"`` -> ``"/post-detail"``."""
    return "/" + slugify(page.replace("'", "").replace("’", ""))


def capitalize(value: str) -> str:
    """Upper-case the first character only (``postgresql`` -> ``Postgresql``)."""
    return value[:1].upper() + value[1:]


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_files(files: dict[str, str], output_dir: str | Path) -> list[Path]:
    """Write a ``path -> content`` map below *output_dir*.

    Writes happen in a worker thread so large trees do not block the event
    loop.

    Returns:
        The written paths, in map order.
    """
    root = Path(output_dir)
    written: list[Path] = []
    for rel_path, content in files.items():
        out = root / rel_path
        await asyncio.to_thread(_write_file, out, content)
        written.append(out)
    return written


def format_size(num_bytes: int) -> str:
    """Format a byte count for display.

    Examples::

        format_size(512)     -> "512 B"
        format_size(2048)    -> "2.0 KB"
        format_size(3145728) -> "3.0 MB"
    """
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step_header(name: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule announcing a pipeline step."""
    console.print()
    console.print(Rule(f"[bold {color}] {name.upper()} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
