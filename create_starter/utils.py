"""Shared helpers for create-starter.

Provides the Rich console used for all user-facing output, progress and
summary rendering, duration formatting, and small file-system helpers that
translate ``OSError`` into ``FilesystemError``.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from create_starter.errors import FilesystemError

console = Console()

# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def copy_tree(source: str | Path, destination: str | Path) -> Path:
    """Recursively copy *source* into *destination*, overwriting existing files.

    Existing directories at the destination are merged rather than replaced.
    Symlinks are copied as links, so dangling or out-of-tree targets are kept.

    Raises:
        FilesystemError: If *source* is missing or the copy fails.
    """
    src = Path(source)
    dest = Path(destination)
    if not src.is_dir():
        raise FilesystemError(f"Directory not found: {src}", path=src)
    try:
        shutil.copytree(src, dest, symlinks=True, dirs_exist_ok=True)
    except (OSError, shutil.Error) as exc:
        raise FilesystemError(f"Could not copy {src} to {dest}: {exc}", path=dest) from exc
    return dest


def remove_tree(path: str | Path) -> None:
    """Delete a directory tree. A missing directory is not an error."""
    target = Path(path)
    if not target.exists():
        return
    try:
        shutil.rmtree(target)
    except OSError as exc:
        raise FilesystemError(f"Could not remove {target}: {exc}", path=target) from exc


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


def single_line(chunk: str | bytes) -> str:
    """Collapse a chunk of subprocess output onto one line for progress display."""
    if isinstance(chunk, bytes):
        chunk = chunk.decode("utf-8", errors="replace")
    return " ".join(part.strip() for part in chunk.splitlines() if part.strip())


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
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


def create_progress() -> Progress:
    """Create a Rich progress display for long-running steps.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
