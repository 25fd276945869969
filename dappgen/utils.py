"""Shared utility functions for dappgen.

Provides async command execution, JSON I/O, file-system helpers and
Rich-based console reporting used by every pipeline step.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(cmd: list[str], cwd: str | Path | None = None) -> int:
    """Run a command asynchronously and wait for it to exit.

    The child inherits the parent's stdin, stdout and stderr so interactive
    output stays visible.  There is no timeout: the call returns only when
    the process exits.

    Raises:
        FileNotFoundError: If the executable cannot be found on ``PATH``.

    Returns:
        The process exit status.
    """
    process = await asyncio.create_subprocess_exec(*cmd, cwd=str(cwd) if cwd else None)
    return await process.wait()


def format_command(cmd: list[str]) -> str:
    """Render a command the way a user would type it."""
    return " ".join(cmd)


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def sanitize_name(name: str) -> str:
    """Convert an arbitrary project name to a lowercase identifier slug.

    Examples::

        sanitize_name("My Dapp") -> "mydapp"
        sanitize_name("hello-world_2") -> "helloworld2"
    """
    return re.sub(r"[^a-z0-9]", "", name.strip().lower())


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def pretty_json(data: Any) -> str:
    """Serialise *data* with the two-space indentation used for every JSON file."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file whose top level is an object.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    file_path = Path(path)
    data = json.loads(file_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {file_path}, got {type(data).__name__}")
    return data


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> None:
    """Save data as pretty-printed JSON, replacing the file.

    Parent directories are created automatically.  The write is performed in
    a worker thread so the event loop is not blocked.
    """
    await write_text(path, pretty_json(data))


async def write_text(path: str | Path, content: str) -> Path:
    """Write *content* to *path* (full overwrite) in a worker thread."""
    file_path = Path(path)
    await asyncio.to_thread(_write_file, file_path, content)
    return file_path


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


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


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step_header(index: int, total: int, name: str) -> None:
    """Print a rule announcing pipeline step *index* of *total*."""
    console.print()
    console.print(
        Rule(f"[bold bright_cyan] [{index}/{total}] {name} [/bold bright_cyan]", style="bright_cyan")
    )


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
