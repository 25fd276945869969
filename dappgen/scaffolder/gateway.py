"""External process gateway.

Every external tool the scaffolder drives (create-react-native-app, expo,
truffle, the package manager, prettier) goes through ``ProcessGateway``.
Commands inherit the caller's terminal so their progress output is visible
live; only the exit status comes back.  Tests substitute a fake gateway with
the same ``run`` signature.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path

from dappgen.utils import console, format_command, format_duration, run_command


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    command: tuple[str, ...]
    cwd: Path
    returncode: int
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return format_command(list(self.command))


class ExternalCommandError(Exception):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, result: CommandResult):
        self.result = result
        self.command = result.command_line
        self.returncode = result.returncode
        super().__init__(
            f"Command failed (exit {result.returncode}): {result.command_line} (cwd: {result.cwd})"
        )


class ProcessGateway:
    """Runs external commands synchronously with respect to the pipeline.

    There is no timeout and no cancellation: a command runs until it exits.
    """

    async def run(self, command: list[str], cwd: str | Path) -> CommandResult:
        """Run *command* in *cwd* with inherited stdio and report its status."""
        workdir = Path(cwd)
        console.print(f"  [dim]$ {format_command(command)}[/dim]")
        start = time.monotonic()
        returncode = await run_command(command, cwd=workdir)
        result = CommandResult(
            command=tuple(command),
            cwd=workdir,
            returncode=returncode,
            duration_seconds=time.monotonic() - start,
        )
        if result.success:
            console.print(
                f"  [green]+[/green] {result.command_line} "
                f"[dim]({format_duration(result.duration_seconds)})[/dim]"
            )
        return result

    async def check(self, command: list[str], cwd: str | Path) -> CommandResult:
        """Like :meth:`run`, but raise ``ExternalCommandError`` on failure."""
        result = await self.run(command, cwd)
        if not result.success:
            raise ExternalCommandError(result)
        return result
