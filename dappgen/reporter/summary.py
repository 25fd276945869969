"""Success summary for a scaffolded project.

The message is Rich markup: a fixed banner, an optional variant prefix
telling the user to start the simulated chain, the run commands, and a
variant suffix with recompile/test instructions or the Infura note.
"""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel

from dappgen.scaffolder.models import (
    BuildContext,
    BuildResult,
    HardhatOptions,
    NoToolchainOptions,
    TruffleOptions,
)
from dappgen.utils import console, print_error


def _bold(text: str) -> str:
    return f"[bold white]{text}[/bold white]"


def get_script_command(ctx: BuildContext, script: str) -> str:
    """How to invoke package script *script* with the project's package manager."""
    runner = "yarn" if ctx.options.yarn else "npm run-script"
    return _bold(f"{runner} {script}")


def get_success_message_prefix(ctx: BuildContext) -> str | None:
    variant = ctx.options.variant
    if isinstance(variant, TruffleOptions):
        script = "ganache"
    elif isinstance(variant, HardhatOptions):
        script = "hardhat"
    elif isinstance(variant, NoToolchainOptions):
        return None
    else:
        raise TypeError(f"Unhandled toolchain variant: {variant!r}")
    return (
        "Before starting, you must initialize the simulated blockchain by executing:\n"
        f"- {get_script_command(ctx, script)}"
    )


def get_success_message_suffix(ctx: BuildContext) -> str:
    variant = ctx.options.variant
    if isinstance(variant, TruffleOptions):
        compiler = "npx truffle compile"
    elif isinstance(variant, HardhatOptions):
        compiler = "npx hardhat compile"
    elif isinstance(variant, NoToolchainOptions):
        return (
            "By the way, we've added a tiny stub that connects to Infura for you.\n"
            f"You'll need to fill in an INFURA_API_KEY in your {_bold('.env')} "
            "for this to work."
        )
    else:
        raise TypeError(f"Unhandled toolchain variant: {variant!r}")
    return (
        "To recompile your contracts you can execute:\n"
        f"{_bold(compiler)}\n"
        "\n"
        "You can also test your contracts using:\n"
        f"{get_script_command(ctx, 'test')}"
    )


def get_success_message(ctx: BuildContext) -> str:
    """Compose the full success summary for *ctx*.  Pure; no output."""
    sections = ["[green]✔[/green] Successfully integrated Web3 into React Native!"]

    prefix = get_success_message_prefix(ctx)
    if prefix:
        sections.append(prefix)

    run_lines = [
        "To compile and run your project in development, execute one of the following commands:"
    ]
    run_lines.extend(f"- {get_script_command(ctx, target)}" for target in ("ios", "android", "web"))
    sections.append("\n".join(run_lines))

    sections.append(get_success_message_suffix(ctx))
    return "\n\n".join(sections)


def print_result(result: BuildResult) -> None:
    """Render *result* on the shared console."""
    if result.success:
        console.print()
        console.print(
            Panel(
                result.message,
                title="[bold]Project Ready[/bold]",
                border_style="green",
            )
        )
    else:
        print_error(f"Scaffolding failed: {escape(result.message)}")
