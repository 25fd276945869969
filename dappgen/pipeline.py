"""dappgen pipeline orchestrator.

Scaffolds a React Native + Web3 project in a fixed sequence of steps:

 1. Create the base project with create-react-native-app.
 2. Resolve the build context (paths, toolchain variant, package manager).
 3. App icon (extension point).
 4. Merge app identifiers into app.json and eject from Expo.
 5. Inject the Node runtime shims into index.js.
 6. Create the postinstall and toolchain scripts.
 7. Tests (extension point).
 8. Merge dependencies, scripts and tooling config into package.json.
 9. Write the bundler, transpiler, linter, type and spelling configs.
10. Append ignore rules to .gitignore.
11. Write .env and .env.example.
12. Install dependencies.
13. Write the example app and contract sources.
14. Format everything with prettier.

Usage::

    python -m dappgen.pipeline my-dapp
    python -m dappgen.pipeline my-dapp --blockchain-tools hardhat -o ./projects
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError
from rich.panel import Panel

from dappgen.config import Config
from dappgen.reporter import get_success_message, print_result
from dappgen.scaffolder.context import create_build_context
from dappgen.scaffolder.gateway import ExternalCommandError, ProcessGateway
from dappgen.scaffolder.generator import ProjectGenerator
from dappgen.scaffolder.models import (
    BlockchainTools,
    BuildContext,
    BuildParameters,
    BuildResult,
    CreationStatus,
)
from dappgen.scaffolder.templates import TemplateRenderer
from dappgen.utils import (
    console,
    format_duration,
    print_step_header,
    print_success,
    print_summary_table,
)

Step = Callable[[BuildContext], Awaitable[None]]
T = TypeVar("T")

PROJECT_DIR_MISSING = "Failed to resolve project directory."


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ScaffoldError(Exception):
    """Raised when a pipeline step fails irrecoverably."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"{step}: {message}")


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class ScaffoldPipeline:
    """Runs the scaffolding steps in order against a single build context.

    The pipeline is strictly sequential: every step relies on files or tool
    output produced by the ones before it, so the first failure ends the run.
    """

    def __init__(
        self,
        config: Config,
        gateway: ProcessGateway | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.generator = ProjectGenerator(config, gateway=gateway, renderer=renderer)

    def steps(self) -> list[tuple[str, Step]]:
        """The context-consuming steps, in execution order."""
        gen = self.generator
        steps: list[tuple[str, Step]] = [
            ("App icon", gen.set_app_icon),
            ("Eject Expo project", gen.eject_expo_project),
            ("Inject runtime shims", gen.inject_shims),
            ("Create scripts", gen.create_scripts),
            ("Create tests", gen.create_tests),
            ("Prepare package.json", gen.prepare_package),
            ("Prepare metro.config.js", gen.prepare_metro),
            ("Prepare babel.config.js", gen.prepare_babel),
            ("Prepare .eslintrc.json", gen.prepare_eslint),
            ("Prepare index.d.ts", gen.prepare_type_roots),
            ("Prepare .cspell.json", gen.prepare_spelling),
            ("Prepare tsconfig.json", gen.prepare_tsc),
            ("Prepare .gitignore", gen.prepare_gitignore),
            ("Write .env", gen.write_env),
            ("Install dependencies", gen.install),
            ("Prepare example", gen.prepare_example),
        ]
        if self.config.run_formatter:
            steps.append(("Format sources", gen.prettify))
        return steps

    async def run(self, params: BuildParameters) -> BuildResult:
        """Scaffold the project described by *params*.

        Returns:
            A frozen ``BuildResult``.  Failures are reported through the
            result's status and message rather than raised.
        """
        start = time.monotonic()
        steps = self.steps()
        total = len(steps) + 2

        console.print(
            Panel(
                f"[bold bright_cyan]dappgen[/bold bright_cyan]\n"
                f"Project   : {params.name}\n"
                f"Toolchain : {params.blockchain_tools.value}\n"
                f"Output    : {Path(self.config.output_dir).resolve()}",
                title="[bold]Scaffold Start[/bold]",
                border_style="bright_cyan",
            )
        )

        ctx: BuildContext | None = None
        try:
            print_step_header(1, total, "Create base project")
            scaffold = await self._guard(
                "Create base project", self.generator.create_base_project(params)
            )
            if not scaffold.success:
                raise ScaffoldError("Create base project", str(ExternalCommandError(scaffold)))

            print_step_header(2, total, "Resolve build context")
            ctx = await self._guard(
                "Resolve build context",
                create_build_context(params, self.config.output_dir),
            )
            if not await asyncio.to_thread(ctx.paths.project_dir.is_dir):
                return self._failure(ctx, PROJECT_DIR_MISSING)

            print_summary_table(
                {
                    "Project directory": str(ctx.paths.project_dir),
                    "Toolchain": ctx.options.blockchain_tools.value,
                    "Package manager": "yarn" if ctx.options.yarn else "npm",
                    "Bundle identifier": ctx.options.bundle_identifier,
                    "Package name": ctx.options.package_name,
                    "URI scheme": ctx.options.uri_scheme,
                },
                title="Build Context",
            )

            for index, (name, step) in enumerate(steps, start=3):
                print_step_header(index, total, name)
                await self._guard(name, step(ctx))
        except ScaffoldError as exc:
            # The first failure ends the run.
            return self._failure(ctx, str(exc))

        print_success(f"Scaffolded {params.name} in {format_duration(time.monotonic() - start)}")
        return BuildResult(
            context=ctx,
            status=CreationStatus.SUCCESS,
            message=get_success_message(ctx),
        )

    @staticmethod
    async def _guard(step: str, awaitable: Awaitable[T]) -> T:
        """Await one step, re-raising its failure as ``ScaffoldError``.

        External command failures, file-system errors and malformed JSON
        (``ValueError``) are fatal; anything else propagates unchanged.
        """
        try:
            return await awaitable
        except ExternalCommandError as exc:
            raise ScaffoldError(step, str(exc)) from exc
        except (OSError, ValueError) as exc:
            raise ScaffoldError(step, f"{type(exc).__name__}: {exc}") from exc

    def _failure(self, ctx: BuildContext | None, message: str) -> BuildResult:
        """Build a FAILURE result; rendering is left to ``print_result``."""
        return BuildResult(context=ctx, status=CreationStatus.FAILURE, message=message)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="dappgen",
        description="dappgen -- scaffold a React Native app with Web3 built in",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  dappgen my-dapp\n"
            "  dappgen my-dapp --blockchain-tools truffle\n"
            "  dappgen my-dapp --blockchain-tools hardhat -o ./projects\n"
        ),
    )
    parser.add_argument("name", help="Project name (letters, digits, '-' and '_')")
    parser.add_argument(
        "--blockchain-tools",
        choices=[tool.value for tool in BlockchainTools],
        default=BlockchainTools.NONE.value,
        help="Blockchain toolchain to integrate (default: none)",
    )
    parser.add_argument("--bundle-identifier", default=None, help="iOS bundle identifier")
    parser.add_argument("--package-name", default=None, help="Android package name")
    parser.add_argument("--uri-scheme", default=None, help="Deep-link URI scheme")
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory the project is created in (default: current directory)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file (default: read DAPPGEN_* environment variables)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``dappgen`` / ``python -m dappgen.pipeline``."""
    args = build_parser().parse_args(argv)

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            console.print(f"[bold red]Error:[/bold red] Config file not found: {config_path}")
            sys.exit(1)
        config = Config.load(config_path)
    else:
        config = Config.from_env()
    if args.output:
        config = config.model_copy(update={"output_dir": Path(args.output)})

    try:
        params = BuildParameters.with_defaults(
            args.name,
            BlockchainTools(args.blockchain_tools),
            bundle_identifier=args.bundle_identifier,
            package_name=args.package_name,
            uri_scheme=args.uri_scheme,
        )
    except ValidationError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc.errors()[0]['msg']}")
        sys.exit(1)

    result = asyncio.run(ScaffoldPipeline(config).run(params))
    print_result(result)
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
