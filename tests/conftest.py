"""Shared pytest fixtures for the dappgen test suite.

Provides reusable fixtures for:
- A fake process gateway that simulates create-react-native-app, expo,
  truffle, the package managers and prettier on the temp file system
- Build parameters and configs for each toolchain variant
- Ready-made build contexts
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from dappgen.config import Config
from dappgen.scaffolder.context import create_build_context
from dappgen.scaffolder.gateway import CommandResult, ProcessGateway
from dappgen.scaffolder.models import BlockchainTools, BuildContext, BuildParameters


# ---------------------------------------------------------------------------
# Simulated base project
# ---------------------------------------------------------------------------

BASE_GITIGNORE = "node_modules/**/*\n.expo/*\nnpm-debug.*\n"


def base_package_json(name: str) -> dict[str, Any]:
    """package.json roughly as create-react-native-app leaves it."""
    return {
        "name": name,
        "main": "index.js",
        "scripts": {
            "android": "expo run:android",
            "ios": "expo run:ios",
            "web": "expo start --web",
        },
        "dependencies": {
            "expo": "~40.0.0",
            "react": "16.13.1",
            "react-native": "~0.63.4",
            "socket.io-client": "^3.0.5",
        },
        "devDependencies": {"@babel/core": "~7.9.0", "typescript": "~4.0.0"},
        "private": True,
    }


def base_app_json(name: str) -> dict[str, Any]:
    return {
        "expo": {
            "name": name,
            "slug": name,
            "version": "1.0.0",
            "ios": {"supportsTablet": True},
            "assetBundlePatterns": ["**/*"],
        }
    }


def write_base_project(project_dir: Path, *, yarn: bool = False) -> None:
    """Lay down the files the base scaffold tool would create."""
    project_dir.mkdir(parents=True, exist_ok=True)
    name = project_dir.name
    (project_dir / "package.json").write_text(json.dumps(base_package_json(name), indent=2))
    (project_dir / "app.json").write_text(json.dumps(base_app_json(name), indent=2))
    (project_dir / ".gitignore").write_text(BASE_GITIGNORE)
    (project_dir / "App.tsx").write_text("export default function App() { return null; }\n")
    (project_dir / "index.js").write_text("import { registerRootComponent } from 'expo';\n")
    if yarn:
        (project_dir / "yarn.lock").write_text("# yarn lockfile v1\n")


# ---------------------------------------------------------------------------
# Fake gateway
# ---------------------------------------------------------------------------


class FakeGateway(ProcessGateway):
    """Records commands instead of spawning them and fakes their side effects.

    Args:
        create_project: Whether the base scaffold command creates the project.
        yarn: Whether the simulated base project ships a ``yarn.lock``.
        fail_on: Substring of a command line that should exit with status 1.
    """

    def __init__(
        self,
        *,
        create_project: bool = True,
        yarn: bool = False,
        fail_on: str | None = None,
    ) -> None:
        self.create_project = create_project
        self.yarn = yarn
        self.fail_on = fail_on
        self.commands: list[tuple[tuple[str, ...], Path]] = []

    @property
    def command_lines(self) -> list[str]:
        return [" ".join(command) for command, _ in self.commands]

    async def run(self, command: list[str], cwd: str | Path) -> CommandResult:
        workdir = Path(cwd)
        self.commands.append((tuple(command), workdir))

        if self.fail_on and self.fail_on in " ".join(command):
            return CommandResult(command=tuple(command), cwd=workdir, returncode=1)

        if command[:2] == ["npx", "create-react-native-app"] and self.create_project:
            write_base_project(workdir / command[2], yarn=self.yarn)
        elif command[:3] == ["npx", "truffle", "init"]:
            for directory in ("contracts", "migrations", "test"):
                (workdir / directory).mkdir(exist_ok=True)
            (workdir / "truffle-config.js").write_text("module.exports = {};\n")

        return CommandResult(command=tuple(command), cwd=workdir, returncode=0)


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def gateway_factory():
    """Build a ``FakeGateway`` with custom behaviour."""
    return FakeGateway


# ---------------------------------------------------------------------------
# Parameters, config & context
# ---------------------------------------------------------------------------


def make_params(
    tools: BlockchainTools = BlockchainTools.NONE, name: str = "demo"
) -> BuildParameters:
    return BuildParameters.with_defaults(name, tools)


@pytest.fixture
def scaffold_config(tmp_path: Path) -> Config:
    """Config that creates projects under tmp_path."""
    return Config(output_dir=tmp_path)


@pytest.fixture(params=list(BlockchainTools), ids=lambda t: t.value)
def any_tools(request) -> BlockchainTools:
    """Parametrised over every toolchain variant."""
    return request.param


@pytest.fixture
def context_factory(tmp_path: Path):
    """Create a simulated base project under tmp_path and build its context."""

    async def _factory(
        tools: BlockchainTools = BlockchainTools.NONE,
        *,
        yarn: bool = False,
        with_project: bool = True,
    ) -> BuildContext:
        params = make_params(tools)
        if with_project:
            write_base_project(tmp_path / params.name, yarn=yarn)
        return await create_build_context(params, tmp_path)

    return _factory
