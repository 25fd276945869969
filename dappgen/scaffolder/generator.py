"""Pipeline steps that turn a bare React Native app into a Web3 dapp.

``ProjectGenerator`` holds one coroutine per step.  Each step receives the
frozen ``BuildContext`` and either writes files or drives an external tool
through the ``ProcessGateway``; the order in which they run is owned by
``dappgen.pipeline.ScaffoldPipeline``.
"""

from __future__ import annotations

import asyncio
import json
import shutil
from pathlib import Path
from typing import Any

from dappgen.config import Config
from dappgen.utils import ensure_dir, pretty_json, write_text

from .gateway import CommandResult, ProcessGateway
from .merge import merge_into
from .models import (
    BuildContext,
    BuildParameters,
    HardhatOptions,
    NoToolchainOptions,
    TruffleOptions,
)
from .templates import TemplateRenderer
from .variants import (
    flattened_dev_dependencies,
    flattened_scripts,
    gitignore_blocks,
    resolve_environment_variables,
)


# ---------------------------------------------------------------------------
# Fixed configuration payloads
# ---------------------------------------------------------------------------

PACKAGE_KEYWORDS = [
    "react",
    "react-native",
    "dapp",
    "ethereum",
    "web3",
    "starter",
    "react-native-web",
]

BASE_DEPENDENCIES: dict[str, str] = {
    "dependencies.base-64": "1.0.0",
    "dependencies.buffer": "6.0.3",
    "dependencies.web3": "1.3.1",
    "dependencies.node-libs-browser": "2.2.1",
    "dependencies.path-browserify": "0.0.0",
    "dependencies.react-native-stream": "0.1.9",
    "dependencies.react-native-crypto": "2.2.0",
    "dependencies.react-native-get-random-values": "1.5.0",
    "dependencies.react-native-dotenv": "2.4.3",
}

BASE_DEV_DEPENDENCIES: dict[str, str] = {
    "devDependencies.dotenv": "8.2.0",
    "devDependencies.prettier": "2.2.1",
    "devDependencies.husky": "4.3.8",
    "devDependencies.@typescript-eslint/eslint-plugin": "^4.0.1",
    "devDependencies.@typescript-eslint/parser": "^4.0.1",
    "devDependencies.eslint": "^7.8.0",
    "devDependencies.eslint-config-prettier": "^6.11.0",
    "devDependencies.eslint-plugin-eslint-comments": "^3.2.0",
    "devDependencies.eslint-plugin-functional": "^3.0.2",
    "devDependencies.eslint-plugin-import": "^2.22.0",
    "devDependencies.lint-staged": "10.5.3",
}

# Node core modules aliased for the React Native bundler.
NODE_CORE_ALIASES: dict[str, str] = {
    "react-native.stream": "react-native-stream",
    "react-native.crypto": "react-native-crypto",
    "react-native.path": "path-browserify",
    "react-native.process": "node-libs-browser/mock/process",
}

LINT_STAGED_OVERLAY: dict[str, Any] = {
    "lint-staged": {
        "*.{ts,tsx}": "eslint --ext '.ts,.tsx' -c .eslintrc.json",
    },
}

ESLINT_CONFIG: dict[str, Any] = {
    "root": True,
    "parser": "@typescript-eslint/parser",
    "env": {"es6": True},
    "ignorePatterns": ["node_modules", "build", "coverage"],
    "plugins": ["import", "eslint-comments", "functional"],
    "extends": [
        "eslint:recommended",
        "plugin:eslint-comments/recommended",
        "plugin:@typescript-eslint/recommended",
        "plugin:import/typescript",
        "plugin:functional/lite",
        "prettier",
        "prettier/@typescript-eslint",
    ],
    "globals": {"console": True, "__DEV__": True},
    "rules": {
        "@typescript-eslint/explicit-module-boundary-types": "off",
        "eslint-comments/disable-enable-pair": ["error", {"allowWholeFile": True}],
        "eslint-comments/no-unused-disable": "error",
        "import/order": [
            "error",
            {"newlines-between": "always", "alphabetize": {"order": "asc"}},
        ],
        "sort-imports": ["error", {"ignoreDeclarationSort": True, "ignoreCase": True}],
    },
}

TSCONFIG: dict[str, Any] = {
    "compilerOptions": {
        "allowSyntheticDefaultImports": True,
        "jsx": "react-native",
        "lib": ["dom", "esnext"],
        "moduleResolution": "node",
        "noEmit": True,
        "skipLibCheck": True,
        "resolveJsonModule": True,
        "typeRoots": ["index.d.ts"],
    },
    "include": ["**/*.ts", "**/*.tsx"],
    "exclude": ["node_modules", "babel.config.js", "metro.config.js", "jest.config.js"],
}

CSPELL_CONFIG: dict[str, Any] = {"words": ["bytecode", "dapp"]}

ENV_GITIGNORE_BLOCK = "# Environment Variables (Store safe defaults in .env.example!)\n.env"


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Implements every scaffolding step against a ``BuildContext``."""

    def __init__(
        self,
        config: Config,
        gateway: ProcessGateway | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.gateway = gateway or ProcessGateway()
        self.renderer = renderer or TemplateRenderer()

    # -- Base project ------------------------------------------------------

    async def create_base_project(self, params: BuildParameters) -> CommandResult:
        """Run create-react-native-app for ``params.name`` inside the output directory."""
        output_dir = await asyncio.to_thread(ensure_dir, self.config.output_dir)
        return await self.gateway.run(
            ["npx", "create-react-native-app", params.name, "-t", self.config.base_template],
            output_dir,
        )

    async def set_app_icon(self, ctx: BuildContext) -> None:
        """Extension point for configuring the application icon."""
        return None

    async def eject_expo_project(self, ctx: BuildContext) -> None:
        """Write the app identifiers into ``app.json`` and eject from Expo."""
        options = ctx.options
        await merge_into(
            ctx.paths.app_json,
            {
                "expo.ios.bundleIdentifier": options.bundle_identifier,
                "expo.android.package": options.package_name,
                "expo.scheme": options.uri_scheme,
            },
        )
        await self.gateway.check(["expo", "eject", "--non-interactive"], ctx.paths.project_dir)

    async def inject_shims(self, ctx: BuildContext) -> None:
        """Overwrite the app entry point with the Node runtime shims."""
        await self.renderer.render_to_file(
            "common/index.js.j2",
            ctx.paths.index,
            {"shim_process_version": self.config.shim_process_version},
        )

    # -- Scripts & tests ---------------------------------------------------

    async def create_scripts(self, ctx: BuildContext) -> None:
        """Create ``scripts/`` with the postinstall hook and any toolchain runner."""
        await asyncio.to_thread(ensure_dir, ctx.paths.scripts_dir)
        await self.renderer.render_to_file("common/postinstall.js.j2", ctx.paths.postinstall)

        variant = ctx.options.variant
        if isinstance(variant, TruffleOptions):
            await self.renderer.render_to_file("truffle/ganache.js.j2", variant.ganache)
        elif isinstance(variant, HardhatOptions):
            await self.renderer.render_to_file("hardhat/hardhat.js.j2", variant.hardhat)

    async def create_tests(self, ctx: BuildContext) -> None:
        """Extension point for a JavaScript test harness."""
        return None

    # -- package.json ------------------------------------------------------

    def package_updates(self, ctx: BuildContext) -> dict[str, Any]:
        """Flat ``package.json`` update set for *ctx*."""
        updates: dict[str, Any] = {"license": "MIT"}
        if self.config.package_author:
            updates["author"] = self.config.package_author
        updates["keywords"] = list(PACKAGE_KEYWORDS)
        updates["scripts.postinstall"] = "node scripts/postinstall"
        updates.update(flattened_scripts(ctx))
        updates["husky.hooks.pre-commit"] = "lint-staged"
        updates.update(BASE_DEPENDENCIES)
        updates.update(BASE_DEV_DEPENDENCIES)
        updates.update(flattened_dev_dependencies(ctx))
        updates.update(NODE_CORE_ALIASES)
        return updates

    async def prepare_package(self, ctx: BuildContext) -> None:
        """Merge scripts, dependencies and tooling config into ``package.json``."""
        await merge_into(ctx.paths.pkg, self.package_updates(ctx), LINT_STAGED_OVERLAY)

    # -- Tool configuration ------------------------------------------------

    async def prepare_metro(self, ctx: BuildContext) -> None:
        await self.renderer.render_to_file("common/metro.config.js.j2", ctx.paths.metro_config)

    async def prepare_babel(self, ctx: BuildContext) -> None:
        await self.renderer.render_to_file("common/babel.config.js.j2", ctx.paths.babel_config)

    async def prepare_eslint(self, ctx: BuildContext) -> None:
        await write_text(ctx.paths.eslint, pretty_json(ESLINT_CONFIG))

    async def prepare_type_roots(self, ctx: BuildContext) -> None:
        """Declare every environment variable in the ``@env`` module."""
        await self.renderer.render_to_file(
            "common/index.d.ts.j2",
            ctx.paths.type_roots,
            {"env_variables": resolve_environment_variables(ctx)},
        )

    async def prepare_spelling(self, ctx: BuildContext) -> None:
        await write_text(ctx.paths.cspell, pretty_json(CSPELL_CONFIG))

    async def prepare_tsc(self, ctx: BuildContext) -> None:
        await write_text(ctx.paths.tsc, pretty_json(TSCONFIG))

    # -- .gitignore & .env -------------------------------------------------

    async def prepare_gitignore(self, ctx: BuildContext) -> None:
        """Append the ``.env`` rule and the variant's rules to ``.gitignore``.

        A missing ``.gitignore`` is treated as empty.
        """
        path = ctx.paths.gitignore
        existing = await asyncio.to_thread(_read_text_or_empty, path)
        blocks = [existing.rstrip(), ENV_GITIGNORE_BLOCK, *gitignore_blocks(ctx)]
        await write_text(path, "\n\n".join(b for b in blocks if b) + "\n")

    async def write_env(self, ctx: BuildContext) -> None:
        """Write ``.env`` as ``NAME=VALUE`` lines and copy it to ``.env.example``."""
        lines = [f"{v.name}={v.value}" for v in resolve_environment_variables(ctx)]
        await write_text(ctx.paths.env, "\n".join(lines) + "\n")
        await asyncio.to_thread(shutil.copyfile, ctx.paths.env, ctx.paths.example_env)

    # -- Install -----------------------------------------------------------

    async def install(self, ctx: BuildContext) -> None:
        """Install dependencies with yarn when a lockfile was found, else npm."""
        command = ["yarn"] if ctx.options.yarn else ["npm", "i"]
        await self.gateway.check(command, ctx.paths.project_dir)

    # -- Example sources ---------------------------------------------------

    async def prepare_example(self, ctx: BuildContext) -> None:
        """Write the demo app (and contract sources) for the active variant."""
        variant = ctx.options.variant
        if isinstance(variant, TruffleOptions):
            await self._prepare_truffle_example(ctx, variant)
        elif isinstance(variant, HardhatOptions):
            await self._prepare_hardhat_example(ctx, variant)
        elif isinstance(variant, NoToolchainOptions):
            await self.renderer.render_to_file("none/App.tsx.j2", ctx.paths.app)
        else:
            raise TypeError(f"Unhandled toolchain variant: {variant!r}")

    async def _prepare_truffle_example(self, ctx: BuildContext, truffle: TruffleOptions) -> None:
        await self.gateway.check(["npx", "truffle", "init"], ctx.paths.project_dir)
        await self.renderer.render_to_file("truffle/Hello.test.js.j2", ctx.paths.test)
        await self.renderer.render_to_file(
            "truffle/1_initial_migration.js.j2", truffle.initial_migration
        )
        await self.renderer.render_to_file("common/Hello.sol.j2", truffle.contract)
        await self.renderer.render_to_file("truffle/App.tsx.j2", ctx.paths.app)

    async def _prepare_hardhat_example(self, ctx: BuildContext, hardhat: HardhatOptions) -> None:
        await asyncio.to_thread(ensure_dir, ctx.paths.contracts_dir)
        await asyncio.to_thread(ensure_dir, ctx.paths.tests_dir)
        await self.renderer.render_to_file("hardhat/Hello.test.js.j2", ctx.paths.test)
        await self.renderer.render_to_file(
            "common/Hello.sol.j2", ctx.paths.contracts_dir / "Hello.sol"
        )
        accounts = [account.as_dict() for account in hardhat.hardhat_accounts]
        await self.renderer.render_to_file(
            "hardhat/hardhat.config.js.j2",
            hardhat.hardhat_config,
            {"accounts_json": json.dumps(accounts)},
        )
        await self.renderer.render_to_file("hardhat/App.tsx.j2", ctx.paths.app)

    # -- Formatting --------------------------------------------------------

    async def prettify(self, ctx: BuildContext) -> None:
        """Run prettier over the whole project."""
        runner = ["yarn"] if ctx.options.yarn else ["npx"]
        await self.gateway.check([*runner, "prettier", "--write", "."], ctx.paths.project_dir)


def _read_text_or_empty(path: Path) -> str:
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")
