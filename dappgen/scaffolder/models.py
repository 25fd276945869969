"""Pydantic v2 models for the dappgen scaffolding engine.

Every model here is frozen: a ``BuildContext`` is assembled once per run
and shared by reference with every pipeline step, so nothing downstream can
widen or rewrite it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dappgen.utils import sanitize_name

_PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# 1000 ETH expressed in wei.
HARDHAT_ACCOUNT_BALANCE = "1000000000000000000000"
HARDHAT_ACCOUNT_COUNT = 10


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class BlockchainTools(str, Enum):
    """Which blockchain toolchain, if any, the generated project integrates."""
    NONE = "none"
    TRUFFLE = "truffle"
    HARDHAT = "hardhat"


class CreationStatus(str, Enum):
    """Outcome of a scaffolding run."""
    SUCCESS = "success"
    FAILURE = "failure"


# ---------------------------------------------------------------------------
# User input
# ---------------------------------------------------------------------------

class BuildParameters(BaseModel):
    """Parameters supplied by the user for a single scaffolding run."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Project name; becomes the project directory")
    blockchain_tools: BlockchainTools = Field(default=BlockchainTools.NONE)
    bundle_identifier: str = Field(..., description="iOS bundle identifier")
    package_name: str = Field(..., description="Android package name")
    uri_scheme: str = Field(..., description="Deep-link URI scheme")

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not _PROJECT_NAME_PATTERN.match(value):
            raise ValueError(
                f"Invalid project name {value!r}: use letters, digits, '-' and '_' only"
            )
        return value

    @classmethod
    def with_defaults(
        cls,
        name: str,
        blockchain_tools: BlockchainTools = BlockchainTools.NONE,
        bundle_identifier: str | None = None,
        package_name: str | None = None,
        uri_scheme: str | None = None,
    ) -> "BuildParameters":
        """Build parameters, deriving any missing app identifier from *name*."""
        slug = sanitize_name(name) or "app"
        return cls(
            name=name,
            blockchain_tools=blockchain_tools,
            bundle_identifier=bundle_identifier or f"com.{slug}",
            package_name=package_name or f"com.{slug}",
            uri_scheme=uri_scheme or slug,
        )


# ---------------------------------------------------------------------------
# Resolved paths
# ---------------------------------------------------------------------------

class ResolvedPaths(BaseModel):
    """Absolute path for every file or directory role the engine touches."""

    model_config = ConfigDict(frozen=True)

    project_dir: Path
    index: Path
    pkg: Path
    metro_config: Path
    babel_config: Path
    env: Path
    example_env: Path
    app: Path
    app_json: Path
    type_roots: Path
    tsc: Path
    migrations_dir: Path
    tests_dir: Path
    test: Path
    gitignore: Path
    scripts_dir: Path
    postinstall: Path
    eslint: Path
    cspell: Path
    contracts_dir: Path
    yarn_lock: Path

    def all_paths(self) -> dict[str, Path]:
        """Return a plain ``{role: path}`` mapping."""
        return {name: getattr(self, name) for name in type(self).model_fields}


# ---------------------------------------------------------------------------
# Variant options (tagged union on ``kind``)
# ---------------------------------------------------------------------------

class HardhatAccount(BaseModel):
    """A funded account for the local Hardhat network."""

    model_config = ConfigDict(frozen=True)

    private_key: str
    balance: str = HARDHAT_ACCOUNT_BALANCE

    def as_dict(self) -> dict[str, str]:
        """Return the account in the shape ``hardhat.config.js`` expects."""
        return {"privateKey": self.private_key, "balance": self.balance}


class NoToolchainOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class TruffleOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["truffle"] = "truffle"
    contract: Path
    ganache: Path
    initial_migration: Path


class HardhatOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["hardhat"] = "hardhat"
    hardhat: Path
    hardhat_config: Path
    hardhat_accounts: tuple[HardhatAccount, ...]


VariantOptions = Annotated[
    Union[NoToolchainOptions, TruffleOptions, HardhatOptions],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EnvVariable:
    """A variable written to ``.env`` and declared in ``index.d.ts``."""

    name: str
    type: str
    value: str


EnvVariables = tuple[EnvVariable, ...]


# ---------------------------------------------------------------------------
# Build context & result
# ---------------------------------------------------------------------------

class BuildOptions(BuildParameters):
    """User parameters plus everything derived from them for this run."""

    yarn: bool = Field(default=False, description="A yarn.lock was found after the base scaffold")
    variant: VariantOptions = Field(default_factory=NoToolchainOptions)

    @model_validator(mode="after")
    def _check_variant_matches(self) -> "BuildOptions":
        if self.variant.kind != self.blockchain_tools.value:
            raise ValueError(
                f"Variant {self.variant.kind!r} does not match "
                f"blockchain tools {self.blockchain_tools.value!r}"
            )
        return self


class BuildContext(BaseModel):
    """Immutable snapshot handed to every pipeline step."""

    model_config = ConfigDict(frozen=True)

    paths: ResolvedPaths
    options: BuildOptions


class BuildResult(BaseModel):
    """Final outcome of a scaffolding run."""

    model_config = ConfigDict(frozen=True)

    context: Optional[BuildContext] = None
    status: CreationStatus
    message: str

    @property
    def success(self) -> bool:
        return self.status is CreationStatus.SUCCESS
