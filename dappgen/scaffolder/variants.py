"""Toolchain variant resolution.

Turns the user's ``BlockchainTools`` choice into the variant payload stored
on the build context, and derives the per-variant bundles the pipeline
steps consume: environment variables, package scripts, dev dependencies and
ignore rules.  Every dispatch below covers all three variants explicitly.
"""

from __future__ import annotations

import asyncio
import secrets
from typing import Any

from .models import (
    HARDHAT_ACCOUNT_BALANCE,
    HARDHAT_ACCOUNT_COUNT,
    BlockchainTools,
    BuildContext,
    BuildParameters,
    EnvVariable,
    EnvVariables,
    HardhatAccount,
    HardhatOptions,
    NoToolchainOptions,
    ResolvedPaths,
    TruffleOptions,
    VariantOptions,
)

# Order of the secp256k1 group; valid private keys lie in [1, n).
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

GANACHE_URL = "http://127.0.0.1:8545"
HARDHAT_URL = "http://localhost:8545"


# ---------------------------------------------------------------------------
# Account generation
# ---------------------------------------------------------------------------

def generate_private_key() -> str:
    """Return a fresh ``0x``-prefixed secp256k1 private key from the OS CSPRNG."""
    key = secrets.randbelow(SECP256K1_ORDER - 1) + 1
    return f"0x{key:064x}"


async def generate_hardhat_accounts(
    count: int = HARDHAT_ACCOUNT_COUNT,
    balance: str = HARDHAT_ACCOUNT_BALANCE,
) -> tuple[HardhatAccount, ...]:
    """Generate *count* independently keyed accounts, each funded with *balance*.

    Keys are produced concurrently; ``asyncio.gather`` keeps results in
    submission order so account ``i`` is always the ``i``-th generation.
    """
    keys = await asyncio.gather(
        *(asyncio.to_thread(generate_private_key) for _ in range(count))
    )
    return tuple(HardhatAccount(private_key=key, balance=balance) for key in keys)


# ---------------------------------------------------------------------------
# Variant resolution
# ---------------------------------------------------------------------------

async def resolve_variant(params: BuildParameters, paths: ResolvedPaths) -> VariantOptions:
    """Build the variant payload selected by ``params.blockchain_tools``."""
    if params.blockchain_tools is BlockchainTools.TRUFFLE:
        return TruffleOptions(
            contract=paths.contracts_dir / "Hello.sol",
            ganache=paths.scripts_dir / "ganache.js",
            initial_migration=paths.migrations_dir / "1_initial_migration.js",
        )
    if params.blockchain_tools is BlockchainTools.HARDHAT:
        return HardhatOptions(
            hardhat=paths.scripts_dir / "hardhat.js",
            hardhat_config=paths.project_dir / "hardhat.config.js",
            hardhat_accounts=await generate_hardhat_accounts(),
        )
    return NoToolchainOptions()


def _unknown_variant(variant: Any) -> TypeError:
    return TypeError(f"Unhandled toolchain variant: {variant!r}")


# ---------------------------------------------------------------------------
# Per-variant bundles
# ---------------------------------------------------------------------------

def resolve_environment_variables(ctx: BuildContext) -> EnvVariables:
    """Ordered environment variables for the generated project.

    Toolchain entries come first; the Infura placeholder is only added when
    no toolchain is selected.
    """
    variant = ctx.options.variant
    if isinstance(variant, TruffleOptions):
        return (EnvVariable("GANACHE_URL", "string", GANACHE_URL),)
    if isinstance(variant, HardhatOptions):
        return (
            EnvVariable("HARDHAT_URL", "string", HARDHAT_URL),
            EnvVariable("HARDHAT_PRIVATE_KEY", "string", variant.hardhat_accounts[0].private_key),
        )
    if isinstance(variant, NoToolchainOptions):
        return (EnvVariable("INFURA_API_KEY", "string", ""),)
    raise _unknown_variant(variant)


def flattened_scripts(ctx: BuildContext) -> dict[str, str]:
    """Variant-specific ``package.json`` scripts, keyed by dotted path."""
    variant = ctx.options.variant
    if isinstance(variant, TruffleOptions):
        return {
            "scripts.ganache": "node scripts/ganache",
            "scripts.test": "npx truffle test",
        }
    if isinstance(variant, HardhatOptions):
        return {
            "scripts.hardhat": "node scripts/hardhat",
            "scripts.test": "npx hardhat test",
        }
    if isinstance(variant, NoToolchainOptions):
        return {}
    raise _unknown_variant(variant)


def flattened_dev_dependencies(ctx: BuildContext) -> dict[str, str]:
    """Variant-specific ``devDependencies``, keyed by dotted path."""
    variant = ctx.options.variant
    if isinstance(variant, TruffleOptions):
        return {"devDependencies.ganache-cli": "6.12.1"}
    if isinstance(variant, HardhatOptions):
        return {
            "devDependencies.hardhat": "2.0.6",
            "devDependencies.@nomiclabs/hardhat-ethers": "^2.0.1",
            "devDependencies.@nomiclabs/hardhat-waffle": "^2.0.1",
            "devDependencies.chai": "^4.2.0",
            "devDependencies.ethereum-waffle": "^3.2.1",
        }
    if isinstance(variant, NoToolchainOptions):
        return {}
    raise _unknown_variant(variant)


def gitignore_blocks(ctx: BuildContext) -> list[str]:
    """Ignore-rule blocks appended to ``.gitignore`` for the active variant."""
    variant = ctx.options.variant
    if isinstance(variant, TruffleOptions):
        return ["# Truffle Suite\nganache.json"]
    if isinstance(variant, HardhatOptions):
        return ["# Hardhat\nartifacts/\ncache/"]
    if isinstance(variant, NoToolchainOptions):
        return []
    raise _unknown_variant(variant)
