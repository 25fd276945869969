"""dappgen scaffolder -- turns a fresh React Native app into a Web3 dapp.

This package holds the scaffolding engine: the frozen build context, the
toolchain variant resolution, the dotted-path JSON merge and the individual
generation steps.

Quick usage::

    from dappgen.config import Config
    from dappgen.scaffolder import BlockchainTools, BuildParameters, create_build_context

    params = BuildParameters.with_defaults("my-dapp", BlockchainTools.HARDHAT)
    ctx = await create_build_context(params, Config().output_dir)
"""

from dappgen.scaffolder.context import create_build_context
from dappgen.scaffolder.gateway import CommandResult, ExternalCommandError, ProcessGateway
from dappgen.scaffolder.generator import ProjectGenerator
from dappgen.scaffolder.merge import merge_into
from dappgen.scaffolder.models import (
    BlockchainTools,
    BuildContext,
    BuildParameters,
    BuildResult,
    CreationStatus,
)
from dappgen.scaffolder.paths import resolve_paths
from dappgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "BlockchainTools",
    "BuildContext",
    "BuildParameters",
    "BuildResult",
    "CommandResult",
    "CreationStatus",
    "ExternalCommandError",
    "ProcessGateway",
    "ProjectGenerator",
    "TemplateRenderer",
    "create_build_context",
    "merge_into",
    "resolve_paths",
]
