"""Build-context construction.

The context is assembled exactly once, after the base scaffold has created
the project directory, so the package-manager lockfile can be probed.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from .models import BuildContext, BuildOptions, BuildParameters
from .paths import project_dir_for, resolve_paths
from .variants import resolve_variant


async def create_build_context(params: BuildParameters, output_dir: str | Path) -> BuildContext:
    """Resolve paths and options for *params* and freeze them into a context."""
    paths = resolve_paths(project_dir_for(output_dir, params.name))
    yarn = await asyncio.to_thread(paths.yarn_lock.exists)
    variant = await resolve_variant(params, paths)
    options = BuildOptions(**params.model_dump(), yarn=yarn, variant=variant)
    return BuildContext(paths=paths, options=options)
