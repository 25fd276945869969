"""Derive every path the scaffolder reads or writes from the project root.

Nothing here touches the file system: paths are computed by joining fixed
segments onto the root, so the same root always yields the same mapping.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from .models import ResolvedPaths


def project_dir_for(output_dir: str | Path, name: str) -> Path:
    """Absolute project directory for project *name* created inside *output_dir*."""
    return Path(os.path.abspath(Path(output_dir) / name))


@lru_cache(maxsize=None)
def _resolve(project_root: Path) -> ResolvedPaths:
    scripts_dir = project_root / "scripts"
    tests_dir = project_root / "test"
    migrations_dir = project_root / "migrations"

    return ResolvedPaths(
        # project
        project_dir=project_root,
        index=project_root / "index.js",
        pkg=project_root / "package.json",
        metro_config=project_root / "metro.config.js",
        babel_config=project_root / "babel.config.js",
        env=project_root / ".env",
        example_env=project_root / ".env.example",
        app=project_root / "App.tsx",
        app_json=project_root / "app.json",
        type_roots=project_root / "index.d.ts",
        tsc=project_root / "tsconfig.json",
        gitignore=project_root / ".gitignore",
        eslint=project_root / ".eslintrc.json",
        cspell=project_root / ".cspell.json",
        contracts_dir=project_root / "contracts",
        yarn_lock=project_root / "yarn.lock",
        # migrations
        migrations_dir=migrations_dir,
        # tests
        tests_dir=tests_dir,
        test=tests_dir / "Hello.test.js",
        # scripts
        scripts_dir=scripts_dir,
        postinstall=scripts_dir / "postinstall.js",
    )


def resolve_paths(project_root: str | Path) -> ResolvedPaths:
    """Return the ``ResolvedPaths`` for *project_root* (memoized per root)."""
    return _resolve(Path(os.path.abspath(project_root)))
