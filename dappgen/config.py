"""dappgen configuration.

Typed configuration for the scaffolding pipeline.  Settings use Pydantic v2
models so they can be validated at construction time and serialised to/from
JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


class Config(BaseModel):
    """Global dappgen configuration.

    Instances are created once by the CLI entry point and handed to
    ``ScaffoldPipeline``; the pipeline never modifies them.
    """

    output_dir: Path = Field(
        default=Path("."), description="Parent directory the project folder is created in"
    )
    base_template: str = Field(
        default="with-typescript",
        description="Template passed to create-react-native-app via -t",
    )
    shim_process_version: str = Field(
        default="v9.40",
        description="Value assigned to process.version by the generated runtime shims",
    )
    run_formatter: bool = Field(
        default=True, description="Run prettier over the generated project as the last step"
    )
    package_author: Optional[str] = Field(
        default=None, description="Value written to the author field of package.json"
    )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            DAPPGEN_OUTPUT_DIR, DAPPGEN_BASE_TEMPLATE,
            DAPPGEN_SHIM_PROCESS_VERSION, DAPPGEN_RUN_FORMATTER,
            DAPPGEN_PACKAGE_AUTHOR.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("DAPPGEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["DAPPGEN_OUTPUT_DIR"])
        if os.environ.get("DAPPGEN_BASE_TEMPLATE"):
            kwargs["base_template"] = os.environ["DAPPGEN_BASE_TEMPLATE"]
        if os.environ.get("DAPPGEN_SHIM_PROCESS_VERSION"):
            kwargs["shim_process_version"] = os.environ["DAPPGEN_SHIM_PROCESS_VERSION"]
        if os.environ.get("DAPPGEN_RUN_FORMATTER"):
            kwargs["run_formatter"] = os.environ["DAPPGEN_RUN_FORMATTER"].strip().lower() in _TRUTHY
        if os.environ.get("DAPPGEN_PACKAGE_AUTHOR"):
            kwargs["package_author"] = os.environ["DAPPGEN_PACKAGE_AUTHOR"]
        return cls(**kwargs)
