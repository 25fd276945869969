"""Jinja2 template rendering for the generated project files.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``dappgen/scaffolder/templates/`` directory and renders them with values
taken from the build context.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from dappgen.utils import write_text


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the fixed ``.j2`` file templates.

    Rendered output is stripped of surrounding whitespace; every generated
    file is a full overwrite of its target.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_path: str, context: dict[str, Any] | None = None) -> str:
        """Render a single template.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"truffle/App.tsx.j2"``).
            context: Variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**(context or {})).strip()

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any] | None = None,
    ) -> Path:
        """Render a template and write the result to *output_path*."""
        return await write_text(output_path, self.render(template_path, context))
