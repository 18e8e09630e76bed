"""Jinja2 template rendering for generated projects.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``appforge/scaffolder/templates/`` directory and renders them with
project-specific context data.  Generation is an in-memory transformation,
so rendering always returns strings; callers collect them into
``path -> content`` maps.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from appforge.utils import slugify, snake_slugify, to_pascal


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Undefined variables raise instead of rendering as
    empty strings, so a missing context key is caught at generation time.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["slugify"] = slugify
        self.env.filters["pascal_case"] = to_pascal
        self.env.filters["snake_case"] = snake_slugify
        self.env.filters["camel_case"] = _camel_case_filter
        self.env.filters["js_string"] = _js_string_filter
        self.env.filters["jsx_text"] = _jsx_text_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"backend/index.js.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    def render_map(
        self,
        mapping: dict[str, str],
        context: dict[str, Any],
    ) -> dict[str, str]:
        """Render a ``output path -> template path`` mapping.

        Returns:
            ``output path -> rendered content``, in *mapping* order.
        """
        return {
            output_path: self.render(template_path, context)
            for output_path, template_path in mapping.items()
        }

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _camel_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = to_pascal(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


def _js_string_filter(value: Any) -> str:
    """Render *value* as a double-quoted JavaScript string literal."""
    return json.dumps(str(value), ensure_ascii=False)


def _jsx_text_filter(value: Any) -> str:
    """Render *value* as a JSX expression container holding a string literal.

    Free text in JSX cannot contain raw braces or angle brackets, so user
    supplied names and descriptions are always emitted as ``{"..."}``.
    """
    return "{" + _js_string_filter(value) + "}"
