"""
Template rendering for staging prompts.

Two renderers live here:
- ``render_template``: line-conditional ``{{ name }}`` substitution used for
  preset templates stored in a sheet. A line is dropped entirely when any of
  its placeholders has no value, so one template covers optional fields.
- ``TemplateRenderer``: Jinja2 templates shipped with the package
  (see ./templates), used for structured prompts.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from numbers import Number
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

_PLACEHOLDER_RE = re.compile(r"{{\s*([A-Za-z0-9_]+)\s*}}")
_LINE_SPLIT_RE = re.compile(r"\r?\n")


def _clean_value(value: Any) -> str:
    """Trimmed string form of a placeholder value; anything unusable is ``""``."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Number) and not isinstance(value, bool):
        return str(value)
    return ""


def render_template(template: Any, values: Optional[Mapping[str, Any]] = None) -> str:
    """
    Render a line-conditional template.

    Literal ``\\n`` sequences in the template count as line breaks (sheet
    cells often store them that way). Lines without placeholders are kept
    as-is; a line with placeholders is kept only when every placeholder
    resolves to a non-empty value.

    Args:
        template: Template text. Non-strings render as ``""``.
        values: Placeholder values by name. Missing keys count as empty.

    Returns:
        Rendered text, trimmed as a whole.
    """
    if not isinstance(template, str):
        return ""
    if not isinstance(values, Mapping):
        values = {}

    text = template.replace("\\n", "\n")
    rendered: list[str] = []

    for line in _LINE_SPLIT_RE.split(text):
        names = _PLACEHOLDER_RE.findall(line)
        if not names:
            rendered.append(line)
            continue

        resolved = {name: _clean_value(values.get(name)) for name in names}
        if not all(resolved.values()):
            continue

        rendered.append(_PLACEHOLDER_RE.sub(lambda m: resolved[m.group(1)], line))

    return "\n".join(rendered).strip()


class TemplateRenderer:
    """
    Renders packaged Jinja2 prompt templates.

    Usage:
        renderer = TemplateRenderer()
        text = renderer.render_section("master_prompt", context)
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        """
        Initialize the template renderer.

        Args:
            templates_dir: Path to templates directory.
                          Defaults to ./templates relative to this file.
        """
        if templates_dir is None:
            templates_dir = Path(__file__).parent / "templates"

        self.templates_dir = templates_dir
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_section(self, section_name: str, context: dict[str, Any]) -> str:
        """
        Render a single template by name.

        Args:
            section_name: Template name without extension (e.g., "master_prompt")
            context: Template variables

        Returns:
            Rendered text, trimmed
        """
        template = self.env.get_template(f"{section_name}.jinja2")
        return template.render(**context).strip()
