"""
scribeview.llm.templates - Prompt template loading and rendering.

Uses Jinja2 to render the formatting and title prompts shipped in
scribeview/prompts/.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, Template

from scribeview.language import LANGUAGE_LABELS

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


class PromptTemplateManager:
    """Manages loading and rendering of prompt templates."""

    def __init__(self, prompts_dir: Path = PROMPTS_DIR) -> None:
        self.prompts_dir = prompts_dir
        self.env = Environment(
            loader=FileSystemLoader(str(prompts_dir)),
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._cache: dict[str, Template] = {}

    def get_template(self, name: str) -> Template:
        """Load a template by name.

        Raises:
            FileNotFoundError: If template doesn't exist
        """
        if name not in self._cache:
            template_path = self.prompts_dir / name
            if not template_path.exists():
                raise FileNotFoundError(f"Template not found: {template_path}")
            self._cache[name] = self.env.get_template(name)
        return self._cache[name]

    def render(self, template_name: str, variables: dict[str, Any]) -> str:
        """Render a template with variables."""
        template = self.get_template(template_name)
        return template.render(**variables)


def language_name(code: str) -> str | None:
    """English name for a language code. None for auto; unknown codes pass through."""
    if code == "auto":
        return None
    return LANGUAGE_LABELS.get(code, code)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ``` fence the model sometimes adds."""
    stripped = text.strip()
    match = re.fullmatch(r"```[\w-]*\n?([\s\S]*?)\n?```", stripped)
    if match:
        return match.group(1).strip()
    return stripped


def clean_title(text: str) -> str:
    """First non-empty line, without heading marks, quotes or a trailing period."""
    for line in strip_code_fences(text).splitlines():
        line = line.strip().lstrip("#").strip()
        if line.lower().startswith("title:"):
            line = line[len("title:") :].strip()
        line = line.strip("\"'*").strip()
        if line:
            return line.rstrip(".")
    return ""
