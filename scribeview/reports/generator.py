"""
scribeview.reports.generator - Jinja2-based page generator.

Produces self-contained HTML pages with embedded CSS.
"""

from __future__ import annotations

import webbrowser
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from scribeview.config import MODEL_LABELS
from scribeview.markup import blocks_to_html, render_markup
from scribeview.view import EDIT_TAB, TranscriptionView


class ReportGenerator:
    """Jinja2-based HTML page generator."""

    def __init__(self, template_dir: Path | None = None):
        if template_dir is None:
            template_dir = Path(__file__).parent / "templates"

        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render_string(self, template_name: str, data: dict[str, Any]) -> str:
        template = self.env.get_template(template_name)
        return template.render(data=data, **data)

    def render(
        self,
        template_name: str,
        data: dict[str, Any],
        output_path: Path,
    ) -> Path:
        """Render a template to an HTML file.

        Args:
            template_name: Name of the template file
            data: Data dictionary to inject into template
            output_path: Path to write the HTML file

        Returns:
            Path to the generated file
        """
        html = self.render_string(template_name, data)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")

        return output_path

    def open_in_browser(self, path: Path) -> None:
        """Open a file in the default browser."""
        webbrowser.open(f"file://{path.resolve()}")


def build_page_data(view: TranscriptionView) -> dict[str, Any]:
    """Collect the template variables for a transcription view."""
    editing = view.active_tab == EDIT_TAB
    return {
        "transcription_id": view.transcription.id,
        "title": view.title,
        "audio_url": view.transcription.audio_url,
        "active_tab": view.active_tab,
        "editing": editing,
        "raw_transcript": view.transcript,
        "transcript_html": "" if editing else blocks_to_html(render_markup(view.transcript)),
        "is_loading": view.is_loading,
        "language": view.language.code,
        "language_options": view.language.options(),
        "model": view.model,
        "model_options": list(MODEL_LABELS.items()),
        "notices": [{"level": n.level, "message": n.message} for n in view.notices],
    }


def generate_transcription_page(
    view: TranscriptionView,
    output_path: Path,
    open_browser: bool = False,
    generator: ReportGenerator | None = None,
) -> Path:
    """Write the HTML page for ``view``.

    Args:
        view: Transcription view to render
        output_path: Destination HTML file
        open_browser: Whether to open in browser
        generator: Optional generator (custom template directory)

    Returns:
        Path to generated page
    """
    generator = generator or ReportGenerator()
    path = generator.render("transcription.html", build_page_data(view), output_path)
    if open_browser:
        generator.open_in_browser(path)
    return path
