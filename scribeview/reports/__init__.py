"""
scribeview.reports - HTML report generation.

Generates a self-contained HTML page for a transcription: the rendered
transcript in view mode or the raw markup in edit mode, plus the audio
player and language/model selectors.
"""

from __future__ import annotations

from scribeview.reports.generator import ReportGenerator, generate_transcription_page

__all__ = ["ReportGenerator", "generate_transcription_page"]
