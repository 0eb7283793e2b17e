"""
scribeview.llm - In-process LLM backend for formatting and titling.

Stage 2 and Stage 3 can run through litellm instead of the HTTP services,
with prompts rendered from Jinja2 templates.
"""

from __future__ import annotations
