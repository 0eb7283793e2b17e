"""
scribeview.markup - Lightweight transcript markup renderer.

Turns the constrained markup produced by the formatter (headings, single
list items, bold and italic spans) into an ordered tuple of display blocks.
The editable view bypasses this and shows the raw markup.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from markupsafe import Markup, escape

_INLINE_PATTERN = re.compile(r"(\*\*.*?\*\*|\*.*?\*)")

_HEADING_PREFIXES = (("# ", 1), ("## ", 2), ("### ", 3))
_LIST_PREFIX = "* "


@dataclass(frozen=True)
class Span:
    """Inline run inside a paragraph: kind is "text", "strong" or "em"."""

    kind: str
    text: str


@dataclass(frozen=True)
class LineBreak:
    kind = "break"


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    kind = "heading"


@dataclass(frozen=True)
class ListItem:
    """A list with exactly one item. Consecutive items are not grouped."""

    text: str
    kind = "list"


@dataclass(frozen=True)
class Paragraph:
    spans: tuple[Span, ...]
    kind = "paragraph"


Block = LineBreak | Heading | ListItem | Paragraph


def text(value: str) -> Span:
    return Span("text", value)


def strong(value: str) -> Span:
    return Span("strong", value)


def em(value: str) -> Span:
    return Span("em", value)


def parse_inline(line: str) -> tuple[Span, ...]:
    """Split a paragraph line into plain, strong and emphasis spans.

    Captured runs sit at odd indexes of the split result. A capture of four
    or more characters bounded by ``**`` is strong; every other capture is
    bounded by single ``*`` and is emphasis. Empty literal runs are dropped.
    """
    spans: list[Span] = []
    for index, part in enumerate(_INLINE_PATTERN.split(line)):
        if not part:
            continue
        if index % 2 == 0:
            spans.append(text(part))
        elif len(part) >= 4 and part.startswith("**") and part.endswith("**"):
            spans.append(strong(part[2:-2]))
        else:
            spans.append(em(part[1:-1]))
    return tuple(spans)


def classify_line(line: str) -> Block:
    """Classify a single line. First matching rule wins."""
    if line.strip() == "":
        return LineBreak()
    for prefix, level in _HEADING_PREFIXES:
        if line.startswith(prefix):
            return Heading(level, line[len(prefix) :])
    if line.startswith(_LIST_PREFIX):
        return ListItem(line[len(_LIST_PREFIX) :])
    return Paragraph(parse_inline(line))


@lru_cache(maxsize=256)
def render_markup(source: str) -> tuple[Block, ...]:
    """Render markup text into display blocks.

    Lines are split on ``\\n`` only; ``\\r`` is kept as received. The empty
    string yields no blocks.

    Args:
        source: Markup text

    Returns:
        Immutable, ordered tuple of blocks
    """
    if source == "":
        return ()
    return tuple(classify_line(line) for line in source.split("\n"))


def restore_paragraph(paragraph: Paragraph) -> str:
    """Rebuild the source line of a paragraph from its spans."""
    delimiters = {"text": "", "strong": "**", "em": "*"}
    return "".join(
        f"{delimiters[span.kind]}{span.text}{delimiters[span.kind]}" for span in paragraph.spans
    )


def _span_to_html(span: Span) -> str:
    if span.kind == "strong":
        return f"<strong>{escape(span.text)}</strong>"
    if span.kind == "em":
        return f"<em>{escape(span.text)}</em>"
    return str(escape(span.text))


def block_to_html(block: Block) -> str:
    """Render one block as an HTML fragment with escaped content."""
    if isinstance(block, LineBreak):
        return "<br>"
    if isinstance(block, Heading):
        level = block.level
        return f'<h{level} class="heading-{level}">{escape(block.text)}</h{level}>'
    if isinstance(block, ListItem):
        return f'<ul class="transcript-list"><li>{escape(block.text)}</li></ul>'
    inner = "".join(_span_to_html(span) for span in block.spans)
    return f"<p>{inner}</p>"


def blocks_to_html(blocks: tuple[Block, ...] | list[Block]) -> Markup:
    """Render a block sequence as safe HTML for templates."""
    return Markup("\n".join(block_to_html(block) for block in blocks))
