"""HTML rendering of a single source line.

Highlighting is encoded as ``start,end,css_class;...`` and symbol references
as ``start,end,symbol_id;...``. Offsets are character offsets within the line,
``end`` exclusive.
"""

from __future__ import annotations

import html
import logging
import re
from collections import defaultdict
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_SAFE_TOKEN = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class Span:
    start: int
    end: int
    css_class: str


def _parse_rules(encoded: str, kind: str) -> list[tuple[int, int, str]]:
    rules: list[tuple[int, int, str]] = []
    for chunk in encoded.split(";"):
        if not chunk.strip():
            continue
        parts = [p.strip() for p in chunk.split(",")]
        if len(parts) != 3:
            logger.warning("Skipping malformed %s rule %r", kind, chunk)
            continue
        try:
            start, end = int(parts[0]), int(parts[1])
        except ValueError:
            logger.warning("Skipping %s rule with invalid offsets %r", kind, chunk)
            continue
        if not _SAFE_TOKEN.match(parts[2]):
            logger.warning("Skipping %s rule with unsafe value %r", kind, chunk)
            continue
        rules.append((start, end, parts[2]))
    return rules


def parse_highlighting(highlighting: str) -> list[Span]:
    return [Span(start, end, css) for start, end, css in _parse_rules(highlighting, "highlighting")]


def parse_symbols(symbols: str) -> list[Span]:
    return [Span(start, end, f"sym-{symbol_id} sym") for start, end, symbol_id in _parse_rules(symbols, "symbol")]


def _open_tag(span: Span) -> str:
    return f'<span class="{span.css_class}">'


class HtmlSourceDecorator:
    """Escape a line of source and wrap its highlighted ranges and symbol references in ``<span>`` tags.

    Ranges are clamped to the line. Overlapping ranges that do not nest are
    closed and re-opened around the boundary, so the markup stays well-formed.
    """

    def decorate(self, source: str, highlighting: str = "", symbols: str = "") -> str:
        length = len(source)
        starts: dict[int, list[Span]] = defaultdict(list)
        for span in parse_highlighting(highlighting) + parse_symbols(symbols):
            start, end = max(span.start, 0), min(span.end, length)
            if start < end:
                starts[start].append(Span(start, end, span.css_class))

        out: list[str] = []
        stack: list[Span] = []
        for offset in range(length + 1):
            if any(s.end == offset for s in stack):
                reopen: list[Span] = []
                while any(s.end == offset for s in stack):
                    top = stack.pop()
                    out.append("</span>")
                    if top.end != offset:
                        reopen.append(top)
                for span in reversed(reopen):
                    out.append(_open_tag(span))
                    stack.append(span)
            # outermost first
            for span in sorted(starts.get(offset, ()), key=lambda s: s.end, reverse=True):
                out.append(_open_tag(span))
                stack.append(span)
            if offset < length:
                out.append(html.escape(source[offset]))
        return "".join(out)
