# -*- coding: utf-8 -*-
"""
Highlight reconciliation between annotated plain text and formatted content.

Annotated text is plain text plus issue markers. Formatted content is the
same text with inline HTML. The reconciler walks both strings in lock
step, comparing only visible, non-whitespace characters, and turns every
marker pair into a HighlightSpan expressed in formatted offsets.

If the two texts stop agreeing, the walk fails closed: highlights that
would end past the divergence are dropped and a single desync issue is
reported, so a highlight never lands on the wrong words.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .html_text import visible_units
from .markers import extract_spans
from .models import HighlightSpan, IssueCategory, ProcessingIssue

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Highlights in formatted offsets plus any problems found on the way."""
    highlights: list[HighlightSpan] = field(default_factory=list)
    issues: list[ProcessingIssue] = field(default_factory=list)

    def add_issue(self, issue: ProcessingIssue) -> None:
        self.issues.append(issue)

    @property
    def is_clean(self) -> bool:
        return not self.issues

    @property
    def has_desync(self) -> bool:
        return any(i.category == IssueCategory.DESYNC for i in self.issues)

    def to_dict(self) -> dict:
        return {
            "highlights": [h.to_dict() for h in self.highlights],
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass
class _OffsetMap:
    """Formatted start/end for each mapped plain index."""
    starts: dict[int, int] = field(default_factory=dict)
    ends: dict[int, int] = field(default_factory=dict)
    divergence: Optional[int] = None  # First plain index that failed to map


# Editors swap straight and curly quotes freely
_QUOTE_FOLD = {"’": "'", "‘": "'", "“": '"', "”": '"'}


def _chars_match(a: str, b: str) -> bool:
    return a == b or _QUOTE_FOLD.get(a, a) == _QUOTE_FOLD.get(b, b)


def _map_offsets(plain_text: str, formatted: str) -> _OffsetMap:
    """
    Map each non-whitespace plain character to its formatted range.

    Whitespace on either side is skipped, so a whitespace run in one text
    matches any run (or a block tag) in the other.
    Extra visible text after the plain text ends is a divergence at
    len(plain_text).
    """
    mapping = _OffsetMap()
    units = visible_units(formatted)
    unit = next(units, None)

    for i, ch in enumerate(plain_text):
        if ch.isspace():
            continue
        while unit is not None and unit.char.isspace():
            unit = next(units, None)
        if unit is None or not _chars_match(ch, unit.char):
            mapping.divergence = i
            return mapping
        mapping.starts[i] = unit.start
        mapping.ends[i] = unit.end
        unit = next(units, None)

    # Visible text left over once the plain text is used up
    while unit is not None and unit.char.isspace():
        unit = next(units, None)
    if unit is not None:
        mapping.divergence = len(plain_text)

    return mapping


def reconcile(annotated_text: str, formatted_content: Optional[str] = None) -> ReconcileResult:
    """
    Translate marker pairs in annotated text into formatted-content highlights.

    Args:
        annotated_text: Plain text with <kind>...</kind> markers.
        formatted_content: HTML whose visible text matches the plain text.
            When missing, highlights use plain-text offsets.

    Returns:
        ReconcileResult with highlights in document order. Malformed
        markers are reported once each; their text stays unhighlighted.
    """
    scan = extract_spans(annotated_text)
    result = ReconcileResult(issues=list(scan.issues))
    plain_text = scan.plain_text

    if not formatted_content:
        result.highlights = [HighlightSpan(s.kind, s.start, s.end) for s in scan.spans]
        return result

    mapping = _map_offsets(plain_text, formatted_content)

    for span in scan.spans:
        first = span.start
        last = span.end - 1
        while first <= last and plain_text[first].isspace():
            first += 1
        while last >= first and plain_text[last].isspace():
            last -= 1
        if first > last:
            continue
        if first not in mapping.starts or last not in mapping.ends:
            continue
        result.highlights.append(HighlightSpan(
            kind=span.kind,
            start_in_formatted=mapping.starts[first],
            end_in_formatted=mapping.ends[last],
        ))

    if mapping.divergence is not None:
        pos = mapping.divergence
        dropped = len(scan.spans) - len(result.highlights)
        logger.warning(
            f"Formatted content diverges from plain text at offset {pos}; "
            f"dropped {dropped} highlight(s)"
        )
        result.add_issue(ProcessingIssue(
            category=IssueCategory.DESYNC,
            description=f"Formatted content diverges from plain text at offset {pos}",
            position=pos,
            span_text=plain_text[pos:pos + 20] or None,
        ))

    logger.info(f"Reconciled {len(result.highlights)} highlight(s), {len(result.issues)} issue(s)")
    return result
