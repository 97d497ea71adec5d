# -*- coding: utf-8 -*-
"""
Marker injection for rule findings.

Converts sentence-relative findings into document spans, resolves
conflicts between them and writes <kind>...</kind> markers into the plain
text without altering any character:

1. Findings outside their sentence are rejected and logged.
2. Span edges are trimmed of whitespace; spans shorter than
   min_span_length visible characters are dropped. An emoji sequence
   counts as one character and combining marks count as none.
3. Identical ranges keep the most severe kind (ties: earliest registered).
4. A span strictly inside another nests. Any other overlap, including
   containment that shares an edge, trims the later-registered span to
   what is left over.
5. Markers are serialized in document order.

Removing the markers from the result always gives back the plain text.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .markers import serialize
from .models import AnnotatedSpan, Finding, IssueKind, Sentence, severity_of
from .rules import DEFAULT_RULES
from .text_patterns import visible_length

logger = logging.getLogger(__name__)


@dataclass
class InjectionResult:
    """Annotated text plus the spans that were written into it."""
    annotated_text: str
    spans: list[AnnotatedSpan] = field(default_factory=list)
    rejected: int = 0  # Findings with offsets outside their sentence

    def to_dict(self) -> dict:
        return {
            "annotatedText": self.annotated_text,
            "spans": [s.to_dict() for s in self.spans],
            "rejected": self.rejected,
        }


def _trim(plain_text: str, start: int, end: int) -> tuple[int, int]:
    while start < end and plain_text[start].isspace():
        start += 1
    while end > start and plain_text[end - 1].isspace():
        end -= 1
    return start, end


def _to_global(
    plain_text: str,
    sentences_by_index: dict[int, Sentence],
    findings: Sequence[Finding],
) -> tuple[list[AnnotatedSpan], int]:
    """Map sentence-relative findings to document offsets."""
    spans: list[AnnotatedSpan] = []
    rejected = 0

    for finding in findings:
        if finding.is_document_level:
            continue
        sentence = sentences_by_index.get(finding.sentence_index)
        if (
            sentence is None
            or finding.start < 0
            or finding.end > sentence.length
            or finding.start > finding.end
        ):
            logger.warning(
                f"Rejected {finding.kind.value} finding [{finding.start}, {finding.end}) "
                f"for sentence {finding.sentence_index}: offsets out of range"
            )
            rejected += 1
            continue
        start, end = _trim(plain_text, sentence.start + finding.start, sentence.start + finding.end)
        spans.append(AnnotatedSpan(finding.kind, start, end))

    return spans, rejected


def _dedupe_ranges(spans: list[AnnotatedSpan], rank: dict[IssueKind, int]) -> list[AnnotatedSpan]:
    """Keep one span per identical range: most severe, then earliest registered."""
    best: dict[tuple[int, int], AnnotatedSpan] = {}
    for span in spans:
        key = (span.start, span.end)
        current = best.get(key)
        if current is None or (severity_of(span.kind).rank, rank[span.kind]) < (
            severity_of(current.kind).rank, rank[current.kind]
        ):
            best[key] = span
    return list(best.values())


def _resolve(
    plain_text: str,
    candidate: AnnotatedSpan,
    accepted: list[AnnotatedSpan],
    min_span_length: int,
) -> Optional[AnnotatedSpan]:
    """
    Trim a candidate against accepted spans until it no longer conflicts.

    Returns None if nothing usable is left.
    """
    span = candidate
    changed = True
    while changed:
        changed = False
        for other in accepted:
            if not span.overlaps(other):
                continue
            if span.kind == other.kind and (other.contains(span) or span.contains(other)):
                logger.debug(f"Collapsed duplicate {span.kind.value} span [{span.start}, {span.end})")
                return None
            if other.strictly_contains(span) or span.strictly_contains(other):
                continue

            if span.start < other.start:
                start, end = span.start, other.start
            elif span.end > other.end:
                start, end = other.end, span.end
            else:
                logger.debug(
                    f"Dropped {span.kind.value} span [{span.start}, {span.end}) "
                    f"covered by {other.kind.value}"
                )
                return None

            start, end = _trim(plain_text, start, end)
            logger.debug(
                f"Trimmed {span.kind.value} span [{span.start}, {span.end}) to [{start}, {end}) "
                f"against {other.kind.value}"
            )
            if visible_length(plain_text[start:end]) < min_span_length:
                return None
            span = AnnotatedSpan(span.kind, start, end)
            changed = True
            break

    return span


def resolve_spans(
    plain_text: str,
    spans: Sequence[AnnotatedSpan],
    min_span_length: int = 3,
    kind_order: Optional[Sequence[IssueKind]] = None,
) -> list[AnnotatedSpan]:
    """
    Resolve conflicts between document spans.

    Args:
        plain_text: Document text the spans index into.
        spans: Candidate spans, already in document offsets.
        min_span_length: Spans with fewer visible characters are dropped
            (see text_patterns.visible_length).
        kind_order: Registration order of kinds; earlier kinds win conflicts.
            Defaults to the default rule registration order.

    Returns:
        Spans sorted by (start, -length) with no partial overlaps.
    """
    order = list(kind_order or [r.kind for r in DEFAULT_RULES])
    order.extend(k for k in IssueKind if k not in order)
    rank = {kind: i for i, kind in enumerate(order)}

    sized = []
    for span in spans:
        start, end = _trim(plain_text, span.start, span.end)
        if visible_length(plain_text[start:end]) < min_span_length:
            logger.debug(f"Dropped degenerate {span.kind.value} span [{span.start}, {span.end})")
            continue
        sized.append(AnnotatedSpan(span.kind, start, end))

    candidates = sorted(
        _dedupe_ranges(sized, rank),
        key=lambda s: (rank[s.kind], s.start, -s.length),
    )

    accepted: list[AnnotatedSpan] = []
    for candidate in candidates:
        resolved = _resolve(plain_text, candidate, accepted, min_span_length)
        if resolved is not None:
            accepted.append(resolved)

    accepted.sort(key=lambda s: (s.start, -s.length, rank[s.kind]))
    return accepted


def inject(
    plain_text: str,
    sentences: Sequence[Sentence],
    findings: Sequence[Finding],
    min_span_length: int = 3,
    kind_order: Optional[Sequence[IssueKind]] = None,
) -> InjectionResult:
    """
    Write issue markers for sentence findings into plain_text.

    Document-level findings (sentence_index None) are ignored here; they
    are reported separately and never become markers.

    Args:
        plain_text: The document's plain text.
        sentences: Its segmented sentences.
        findings: Raw rule output.
        min_span_length: Minimum visible length of a highlight.
        kind_order: Rule registration order used for conflict resolution.

    Returns:
        InjectionResult with the annotated text and the accepted spans.
    """
    by_index = {s.index: s for s in sentences}
    spans, rejected = _to_global(plain_text, by_index, findings)
    accepted = resolve_spans(plain_text, spans, min_span_length, kind_order)

    logger.info(
        f"Injected {len(accepted)} marker span(s) from {len(findings)} finding(s), "
        f"{rejected} rejected"
    )
    return InjectionResult(
        annotated_text=serialize(plain_text, accepted),
        spans=accepted,
        rejected=rejected,
    )
