# -*- coding: utf-8 -*-
"""
Issue marker scanning and serialization.

Markers are plain tags named after an issue kind, e.g. <fluff>...</fluff>.
They carry no attributes and are never self-closing. One tokenizer
handles every kind; pairing happens on a stack so nested markers resolve
innermost-first.

Text that already looks like a marker is escaped on the way out, so
"<cta>" in a newsletter is written as "&lt;cta>" and "&lt;cta>" as
"&amp;lt;cta>". Scanning undoes exactly one level of that escape.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .models import AnnotatedSpan, IssueCategory, IssueKind, ProcessingIssue

logger = logging.getLogger(__name__)

_KIND_NAMES = sorted((k.value for k in IssueKind), key=len, reverse=True)
_KIND_ALT = "|".join(re.escape(n) for n in _KIND_NAMES)
MARKER_RE = re.compile(r"<(/?)(" + _KIND_ALT + r")>")
# Marker-shaped literal, raw or already escaped any number of times
LITERAL_RE = re.compile(r"(<|&(?:amp;)*lt;)(/?)(" + _KIND_ALT + r")>")
ESCAPED_RE = re.compile(r"&((?:amp;)*)lt;(/?)(" + _KIND_ALT + r")>")

TEXT = "text"
OPEN = "open"
CLOSE = "close"


@dataclass(frozen=True)
class MarkerToken:
    """
    One token of annotated text.

    start/end are offsets in the annotated text; plain_offset is where
    the token sits once every marker is removed.
    """
    type: str
    start: int
    end: int
    plain_offset: int
    kind: Optional[IssueKind] = None
    text: str = ""


@dataclass
class MarkerScan:
    """Result of pairing the markers of an annotated string."""
    plain_text: str
    spans: list[AnnotatedSpan] = field(default_factory=list)
    issues: list[ProcessingIssue] = field(default_factory=list)

    @property
    def is_well_formed(self) -> bool:
        return not self.issues


def escape_literals(text: str) -> str:
    """Escape marker-shaped text so it survives a round trip as text."""
    def repl(match: re.Match) -> str:
        lead = match.group(1)
        lead = "&lt;" if lead == "<" else "&amp;" + lead[1:]
        return f"{lead}{match.group(2)}{match.group(3)}>"
    return LITERAL_RE.sub(repl, text)


def unescape_literals(text: str) -> str:
    """Undo one level of escape_literals."""
    def repl(match: re.Match) -> str:
        amps = match.group(1)
        lead = "<" if not amps else f"&{amps[4:]}lt;"
        return f"{lead}{match.group(2)}{match.group(3)}>"
    return ESCAPED_RE.sub(repl, text)


def scan_markers(annotated_text: str) -> list[MarkerToken]:
    """
    Tokenize annotated text into text, open and close tokens.

    Text tokens carry unescaped text, and plain_offset counts unescaped
    characters.
    """
    tokens: list[MarkerToken] = []
    pos = 0
    plain_offset = 0

    for match in MARKER_RE.finditer(annotated_text):
        if match.start() > pos:
            chunk = unescape_literals(annotated_text[pos:match.start()])
            tokens.append(MarkerToken(TEXT, pos, match.start(), plain_offset, text=chunk))
            plain_offset += len(chunk)
        token_type = CLOSE if match.group(1) else OPEN
        tokens.append(MarkerToken(
            token_type, match.start(), match.end(), plain_offset,
            kind=IssueKind(match.group(2)), text=match.group(0),
        ))
        pos = match.end()

    if pos < len(annotated_text):
        chunk = unescape_literals(annotated_text[pos:])
        tokens.append(MarkerToken(TEXT, pos, len(annotated_text), plain_offset, text=chunk))

    return tokens


def strip_markers(annotated_text: str) -> str:
    """Remove every marker and unescape the text between them."""
    return "".join(t.text for t in scan_markers(annotated_text) if t.type == TEXT)


def _malformed(token: MarkerToken, description: str) -> ProcessingIssue:
    return ProcessingIssue(
        category=IssueCategory.MALFORMED_MARKER,
        description=description,
        position=token.start,
        span_text=token.text,
    )


def extract_spans(annotated_text: str) -> MarkerScan:
    """
    Pair markers into spans over the stripped text.

    An opener with no closer and a closer with no opener are each reported
    once as malformed_marker. Their text is kept, just not highlighted.
    A closer that matches an opener deeper in the stack closes that opener
    and reports every opener above it as unterminated.
    """
    tokens = scan_markers(annotated_text)
    stack: list[MarkerToken] = []
    spans: list[AnnotatedSpan] = []
    issues: list[ProcessingIssue] = []
    plain_parts: list[str] = []

    for token in tokens:
        if token.type == TEXT:
            plain_parts.append(token.text)
        elif token.type == OPEN:
            stack.append(token)
        else:
            depth = next(
                (i for i in range(len(stack) - 1, -1, -1) if stack[i].kind == token.kind),
                None,
            )
            if depth is None:
                issues.append(_malformed(token, f"Closing marker </{token.kind.value}> has no opener"))
                continue
            for orphan in stack[depth + 1:]:
                issues.append(_malformed(orphan, f"Marker <{orphan.kind.value}> is never closed"))
            opener = stack[depth]
            del stack[depth:]
            if token.plain_offset > opener.plain_offset:
                spans.append(AnnotatedSpan(opener.kind, opener.plain_offset, token.plain_offset))

    for orphan in stack:
        issues.append(_malformed(orphan, f"Marker <{orphan.kind.value}> is never closed"))

    if issues:
        logger.warning(f"Found {len(issues)} malformed marker(s) in annotated text")

    spans.sort(key=lambda s: (s.start, -s.length))
    issues.sort(key=lambda i: i.position or 0)
    return MarkerScan(plain_text="".join(plain_parts), spans=spans, issues=issues)


def serialize(plain_text: str, spans: Iterable[AnnotatedSpan]) -> str:
    """
    Insert markers for properly nested spans into plain_text.

    At a shared offset closers come before openers. Openers are written
    outermost first and closers innermost first, so nesting stays valid.
    Each stretch of text between markers is escaped on its own, matching
    the stretches scan_markers later unescapes.
    """
    events: list[tuple[int, int, int, str]] = []
    for span in spans:
        # (offset, phase, order, marker): phase 0 closes, phase 1 opens
        events.append((span.end, 0, -span.start, f"</{span.kind.value}>"))
        events.append((span.start, 1, -span.end, f"<{span.kind.value}>"))
    events.sort()

    parts: list[str] = []
    pos = 0
    for offset, _, _, marker in events:
        if offset > pos:
            parts.append(escape_literals(plain_text[pos:offset]))
            pos = offset
        parts.append(marker)
    parts.append(escape_literals(plain_text[pos:]))
    return "".join(parts)
