"""
Data models for Mail Grader.

This module defines the core data structures shared by the annotation
pipeline (segmenter, rules, injector, reconciler) and the draft aligner.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class IssueKind(Enum):
    """Closed set of writing issues the rule engine can flag."""
    SPAM_WORDS = "spam_words"
    GRAMMAR_SPELLING = "grammar_spelling"
    CLAIM_WITHOUT_EVIDENCE = "claim_without_evidence"
    HARD_TO_READ = "hard_to_read"
    FLUFF = "fluff"
    HEDGING = "hedging"
    VAGUE_DATE = "vague_date"
    VAGUE_NUMBER = "vague_number"
    EMOJI_EXCESS = "emoji_excess"
    CTA = "cta"


class Severity(Enum):
    """Display tier of an issue kind."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFORMATIONAL = "informational"

    @property
    def rank(self) -> int:
        """Lower rank = more severe."""
        return _SEVERITY_RANKS[self]


_SEVERITY_RANKS = {
    Severity.HIGH: 0,
    Severity.MEDIUM: 1,
    Severity.LOW: 2,
    Severity.INFORMATIONAL: 3,
}

SEVERITY_BY_KIND: dict[IssueKind, Severity] = {
    IssueKind.SPAM_WORDS: Severity.HIGH,
    IssueKind.GRAMMAR_SPELLING: Severity.HIGH,
    IssueKind.CLAIM_WITHOUT_EVIDENCE: Severity.HIGH,
    IssueKind.HARD_TO_READ: Severity.MEDIUM,
    IssueKind.FLUFF: Severity.MEDIUM,
    IssueKind.HEDGING: Severity.MEDIUM,
    IssueKind.VAGUE_DATE: Severity.MEDIUM,
    IssueKind.VAGUE_NUMBER: Severity.MEDIUM,
    IssueKind.EMOJI_EXCESS: Severity.LOW,
    IssueKind.CTA: Severity.INFORMATIONAL,
}

# Tooltip text for each kind (consumed by the CLI and API; styling is out of scope)
ISSUE_MESSAGES: dict[IssueKind, tuple[str, str]] = {
    IssueKind.SPAM_WORDS: (
        "Contains spam-like language that may trigger email filters",
        "Use more natural, conversational language",
    ),
    IssueKind.GRAMMAR_SPELLING: (
        "Grammar or spelling issue detected",
        "Review and correct the grammar or spelling",
    ),
    IssueKind.CLAIM_WITHOUT_EVIDENCE: (
        "Strong claim without supporting evidence",
        "Add data, sources, or examples to support your claim",
    ),
    IssueKind.HARD_TO_READ: (
        "This sentence is complex and may be hard to read",
        "Break into shorter sentences or simplify the language",
    ),
    IssueKind.FLUFF: (
        "Contains unnecessary filler words or phrases",
        "Remove filler words to make the message more direct",
    ),
    IssueKind.HEDGING: (
        "Uncertain language weakens your message",
        "Use more confident, direct language",
    ),
    IssueKind.VAGUE_DATE: (
        "Vague time reference may confuse readers",
        "Use specific dates or timeframes",
    ),
    IssueKind.VAGUE_NUMBER: (
        "Vague quantity lacks a concrete number",
        "Replace with an exact number or percentage",
    ),
    IssueKind.EMOJI_EXCESS: (
        "Too many emojis may appear unprofessional",
        "Use emojis sparingly for better impact",
    ),
    IssueKind.CTA: (
        "Call-to-action detected",
        "Ensure your CTA is clear and compelling",
    ),
}


def severity_of(kind: IssueKind) -> Severity:
    """Get the fixed severity tier for an issue kind."""
    return SEVERITY_BY_KIND[kind]


# =============================================================================
# DOCUMENT AND SENTENCES
# =============================================================================

@dataclass(frozen=True)
class Document:
    """
    Immutable input to one analysis pass.

    formatted_content is HTML with inline markup. When present, stripping
    its markup yields plain_text (whitespace-normalized).
    """
    plain_text: str
    formatted_content: Optional[str] = None

    @classmethod
    def from_html(cls, formatted_content: str) -> "Document":
        """Build a document whose plain text is derived from HTML content."""
        from .html_text import html_to_plain_text

        return cls(
            plain_text=html_to_plain_text(formatted_content),
            formatted_content=formatted_content,
        )

    @property
    def has_formatting(self) -> bool:
        return bool(self.formatted_content)


@dataclass(frozen=True)
class Sentence:
    """A sentence with exact offsets into the document's plain text."""
    index: int
    text: str
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


# =============================================================================
# FINDING DETAILS (closed tagged union, one shape per kind of evidence)
# =============================================================================

@dataclass(frozen=True)
class LexiconDetail:
    """Evidence for lexicon rules: the phrases that matched."""
    phrases: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"type": "lexicon", "phrases": list(self.phrases)}


@dataclass(frozen=True)
class SpamDetail:
    """Evidence for spam_words findings."""
    phrases: tuple[str, ...] = ()
    shouted_words: tuple[str, ...] = ()
    exclamations: int = 0

    def to_dict(self) -> dict:
        return {
            "type": "spam",
            "phrases": list(self.phrases),
            "shoutedWords": list(self.shouted_words),
            "exclamations": self.exclamations,
        }


@dataclass(frozen=True)
class GrammarDetail:
    """Evidence for grammar_spelling findings."""
    misspelled: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    repeated_words: tuple[str, ...] = ()
    capitalization: tuple[str, ...] = ()
    punctuation: tuple[str, ...] = ()
    articles: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "type": "grammar",
            "misspelled": list(self.misspelled),
            "suggestions": list(self.suggestions),
            "repeatedWords": list(self.repeated_words),
            "capitalization": list(self.capitalization),
            "punctuation": list(self.punctuation),
            "articles": list(self.articles),
        }


@dataclass(frozen=True)
class ClaimDetail:
    """Evidence for claim_without_evidence findings."""
    triggers: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"type": "claim", "triggers": list(self.triggers)}


@dataclass(frozen=True)
class ReadabilityDetail:
    """Evidence for sentence-level hard_to_read findings."""
    word_count: int
    clause_count: int
    max_words: int
    max_clauses: int
    jargon: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "type": "readability",
            "wordCount": self.word_count,
            "clauseCount": self.clause_count,
            "maxWords": self.max_words,
            "maxClauses": self.max_clauses,
            "jargon": list(self.jargon),
        }


@dataclass(frozen=True)
class EmojiDetail:
    """Evidence for emoji_excess findings."""
    count: int
    threshold: int

    def to_dict(self) -> dict:
        return {"type": "emoji", "count": self.count, "threshold": self.threshold}


@dataclass(frozen=True)
class ReadabilityGradeDetail:
    """Document-level Flesch-Kincaid grade above the threshold."""
    grade: float
    threshold: float

    def to_dict(self) -> dict:
        return {"type": "readability_grade", "grade": self.grade, "threshold": self.threshold}


@dataclass(frozen=True)
class RedundancyDetail:
    """Document-level near-duplicate sentence pairs (sentence indexes)."""
    pairs: tuple[tuple[int, int, float], ...] = ()

    def to_dict(self) -> dict:
        return {
            "type": "redundancy",
            "pairs": [{"i": i, "j": j, "similarity": sim} for i, j, sim in self.pairs],
        }


@dataclass(frozen=True)
class LinkDensityDetail:
    """Document-level link density above the threshold."""
    links: int
    words: int
    per_100_words: float
    threshold: float

    def to_dict(self) -> dict:
        return {
            "type": "link_density",
            "links": self.links,
            "words": self.words,
            "per100Words": self.per_100_words,
            "threshold": self.threshold,
        }


@dataclass(frozen=True)
class FormattingDetail:
    """Document-level formatting inconsistencies."""
    double_spaces: int = 0
    mixed_quotes: bool = False
    mixed_dashes: bool = False
    trailing_space_lines: int = 0

    def to_dict(self) -> dict:
        return {
            "type": "formatting",
            "doubleSpaces": self.double_spaces,
            "mixedQuotes": self.mixed_quotes,
            "mixedDashes": self.mixed_dashes,
            "trailingSpaceLines": self.trailing_space_lines,
        }


FindingDetail = Union[
    LexiconDetail,
    SpamDetail,
    GrammarDetail,
    ClaimDetail,
    ReadabilityDetail,
    EmojiDetail,
    ReadabilityGradeDetail,
    RedundancyDetail,
    LinkDensityDetail,
    FormattingDetail,
]


@dataclass(frozen=True)
class Finding:
    """
    One rule's raw output.

    Offsets are relative to the sentence text. Document-level findings
    have sentence_index None and document-global offsets.
    """
    kind: IssueKind
    sentence_index: Optional[int]
    start: int
    end: int
    detail: FindingDetail

    @property
    def is_document_level(self) -> bool:
        return self.sentence_index is None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "sentenceIndex": self.sentence_index,
            "start": self.start,
            "end": self.end,
            "severity": severity_of(self.kind).value,
            "detail": self.detail.to_dict(),
        }


# =============================================================================
# SPANS
# =============================================================================

@dataclass(frozen=True)
class AnnotatedSpan:
    """A merged, conflict-resolved finding in document coordinates."""
    kind: IssueKind
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, other: "AnnotatedSpan") -> bool:
        return self.start <= other.start and other.end <= self.end

    def strictly_contains(self, other: "AnnotatedSpan") -> bool:
        """True if other sits inside this span without touching either edge."""
        return self.start < other.start and other.end < self.end

    def overlaps(self, other: "AnnotatedSpan") -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class HighlightSpan:
    """A highlight expressed in offsets of the formatted (HTML) content."""
    kind: IssueKind
    start_in_formatted: int
    end_in_formatted: int

    def to_dict(self) -> dict:
        kind = self.kind
        message, suggestion = ISSUE_MESSAGES[kind]
        return {
            "kind": kind.value,
            "startInFormatted": self.start_in_formatted,
            "endInFormatted": self.end_in_formatted,
            "severity": severity_of(kind).value,
            "message": message,
            "suggestion": suggestion,
        }


# =============================================================================
# PROCESSING ISSUES (reported, never raised)
# =============================================================================

class IssueCategory(Enum):
    """Recoverable conditions reported back to the caller."""
    MALFORMED_MARKER = "malformed_marker"
    DEGENERATE_SPAN = "degenerate_span"
    OVERLAP_CONFLICT = "overlap_conflict"
    ALIGNMENT_MISS = "alignment_miss"
    DESYNC = "desync"


@dataclass
class ProcessingIssue:
    """A single recoverable problem found while processing markup or pairs."""
    category: IssueCategory
    description: str
    position: Optional[int] = None  # Offset in the input being scanned
    span_text: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "description": self.description,
            "position": self.position,
            "spanText": self.span_text,
        }


# =============================================================================
# DRAFT ALIGNMENT
# =============================================================================

class SegmentKind(Enum):
    """Kind of a diff segment in the comparison view."""
    EQUAL = "equal"
    REMOVED = "removed"
    ADDED = "added"


@dataclass(frozen=True)
class DraftPair:
    """An original/replacement span pair as emitted by the rewrite pass."""
    original_span_text: str
    replacement_text: str
    ordinal: int

    @property
    def pair_id(self) -> str:
        return f"pair-{self.ordinal}"


@dataclass(frozen=True)
class WordDiff:
    """One token-level operation inside a matched pair."""
    op: SegmentKind
    text: str

    def to_dict(self) -> dict:
        return {"op": self.op.value, "text": self.text}


@dataclass(frozen=True)
class MatchedSpan:
    """A draft pair resolved to a location in the original document."""
    pair: DraftPair
    start: int
    end: int
    word_diff: tuple[WordDiff, ...] = ()

    @property
    def matched_text_length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {
            "ordinal": self.pair.ordinal,
            "pairId": self.pair.pair_id,
            "start": self.start,
            "end": self.end,
            "wordDiff": [w.to_dict() for w in self.word_diff],
        }


@dataclass(frozen=True)
class DiffSegment:
    """A segment of one column in the side-by-side comparison."""
    id: str
    kind: SegmentKind
    text: str
    pair_id: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "text": self.text,
            "pairId": self.pair_id,
        }


@dataclass
class AlignmentResult:
    """Both columns of the comparison view plus match bookkeeping."""
    original: list[DiffSegment] = field(default_factory=list)
    improved: list[DiffSegment] = field(default_factory=list)
    matched: list[MatchedSpan] = field(default_factory=list)
    skipped: list[ProcessingIssue] = field(default_factory=list)

    @property
    def columns(self) -> tuple[list[DiffSegment], list[DiffSegment]]:
        return self.original, self.improved

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def to_dict(self) -> dict:
        return {
            "original": [s.to_dict() for s in self.original],
            "improved": [s.to_dict() for s in self.improved],
            "matched": [m.to_dict() for m in self.matched],
            "skipped": [s.to_dict() for s in self.skipped],
            "skippedCount": self.skipped_count,
        }
