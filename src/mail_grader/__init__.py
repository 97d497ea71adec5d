"""
Mail Grader

A newsletter draft grader that:
- Flags spam language, fluff, hedging, vague dates and numbers, unsupported
  claims, hard-to-read sentences, emoji overuse and calls to action
- Writes the issues into the text as <kind>...</kind> markers
- Maps the markers back onto the formatted (HTML) draft as highlights
- Lines up a rewrite against the original for side-by-side review
"""

__version__ = "1.0.0"
__author__ = "Mail Grader Team"

from .config import AnalysisOptions, ConfigError, SegmenterOptions

from .models import (
    AlignmentResult,
    AnnotatedSpan,
    DiffSegment,
    Document,
    DraftPair,
    Finding,
    HighlightSpan,
    IssueCategory,
    IssueKind,
    MatchedSpan,
    ProcessingIssue,
    SegmentKind,
    Sentence,
    Severity,
    severity_of,
)

from .segmenter import segment, reconstruct

from .rules import DocumentRule, Rule, RuleSet

from .markers import extract_spans, serialize, strip_markers

from .injector import InjectionResult, inject

from .reconciler import ReconcileResult, reconcile

from .draft_pairs import DraftParseResult, parse_draft_pairs, rewrite_to_pairs

from .aligner import align, word_diff

from .analyzer import (
    AnalysisCancelled,
    AnalysisResult,
    CancellationToken,
    analyze,
    analyze_many,
)

from .scoring import HolisticScore, parse_score_response

__all__ = [
    # Configuration
    "AnalysisOptions",
    "ConfigError",
    "SegmenterOptions",
    # Models
    "AlignmentResult",
    "AnnotatedSpan",
    "DiffSegment",
    "Document",
    "DraftPair",
    "Finding",
    "HighlightSpan",
    "IssueCategory",
    "IssueKind",
    "MatchedSpan",
    "ProcessingIssue",
    "SegmentKind",
    "Sentence",
    "Severity",
    "severity_of",
    # Pipeline
    "segment",
    "reconstruct",
    "DocumentRule",
    "Rule",
    "RuleSet",
    "extract_spans",
    "serialize",
    "strip_markers",
    "InjectionResult",
    "inject",
    "ReconcileResult",
    "reconcile",
    "AnalysisCancelled",
    "AnalysisResult",
    "CancellationToken",
    "analyze",
    "analyze_many",
    # Drafts
    "DraftParseResult",
    "parse_draft_pairs",
    "rewrite_to_pairs",
    "align",
    "word_diff",
    # Scoring
    "HolisticScore",
    "parse_score_response",
]
