"""
Document metrics and rule-based scoring.

Provides word/sentence/link counts, the Flesch-Kincaid grade, and the
issue-density summary (0-100 score with an A-F grade) shown next to the
highlights.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Sequence

from .models import Finding, IssueKind, Sentence, Severity, severity_of
from .text_patterns import WORD_RE, count_urls, word_count

logger = logging.getLogger(__name__)

PARAGRAPH_SPLIT_RE = re.compile(r"\n[ \t]*\n+")
VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")


@dataclass
class DocumentMetrics:
    """Global counts for a document."""
    word_count: int = 0
    sentence_count: int = 0
    link_count: int = 0
    link_density_per_100_words: float = 0.0
    long_paragraphs: list[int] = field(default_factory=list)  # Word counts of long paragraphs
    flesch_kincaid_grade: float = 0.0

    def to_dict(self) -> dict:
        return {
            "wordCount": self.word_count,
            "sentenceCount": self.sentence_count,
            "linkCount": self.link_count,
            "linkDensityPer100Words": self.link_density_per_100_words,
            "longParagraphs": list(self.long_paragraphs),
            "fleschKincaidGrade": self.flesch_kincaid_grade,
        }


@dataclass
class AnalysisSummary:
    """Rule-based grade derived from issue density."""
    score: float
    grade: str
    issue_counts: dict[str, int]
    issue_kinds: list[str]

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "grade": self.grade,
            "issueCounts": dict(self.issue_counts),
            "issueKinds": list(self.issue_kinds),
        }


def count_syllables(word: str) -> int:
    """
    Estimate syllables by counting vowel groups.

    A trailing silent "e" is not counted. Every word has at least one.
    """
    w = re.sub(r"[^a-z]", "", word.lower())
    if not w:
        return 0
    syllables = len(VOWEL_GROUP_RE.findall(w))
    if w.endswith("e") and not w.endswith(("le", "ee")) and syllables > 1:
        syllables -= 1
    return max(1, syllables)


def flesch_kincaid_grade(text: str, sentence_count: int) -> float:
    """
    Compute the Flesch-Kincaid grade level.

    Args:
        text: Plain text.
        sentence_count: Number of sentences (at least 1 is assumed).

    Returns:
        Grade rounded to two decimals.
    """
    word_list = WORD_RE.findall(text)
    if not word_list:
        return 0.0
    syllables = sum(count_syllables(w) for w in word_list)
    s = max(1, sentence_count)
    w = len(word_list)
    grade = 0.39 * (w / s) + 11.8 * (syllables / w) - 15.59
    return round(grade, 2)


def long_paragraphs(text: str, threshold: int) -> list[int]:
    """Return word counts of paragraphs longer than threshold words."""
    counts = [word_count(p) for p in PARAGRAPH_SPLIT_RE.split(text)]
    return [c for c in counts if c > threshold]


def compute_metrics(
    plain_text: str,
    sentences: Sequence[Sentence],
    long_paragraph_words: int = 120,
) -> DocumentMetrics:
    """
    Compute global document metrics.

    Args:
        plain_text: The document's plain text.
        sentences: Its segmented sentences.
        long_paragraph_words: Paragraph length considered long.

    Returns:
        DocumentMetrics for the document.
    """
    words = word_count(plain_text)
    links = count_urls(plain_text)
    density = round(links / max(words, 1) * 100, 2)

    return DocumentMetrics(
        word_count=words,
        sentence_count=len(sentences),
        link_count=links,
        link_density_per_100_words=density,
        long_paragraphs=long_paragraphs(plain_text, long_paragraph_words),
        flesch_kincaid_grade=flesch_kincaid_grade(plain_text, len(sentences)) if sentences else 0.0,
    )


def score_from_density(issues_per_hundred: float) -> float:
    """
    Map issues per 100 words to a 0-100 score.

    Scale:
        0-2 issues per 100 words = A (90-100)
        2-4 = B (80-89), 4-6 = C (70-79), 6-8 = D (60-69), 8+ = F
    """
    d = issues_per_hundred
    if d <= 2:
        return max(90.0, 100 - d * 5)
    if d <= 4:
        return max(80.0, 90 - (d - 2) * 5)
    if d <= 6:
        return max(70.0, 80 - (d - 4) * 5)
    if d <= 8:
        return max(60.0, 70 - (d - 6) * 5)
    return max(0.0, 60 - (d - 8) * 2)


def score_to_grade(score: float) -> str:
    """Convert a 0-100 score to a letter grade."""
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def summarize(findings: Sequence[Finding], word_total: int) -> AnalysisSummary:
    """
    Build the rule-based summary from sentence-level findings.

    Each (sentence, kind) pair counts once. Informational kinds (calls to
    action) are counted but do not lower the score.

    Args:
        findings: Sentence-level findings of one analysis.
        word_total: Document word count.

    Returns:
        AnalysisSummary with score, grade and counts by severity.
    """
    counts = {severity.value: 0 for severity in Severity}
    seen: set[tuple[int, IssueKind]] = set()
    kinds: list[str] = []

    for finding in findings:
        if finding.sentence_index is None:
            continue
        key = (finding.sentence_index, finding.kind)
        if key in seen:
            continue
        seen.add(key)
        counts[severity_of(finding.kind).value] += 1
        if finding.kind.value not in kinds:
            kinds.append(finding.kind.value)

    scored = counts["high"] + counts["medium"] + counts["low"]
    per_hundred = scored / max(word_total, 1) * 100
    score = round(score_from_density(per_hundred), 1)

    logger.debug(f"Summary: {scored} scored issues, {per_hundred:.2f} per 100 words, score {score}")

    return AnalysisSummary(
        score=score,
        grade=score_to_grade(score),
        issue_counts=counts,
        issue_kinds=kinds,
    )
