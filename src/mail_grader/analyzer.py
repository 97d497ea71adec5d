# -*- coding: utf-8 -*-
"""
Analysis pipeline.

Runs one document through segmentation, every rule of a RuleSet, marker
injection and highlight reconciliation, and collects the metrics and
summary shown beside the highlights.

Every step is a pure function of its inputs. A RuleSet is passed in
explicitly, so several analyses with different configurations can run
side by side (see analyze_many).
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from .injector import InjectionResult, inject
from .metrics import AnalysisSummary, DocumentMetrics, compute_metrics, summarize
from .models import Document, Finding, HighlightSpan, ProcessingIssue, Sentence
from .reconciler import reconcile
from .rules import RuleSet
from .segmenter import segment

logger = logging.getLogger(__name__)


class AnalysisCancelled(Exception):
    """Raised when an analysis is cancelled before it finishes."""
    pass


class CancellationToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled("Analysis was cancelled")


@dataclass
class SentenceIssues:
    """Findings grouped for one sentence."""
    sentence: Sentence
    findings: list[Finding] = field(default_factory=list)

    @property
    def kinds(self) -> list[str]:
        kinds: list[str] = []
        for finding in self.findings:
            if finding.kind.value not in kinds:
                kinds.append(finding.kind.value)
        return kinds

    def to_dict(self) -> dict:
        detail: dict[str, list[dict]] = {}
        for finding in self.findings:
            detail.setdefault(finding.kind.value, []).append(finding.detail.to_dict())
        return {
            "sentenceIndex": self.sentence.index,
            "sentenceText": self.sentence.text,
            "start": self.sentence.start,
            "end": self.sentence.end,
            "kinds": self.kinds,
            "detail": detail,
        }


@dataclass
class AnalysisResult:
    """Everything one analysis pass produces."""
    document: Document
    sentences: list[Sentence]
    findings: list[Finding]
    document_findings: list[Finding]
    injection: InjectionResult
    highlights: list[HighlightSpan]
    processing_issues: list[ProcessingIssue]
    metrics: DocumentMetrics
    summary: AnalysisSummary

    @property
    def annotated_text(self) -> str:
        return self.injection.annotated_text

    @property
    def per_sentence(self) -> list[SentenceIssues]:
        """Sentences that have at least one finding, in document order."""
        grouped: dict[int, SentenceIssues] = {}
        by_index = {s.index: s for s in self.sentences}
        for finding in self.findings:
            sentence = by_index.get(finding.sentence_index)
            if sentence is None:
                continue
            grouped.setdefault(sentence.index, SentenceIssues(sentence)).findings.append(finding)
        return [grouped[i] for i in sorted(grouped)]

    def to_dict(self) -> dict:
        return {
            "annotatedText": self.annotated_text,
            "highlights": [h.to_dict() for h in self.highlights],
            "issues": {
                "documentLevel": [f.to_dict() for f in self.document_findings],
                "perSentence": [s.to_dict() for s in self.per_sentence],
            },
            "metrics": self.metrics.to_dict(),
            "summary": self.summary.to_dict(),
            "processingIssues": [i.to_dict() for i in self.processing_issues],
        }


def analyze(
    document: Union[Document, str],
    rule_set: Optional[RuleSet] = None,
    cancel: Optional[CancellationToken] = None,
) -> AnalysisResult:
    """
    Analyze one newsletter.

    Args:
        document: Document (or plain text) to analyze.
        rule_set: Rules and options to apply; defaults to RuleSet().
        cancel: Optional token checked between sentences.

    Returns:
        AnalysisResult with annotated text, highlights and metrics.

    Raises:
        AnalysisCancelled: If the token is cancelled mid-analysis.
    """
    if isinstance(document, str):
        document = Document(plain_text=document)
    rule_set = rule_set or RuleSet()
    options = rule_set.options
    text = document.plain_text

    sentences = segment(text, options.segmentation)
    logger.info(f"Analyzing {len(sentences)} sentence(s), {len(text)} characters")

    findings: list[Finding] = []
    for sentence in sentences:
        if cancel is not None:
            cancel.raise_if_cancelled()
        findings.extend(rule_set.evaluate_sentence(sentence))

    if cancel is not None:
        cancel.raise_if_cancelled()
    document_findings = rule_set.evaluate_document(text, sentences)

    injection = inject(
        text,
        sentences,
        findings,
        min_span_length=options.min_span_length,
        kind_order=rule_set.kind_order,
    )
    reconciled = reconcile(injection.annotated_text, document.formatted_content)

    metrics = compute_metrics(text, sentences, options.long_paragraph_words)
    summary = summarize(findings, metrics.word_count)

    logger.info(
        f"Analysis complete: {len(findings)} finding(s), "
        f"{len(document_findings)} document-level, grade {summary.grade}"
    )

    return AnalysisResult(
        document=document,
        sentences=sentences,
        findings=findings,
        document_findings=document_findings,
        injection=injection,
        highlights=reconciled.highlights,
        processing_issues=reconciled.issues,
        metrics=metrics,
        summary=summary,
    )


def analyze_many(
    documents: Sequence[Union[Document, str]],
    rule_set: Optional[RuleSet] = None,
    max_workers: int = 4,
    cancel: Optional[CancellationToken] = None,
) -> list[AnalysisResult]:
    """
    Analyze several documents concurrently.

    Results are returned in input order. The first exception raised by
    any analysis propagates.
    """
    rule_set = rule_set or RuleSet()
    if not documents:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(analyze, doc, rule_set, cancel) for doc in documents]
        return [f.result() for f in futures]
