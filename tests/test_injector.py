# -*- coding: utf-8 -*-
"""
Tests for marker injection and span conflict resolution.

Covers the round-trip guarantee (stripping markers gives back the plain
text), nesting, trimming and determinism.
"""

import random

import pytest

from mail_grader.injector import inject, resolve_spans
from mail_grader.markers import extract_spans, strip_markers
from mail_grader.models import (
    AnnotatedSpan,
    Finding,
    IssueKind,
    LexiconDetail,
    SpamDetail,
)
from mail_grader.rules import RuleSet
from mail_grader.segmenter import segment
from mail_grader.text_patterns import visible_length

ALPHABET = "abcdefghijklmnopqrstuvwxyz"


def finding(kind: IssueKind, start: int, end: int, sentence_index=0) -> Finding:
    return Finding(kind, sentence_index, start, end, LexiconDetail())


def no_partial_overlap(spans) -> bool:
    for i, a in enumerate(spans):
        for b in spans[i + 1:]:
            if not a.overlaps(b):
                continue
            if not (a.strictly_contains(b) or b.strictly_contains(a)):
                return False
    return True


class TestInjection:

    def test_single_lexicon_highlight(self, fluff_only_rules):
        text = "This is a really great deal."
        sentences = segment(text)
        findings = [f for s in sentences for f in fluff_only_rules.evaluate_sentence(s)]

        result = inject(text, sentences, findings, kind_order=fluff_only_rules.kind_order)

        assert result.annotated_text == "This is a <fluff>really great</fluff> deal."
        assert result.rejected == 0

    def test_partial_overlap_trims_later_registered(self):
        sentences = segment(ALPHABET)
        findings = [
            Finding(IssueKind.FLUFF, 0, 3, 16, LexiconDetail()),
            Finding(IssueKind.SPAM_WORDS, 0, 10, 16, SpamDetail()),
        ]

        result = inject(ALPHABET, sentences, findings, kind_order=RuleSet().kind_order)

        assert result.spans == [
            AnnotatedSpan(IssueKind.FLUFF, 3, 10),
            AnnotatedSpan(IssueKind.SPAM_WORDS, 10, 16),
        ]
        assert result.annotated_text == (
            "abc<fluff>defghij</fluff><spam_words>klmnop</spam_words>qrstuvwxyz"
        )

    def test_strict_nesting_preserved(self):
        sentences = segment(ALPHABET)
        findings = [finding(IssueKind.HARD_TO_READ, 0, 26), finding(IssueKind.FLUFF, 5, 10)]

        result = inject(ALPHABET, sentences, findings)

        assert result.annotated_text == (
            "<hard_to_read>abcde<fluff>fghij</fluff>klmnopqrstuvwxyz</hard_to_read>"
        )

    def test_shared_boundary_containment_trims(self):
        sentences = segment(ALPHABET)
        findings = [finding(IssueKind.HARD_TO_READ, 0, 26), finding(IssueKind.FLUFF, 0, 5)]

        result = inject(ALPHABET, sentences, findings)

        assert result.spans == [
            AnnotatedSpan(IssueKind.FLUFF, 0, 5),
            AnnotatedSpan(IssueKind.HARD_TO_READ, 5, 26),
        ]

    def test_identical_range_keeps_higher_severity(self):
        sentences = segment(ALPHABET)
        findings = [finding(IssueKind.FLUFF, 0, 5), finding(IssueKind.SPAM_WORDS, 0, 5)]

        result = inject(ALPHABET, sentences, findings)
        assert result.spans == [AnnotatedSpan(IssueKind.SPAM_WORDS, 0, 5)]

    def test_identical_range_same_severity_keeps_earlier_registered(self):
        sentences = segment(ALPHABET)
        findings = [finding(IssueKind.HEDGING, 0, 5), finding(IssueKind.FLUFF, 0, 5)]

        result = inject(ALPHABET, sentences, findings, kind_order=RuleSet().kind_order)
        assert result.spans == [AnnotatedSpan(IssueKind.FLUFF, 0, 5)]

    def test_same_kind_duplicates_collapse(self):
        sentences = segment(ALPHABET)
        findings = [finding(IssueKind.FLUFF, 0, 10), finding(IssueKind.FLUFF, 2, 6)]

        result = inject(ALPHABET, sentences, findings)
        assert result.spans == [AnnotatedSpan(IssueKind.FLUFF, 0, 10)]

    def test_short_spans_dropped(self):
        sentences = segment(ALPHABET)
        result = inject(ALPHABET, sentences, [finding(IssueKind.FLUFF, 0, 2)])

        assert result.spans == []
        assert result.annotated_text == ALPHABET

    def test_emoji_sequence_counts_as_one_character(self):
        family = "\U0001F468\u200d\U0001F469\u200d\U0001F467"
        text = f"Hi {family} all"
        spans = [AnnotatedSpan(IssueKind.EMOJI_EXCESS, 3, 3 + len(family))]

        assert resolve_spans(text, spans) == []
        assert resolve_spans(text, spans, min_span_length=1) == spans

    def test_combining_marks_not_counted(self):
        text = "ne\u0301 sure"
        spans = [AnnotatedSpan(IssueKind.FLUFF, 0, 3)]

        assert resolve_spans(text, spans) == []

    def test_edges_trimmed_of_whitespace(self):
        text = "ab   cdef"
        sentences = segment(text)
        result = inject(text, sentences, [finding(IssueKind.FLUFF, 2, 9)])

        assert result.spans == [AnnotatedSpan(IssueKind.FLUFF, 5, 9)]

    def test_sentence_offsets_become_global(self):
        text = "First one. Then it might rain."
        sentences = segment(text)
        result = inject(text, sentences, [finding(IssueKind.HEDGING, 8, 13, sentence_index=1)])

        assert result.annotated_text == "First one. Then it <hedging>might</hedging> rain."


class TestVisibleLength:

    def test_plain_text(self):
        assert visible_length("abc") == 3

    def test_emoji_with_skin_tone_and_selector(self):
        assert visible_length("\U0001F44D\U0001F3FD ok") == 4
        assert visible_length("\u2764\ufe0f") == 1

    def test_combining_mark(self):
        assert visible_length("cafe\u0301") == 4


class TestRejection:

    def test_out_of_range_finding_rejected(self):
        sentences = segment(ALPHABET)
        result = inject(ALPHABET, sentences, [finding(IssueKind.FLUFF, 0, 100)])

        assert result.rejected == 1
        assert result.annotated_text == ALPHABET

    def test_unknown_sentence_rejected(self):
        sentences = segment(ALPHABET)
        result = inject(ALPHABET, sentences, [finding(IssueKind.FLUFF, 0, 5, sentence_index=7)])
        assert result.rejected == 1

    def test_document_level_findings_not_injected(self):
        sentences = segment(ALPHABET)
        result = inject(ALPHABET, sentences, [finding(IssueKind.HARD_TO_READ, 0, 26, sentence_index=None)])

        assert result.spans == []
        assert result.rejected == 0


class TestInjectionProperties:
    """Round trip, no partial overlap and determinism on real rule output."""

    @pytest.fixture
    def annotated(self, sample_newsletter):
        rules = RuleSet()
        sentences = segment(sample_newsletter)
        findings = [f for s in sentences for f in rules.evaluate_sentence(s)]
        return sample_newsletter, sentences, findings, rules

    def test_round_trip(self, annotated):
        text, sentences, findings, rules = annotated
        result = inject(text, sentences, findings, kind_order=rules.kind_order)

        assert strip_markers(result.annotated_text) == text

    def test_markers_parse_back_to_spans(self, annotated):
        text, sentences, findings, rules = annotated
        result = inject(text, sentences, findings, kind_order=rules.kind_order)
        scan = extract_spans(result.annotated_text)

        assert scan.is_well_formed
        assert sorted(scan.spans, key=lambda s: (s.start, s.end, s.kind.value)) == sorted(
            result.spans, key=lambda s: (s.start, s.end, s.kind.value)
        )

    def test_no_partial_overlap(self, annotated):
        text, sentences, findings, rules = annotated
        result = inject(text, sentences, findings, kind_order=rules.kind_order)

        assert result.spans
        assert no_partial_overlap(result.spans)

    def test_order_of_findings_does_not_matter(self, annotated):
        text, sentences, findings, rules = annotated
        shuffled = list(findings)
        random.Random(7).shuffle(shuffled)

        first = inject(text, sentences, findings, kind_order=rules.kind_order)
        second = inject(text, sentences, shuffled, kind_order=rules.kind_order)

        assert first.annotated_text == second.annotated_text

    def test_resolve_random_spans(self):
        rng = random.Random(42)
        kinds = list(IssueKind)
        text = "x" * 200
        spans = []
        for _ in range(60):
            start = rng.randrange(0, 190)
            spans.append(AnnotatedSpan(rng.choice(kinds), start, start + rng.randrange(3, 40)))

        resolved = resolve_spans(text, [AnnotatedSpan(s.kind, s.start, min(s.end, 200)) for s in spans])

        assert no_partial_overlap(resolved)
        assert all(s.length >= 3 for s in resolved)
