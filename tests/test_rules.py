# -*- coding: utf-8 -*-
"""
Tests for the rule evaluators and RuleSet.

Each evaluator is tested on its own with a standalone sentence; offsets
in findings are relative to that sentence.
"""

import pytest

from mail_grader.config import AnalysisOptions
from mail_grader.models import (
    ClaimDetail,
    Finding,
    FormattingDetail,
    IssueKind,
    LexiconDetail,
    LinkDensityDetail,
    ReadabilityDetail,
    ReadabilityGradeDetail,
    RedundancyDetail,
)
from mail_grader.rules import (
    DEFAULT_RULES,
    Rule,
    RuleSet,
    count_clauses,
    evaluate_claim_without_evidence,
    evaluate_cta,
    evaluate_emoji_excess,
    evaluate_fluff,
    evaluate_formatting,
    evaluate_grammar_spelling,
    evaluate_hard_to_read,
    evaluate_hedging,
    evaluate_link_density,
    evaluate_readability_grade,
    evaluate_redundancy,
    evaluate_spam_words,
    evaluate_vague_date,
    evaluate_vague_number,
)
from mail_grader.segmenter import segment

from conftest import make_sentence


@pytest.fixture
def rules() -> RuleSet:
    return RuleSet()


# =============================================================================
# LEXICON RULES
# =============================================================================

class TestLexiconRules:
    """fluff, hedging, vague_date and vague_number."""

    def test_fluff_custom_phrase(self):
        rules = RuleSet(AnalysisOptions(fluff_phrases=("really great",)))
        findings = evaluate_fluff(make_sentence("This is a really great deal."), rules)

        assert len(findings) == 1
        assert (findings[0].start, findings[0].end) == (10, 22)
        assert findings[0].detail == LexiconDetail(phrases=("really great",))

    def test_longest_phrase_wins(self):
        rules = RuleSet(AnalysisOptions(fluff_phrases=("really", "really great")))
        findings = evaluate_fluff(make_sentence("A really great day."), rules)

        assert [f.detail.phrases for f in findings] == [("really great",)]

    def test_case_insensitive_and_word_bounded(self, rules):
        findings = evaluate_fluff(make_sentence("REALLY? Reallyy not."), rules)
        assert [f.detail.phrases[0] for f in findings] == ["REALLY"]

    def test_hedging(self, rules):
        findings = evaluate_hedging(make_sentence("This might help."), rules)
        assert [(f.start, f.end) for f in findings] == [(5, 10)]
        assert findings[0].kind == IssueKind.HEDGING

    def test_vague_date(self, rules):
        findings = evaluate_vague_date(make_sentence("We launch soon."), rules)
        assert [(f.start, f.end) for f in findings] == [(10, 14)]

    def test_vague_number(self, rules):
        findings = evaluate_vague_number(make_sentence("Several readers wrote in."), rules)
        assert [(f.start, f.end) for f in findings] == [(0, 7)]

    def test_empty_lexicon_finds_nothing(self):
        rules = RuleSet(AnalysisOptions(fluff_phrases=()))
        assert evaluate_fluff(make_sentence("This is really very good."), rules) == []

    def test_finding_carries_sentence_index(self, rules):
        findings = evaluate_hedging(make_sentence("It might rain.", index=4, start=50), rules)
        assert findings[0].sentence_index == 4
        # Offsets stay relative to the sentence
        assert findings[0].start == 3


# =============================================================================
# SPAM
# =============================================================================

class TestSpamWords:

    def test_spam_phrases(self, rules):
        findings = evaluate_spam_words(make_sentence("Act now and save big."), rules)
        assert [f.detail.phrases for f in findings] == [("Act now",), ("save big",)]

    def test_phrases_inside_urls_are_ignored(self, rules):
        findings = evaluate_spam_words(
            make_sentence("Visit https://example.com/free-deal today."), rules
        )
        assert findings == []

    def test_shouted_words_over_limit(self, rules):
        findings = evaluate_spam_words(make_sentence("BUY THIS NOW please"), rules)
        shouted = [f.detail.shouted_words[0] for f in findings if f.detail.shouted_words]
        assert shouted == ["BUY", "THIS", "NOW"]

    def test_single_shouted_word_allowed(self, rules):
        findings = evaluate_spam_words(make_sentence("This is HUGE for us."), rules)
        assert not [f for f in findings if f.detail.shouted_words]

    def test_acronyms_are_not_shouting(self, rules):
        findings = evaluate_spam_words(make_sentence("The CEO and CTO met the SEO team."), rules)
        assert not [f for f in findings if f.detail.shouted_words]

    def test_exclamation_run(self, rules):
        findings = evaluate_spam_words(make_sentence("Huge news!!!"), rules)
        runs = [f for f in findings if f.detail.exclamations]

        assert len(runs) == 1
        assert runs[0].detail.exclamations == 3
        assert (runs[0].start, runs[0].end) == (5, 12)

    def test_single_exclamation_allowed(self, rules):
        findings = evaluate_spam_words(make_sentence("Great work!"), rules)
        assert not [f for f in findings if f.detail.exclamations]


# =============================================================================
# GRAMMAR AND SPELLING
# =============================================================================

class TestGrammarSpelling:

    def test_known_misspelling(self, rules):
        findings = evaluate_grammar_spelling(make_sentence("We recieve mail."), rules)

        assert len(findings) == 1
        assert findings[0].detail.misspelled == ("recieve",)
        assert findings[0].detail.suggestions == ("receive",)
        assert (findings[0].start, findings[0].end) == (3, 10)

    def test_custom_misspellings(self):
        rules = RuleSet(AnalysisOptions(misspellings={"teh": "the"}))
        findings = evaluate_grammar_spelling(make_sentence("Read teh notes."), rules)
        assert findings[0].detail.suggestions == ("the",)

    def test_repeated_word(self, rules):
        findings = evaluate_grammar_spelling(make_sentence("This is the the best."), rules)
        assert any(f.detail.repeated_words == ("the",) for f in findings)

    def test_lowercase_sentence_start(self, rules):
        findings = evaluate_grammar_spelling(make_sentence("hello there."), rules)
        assert any(f.detail.capitalization == ("hello",) for f in findings)

    def test_lowercase_i(self, rules):
        findings = evaluate_grammar_spelling(make_sentence("Yesterday i went home."), rules)
        assert any(f.detail.capitalization == ("i",) for f in findings)

    def test_article_mismatch(self, rules):
        findings = evaluate_grammar_spelling(make_sentence("She ate a apple."), rules)
        assert any(f.detail.articles for f in findings)

    @pytest.mark.parametrize("text", [
        "It is a useful tool.",
        "We waited an hour.",
        "She is an engineer.",
    ])
    def test_correct_articles(self, rules, text):
        findings = evaluate_grammar_spelling(make_sentence(text), rules)
        assert not any(f.detail.articles for f in findings)

    def test_space_before_punctuation(self, rules):
        findings = evaluate_grammar_spelling(make_sentence("Thanks , team."), rules)
        assert any(f.detail.punctuation == ("space before punctuation",) for f in findings)

    def test_clean_sentence(self, rules):
        assert evaluate_grammar_spelling(make_sentence("Our team shipped a new feature."), rules) == []


# =============================================================================
# SENTENCE-WIDE RULES
# =============================================================================

class TestClaims:

    def test_unsupported_superlative(self, rules):
        text = "We are the best newsletter."
        findings = evaluate_claim_without_evidence(make_sentence(text), rules)

        assert len(findings) == 1
        assert (findings[0].start, findings[0].end) == (0, len(text))
        assert isinstance(findings[0].detail, ClaimDetail)
        assert "best" in findings[0].detail.triggers

    def test_number_counts_as_evidence(self, rules):
        text = "We are the best newsletter with 10,000 readers."
        assert evaluate_claim_without_evidence(make_sentence(text), rules) == []

    def test_evidence_phrase(self, rules):
        text = "According to a survey, we are the best."
        assert evaluate_claim_without_evidence(make_sentence(text), rules) == []

    def test_link_counts_as_evidence(self, rules):
        text = "We are the fastest, see https://example.com/benchmarks for details."
        assert evaluate_claim_without_evidence(make_sentence(text), rules) == []


class TestHardToRead:

    def test_long_sentence(self, rules):
        text = " ".join(["word"] * 30) + "."
        findings = evaluate_hard_to_read(make_sentence(text), rules)

        assert len(findings) == 1
        assert isinstance(findings[0].detail, ReadabilityDetail)
        assert findings[0].detail.word_count == 30
        assert (findings[0].start, findings[0].end) == (0, len(text))

    def test_too_many_clauses(self, rules):
        text = "We met, we ate, we talked, and we left, but it rained."
        assert count_clauses(text) == 7
        assert len(evaluate_hard_to_read(make_sentence(text), rules)) == 1

    def test_heavy_jargon(self, rules):
        findings = evaluate_hard_to_read(make_sentence("Our synergy drives growth."), rules)
        assert findings[0].detail.jargon == ("synergy",)

    def test_short_plain_sentence(self, rules):
        assert evaluate_hard_to_read(make_sentence("We shipped it."), rules) == []

    def test_threshold_from_options(self):
        rules = RuleSet(AnalysisOptions(max_sentence_words=3))
        assert len(evaluate_hard_to_read(make_sentence("One two three four."), rules)) == 1


class TestEmojiExcess:

    def test_three_emoji_one_finding(self, rules):
        text = "\U0001F389\U0001F389\U0001F389"
        findings = evaluate_emoji_excess(make_sentence(text), rules)

        assert len(findings) == 1
        assert (findings[0].start, findings[0].end) == (0, 3)
        assert findings[0].detail.count == 3
        assert findings[0].detail.threshold == 2

    def test_span_runs_from_first_to_last_emoji(self, rules):
        text = "Party \U0001F389 time \U0001F680 now \U0001F525!"
        findings = evaluate_emoji_excess(make_sentence(text), rules)

        assert len(findings) == 1
        assert text[findings[0].start] == "\U0001F389"
        assert text[findings[0].end - 1] == "\U0001F525"

    def test_within_threshold(self, rules):
        text = "Nice \U0001F389\U0001F389"
        assert evaluate_emoji_excess(make_sentence(text), rules) == []


class TestCta:

    def test_leading_action_verb(self, rules):
        text = "Sign up today."
        findings = evaluate_cta(make_sentence(text), rules)

        assert len(findings) == 1
        assert (findings[0].start, findings[0].end) == (0, len(text))
        assert findings[0].detail.phrases[0] == "Sign"

    def test_cta_phrase_mid_sentence(self, rules):
        findings = evaluate_cta(make_sentence("You can read more on our blog."), rules)
        assert findings[0].detail.phrases == ("read more",)

    def test_bulleted_cta(self, rules):
        assert len(evaluate_cta(make_sentence("- Download the guide"), rules)) == 1

    def test_no_cta(self, rules):
        assert evaluate_cta(make_sentence("We shipped a release."), rules) == []


# =============================================================================
# DOCUMENT-LEVEL RULES
# =============================================================================

class TestDocumentRules:

    def test_readability_grade(self, rules):
        text = (
            "Comprehensive organizational infrastructure modernization necessitates "
            "extraordinary interdepartmental collaboration."
        )
        finding = evaluate_readability_grade(text, segment(text), rules)

        assert finding is not None
        assert finding.kind == IssueKind.HARD_TO_READ
        assert finding.sentence_index is None
        assert isinstance(finding.detail, ReadabilityGradeDetail)
        assert finding.detail.grade > 9

    def test_simple_text_passes_grade(self, rules):
        text = "The cat sat."
        assert evaluate_readability_grade(text, segment(text), rules) is None

    def test_redundant_sentences(self, rules):
        sentence = "Our weekly newsletter covers product updates and company news."
        text = f"{sentence} {sentence}"
        finding = evaluate_redundancy(text, segment(text), rules)

        assert finding.kind == IssueKind.FLUFF
        assert isinstance(finding.detail, RedundancyDetail)
        assert finding.detail.pairs == ((0, 1, 1.0),)

    def test_distinct_sentences_not_redundant(self, rules):
        text = "Our newsletter covers product updates weekly. The weather was lovely at the lake today."
        assert evaluate_redundancy(text, segment(text), rules) is None

    def test_link_density(self, rules):
        text = "Read https://a.com and https://b.com now."
        finding = evaluate_link_density(text, segment(text), rules)

        assert finding.kind == IssueKind.SPAM_WORDS
        assert isinstance(finding.detail, LinkDensityDetail)
        assert finding.detail.links == 2

    def test_formatting(self, rules):
        text = "Hello  world."
        finding = evaluate_formatting(text, segment(text), rules)

        assert finding.kind == IssueKind.GRAMMAR_SPELLING
        assert isinstance(finding.detail, FormattingDetail)
        assert finding.detail.double_spaces == 1

    def test_document_findings_span_whole_text(self, rules):
        text = "Hello  world."
        findings = rules.evaluate_document(text, segment(text))
        assert all((f.start, f.end) == (0, len(text)) for f in findings)


# =============================================================================
# RULE SET
# =============================================================================

class TestRuleSet:

    def test_default_registration_order(self, rules):
        assert rules.kind_order == tuple(r.kind for r in DEFAULT_RULES)
        assert rules.kind_order[0] == IssueKind.SPAM_WORDS
        assert rules.kind_order[-1] == IssueKind.CTA

    def test_only_restricts_kinds(self, rules):
        restricted = rules.only(IssueKind.FLUFF, IssueKind.HEDGING)

        assert [r.kind for r in restricted.rules] == [IssueKind.FLUFF, IssueKind.HEDGING]
        assert restricted.document_rules == ()
        assert restricted.kind_order[:2] == (IssueKind.FLUFF, IssueKind.HEDGING)

    def test_custom_rule(self):
        def flag_first_word(sentence, rule_set):
            return [Finding(IssueKind.FLUFF, sentence.index, 0, 4, LexiconDetail())]

        rules = RuleSet(rules=[Rule(IssueKind.FLUFF, flag_first_word)], document_rules=())
        findings = rules.evaluate_sentence(make_sentence("Well then."))

        assert [(f.start, f.end) for f in findings] == [(0, 4)]

    def test_rule_sets_are_independent(self):
        strict = RuleSet(AnalysisOptions(max_emoji=0))
        lenient = RuleSet(AnalysisOptions(max_emoji=5))
        sentence = make_sentence("Hi \U0001F44B")

        assert len(evaluate_emoji_excess(sentence, strict)) == 1
        assert evaluate_emoji_excess(sentence, lenient) == []
