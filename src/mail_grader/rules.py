# -*- coding: utf-8 -*-
"""
Rule evaluators for newsletter writing issues.

Each evaluator is an independent pure function taking a sentence and the
RuleSet it runs under, returning zero or more Findings with offsets
relative to the sentence text. Document-level evaluators take the whole
text and return at most one Finding with sentence_index None.

Evaluators never share state, so a RuleSet can be used from several
threads at once and new rules can be registered without touching the
existing ones.
"""

import logging
import re
from dataclasses import dataclass
from itertools import combinations
from typing import Callable, Iterable, Optional, Sequence

from . import lexicons
from .config import AnalysisOptions
from .metrics import flesch_kincaid_grade
from .models import (
    ClaimDetail,
    EmojiDetail,
    Finding,
    FindingDetail,
    FormattingDetail,
    GrammarDetail,
    IssueKind,
    LexiconDetail,
    LinkDensityDetail,
    ReadabilityDetail,
    ReadabilityGradeDetail,
    RedundancyDetail,
    Sentence,
    SpamDetail,
)
from .text_patterns import (
    EMOJI_RE,
    NUMBER_RE,
    WORD_RE,
    LexiconMatcher,
    count_urls,
    inside_any,
    locked_spans,
    word_count,
)

logger = logging.getLogger(__name__)

# Shouted words: three or more capitals
SHOUTED_RE = re.compile(r"\b[A-Z]{3,}\b")

# Exclamation run with the word it closes
EXCLAMATION_RE = re.compile(r"[\w'’]+[^\w\s!]*(!+)")

# Grammar heuristics
REPEATED_WORD_RE = re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE)
LONE_I_RE = re.compile(r"(?<![\w'’.\-])i\s+[A-Za-z'’]+")
SPACE_BEFORE_PUNCT_RE = re.compile(r"[\w'’]+[ \t]+[,;:!?.](?=\s|$)")
MISSING_SPACE_AFTER_COMMA_RE = re.compile(r"[A-Za-z]+,[A-Za-z]+")
DOUBLED_PUNCT_RE = re.compile(r"[\w'’]+(?:,{2,}|;{2,}|:{2,}|\?{2,})")
A_BEFORE_VOWEL_RE = re.compile(r"\b([Aa])\s+([AEIOUaeiou][\w'’-]*)")
AN_BEFORE_CONSONANT_RE = re.compile(r"\b([Aa]n)\s+([B-DF-HJ-NP-TV-Zb-df-hj-np-tv-z][\w'’-]*)")

# "a" is right before these vowel-initial sounds ("a user", "a one-time")
_CONSONANT_SOUND_PREFIXES = ("uni", "use", "usu", "uti", "ure", "eu", "one", "once", "ubi", "ufo")
# "an" is right before these consonant-initial sounds ("an hour")
_VOWEL_SOUND_PREFIXES = ("hour", "honest", "honor", "honour", "heir")

# Clause separators and joining words for hard_to_read
CLAUSE_PUNCT_RE = re.compile(r"[,;:]|\s[-–—]\s|—")
CLAUSE_WORDS_RE = re.compile(
    r"\b(?:and|but|or|which|who|whom|whose|because|although|though|while|whereas|"
    r"since|unless|if|when|where)\b",
    re.IGNORECASE,
)

CITATION_RE = re.compile(r"\[\d+\]|\(\s*(?:source|via|see)\b", re.IGNORECASE)

BULLET_PREFIX_RE = re.compile(r"^\s*(?:[-*•▪–]|\d{1,3}[.)])\s+")

# Formatting heuristics (document level)
DOUBLE_SPACE_RE = re.compile(r"(?<=\S) {2,}(?=\S)")
TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)


def _clamp(sentence: Sentence, start: int, end: int) -> tuple[int, int]:
    """Clamp offsets to the sentence's own bounds."""
    length = len(sentence.text)
    start = max(0, min(start, length))
    end = max(start, min(end, length))
    return start, end


def _finding(kind: IssueKind, sentence: Sentence, start: int, end: int, detail: FindingDetail) -> Finding:
    start, end = _clamp(sentence, start, end)
    return Finding(kind=kind, sentence_index=sentence.index, start=start, end=end, detail=detail)


def _whole_sentence(kind: IssueKind, sentence: Sentence, detail: FindingDetail) -> Finding:
    return _finding(kind, sentence, 0, len(sentence.text), detail)


def _lexicon_findings(kind: IssueKind, matcher: LexiconMatcher, sentence: Sentence) -> list[Finding]:
    """One finding per lexicon match, skipping URLs and emails."""
    if not matcher:
        return []
    skip = locked_spans(sentence.text)
    return [
        _finding(kind, sentence, m.start, m.end, LexiconDetail(phrases=(m.text,)))
        for m in matcher.finditer(sentence.text, skip=skip)
    ]


# =============================================================================
# SENTENCE-LEVEL EVALUATORS
# =============================================================================

def evaluate_spam_words(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    """
    Flag spam-trigger phrases, shouted words and exclamation runs.

    Matches inside URLs and emails are skipped. Shouted words are only
    flagged once the sentence has more than max_all_caps_words of them;
    known acronyms never count.
    """
    text = sentence.text
    opts = rules.options
    skip = locked_spans(text)
    findings = [
        _finding(IssueKind.SPAM_WORDS, sentence, m.start, m.end, SpamDetail(phrases=(m.text,)))
        for m in rules.spam.finditer(text, skip=skip)
    ]

    shouted = [
        m for m in SHOUTED_RE.finditer(text)
        if m.group(0) not in lexicons.ACRONYMS and not inside_any(m.start(), m.end(), skip)
    ]
    if len(shouted) > opts.max_all_caps_words:
        for m in shouted:
            findings.append(_finding(
                IssueKind.SPAM_WORDS, sentence, m.start(), m.end(),
                SpamDetail(shouted_words=(m.group(0),)),
            ))

    for m in EXCLAMATION_RE.finditer(text):
        run = len(m.group(1))
        if run > opts.max_exclamations:
            findings.append(_finding(
                IssueKind.SPAM_WORDS, sentence, m.start(), m.end(),
                SpamDetail(exclamations=run),
            ))

    return findings


def _article_mismatches(text: str) -> Iterable[re.Match]:
    for m in A_BEFORE_VOWEL_RE.finditer(text):
        word = m.group(2)
        if word.isupper() or word.lower().startswith(_CONSONANT_SOUND_PREFIXES):
            continue
        yield m
    for m in AN_BEFORE_CONSONANT_RE.finditer(text):
        word = m.group(2)
        if word.isupper() or word.lower().startswith(_VOWEL_SOUND_PREFIXES):
            continue
        yield m


def evaluate_grammar_spelling(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    """
    Flag known misspellings and simple grammar/punctuation heuristics.

    Heuristics: repeated words (only for words longer than two
    characters), lowercase sentence start, lowercase "i", a/an mismatch,
    space before punctuation, missing space after a comma and doubled
    punctuation.
    """
    text = sentence.text
    kind = IssueKind.GRAMMAR_SPELLING
    skip = locked_spans(text)
    misspellings = rules.options.misspelling_map
    findings: list[Finding] = []

    for m in WORD_RE.finditer(text):
        if inside_any(m.start(), m.end(), skip):
            continue
        fix = misspellings.get(m.group(0).lower())
        if fix:
            findings.append(_finding(
                kind, sentence, m.start(), m.end(),
                GrammarDetail(misspelled=(m.group(0),), suggestions=(fix,)),
            ))

    for m in REPEATED_WORD_RE.finditer(text):
        if len(m.group(1)) > 2 and not inside_any(m.start(), m.end(), skip):
            findings.append(_finding(
                kind, sentence, m.start(), m.end(),
                GrammarDetail(repeated_words=(m.group(1),)),
            ))

    body = BULLET_PREFIX_RE.sub(lambda b: " " * len(b.group(0)), text)
    first = WORD_RE.search(body)
    if first and first.start() == len(body) - len(body.lstrip()):
        word = first.group(0)
        if (
            word[0].islower()
            and word.isalpha()
            and word == word.lower()
            and not inside_any(first.start(), first.end(), skip)
        ):
            findings.append(_finding(
                kind, sentence, first.start(), first.end(),
                GrammarDetail(capitalization=(word,)),
            ))

    for m in LONE_I_RE.finditer(text):
        findings.append(_finding(
            kind, sentence, m.start(), m.end(),
            GrammarDetail(capitalization=("i",)),
        ))

    for m in _article_mismatches(text):
        findings.append(_finding(
            kind, sentence, m.start(), m.end(),
            GrammarDetail(articles=(m.group(0),)),
        ))

    for pattern, label in (
        (SPACE_BEFORE_PUNCT_RE, "space before punctuation"),
        (MISSING_SPACE_AFTER_COMMA_RE, "missing space after comma"),
        (DOUBLED_PUNCT_RE, "doubled punctuation"),
    ):
        for m in pattern.finditer(text):
            if inside_any(m.start(), m.end(), skip):
                continue
            findings.append(_finding(
                kind, sentence, m.start(), m.end(),
                GrammarDetail(punctuation=(label,)),
            ))

    return findings


def evaluate_claim_without_evidence(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    """Flag superlative or guarantee claims with no number, link or citation in the sentence."""
    text = sentence.text
    skip = locked_spans(text)
    triggers = [m.text for m in rules.claims.finditer(text, skip=skip)]
    if not triggers:
        return []

    has_evidence = (
        NUMBER_RE.search(text) is not None
        or bool(skip)
        or CITATION_RE.search(text) is not None
        or rules.evidence.search(text) is not None
    )
    if has_evidence:
        return []
    return [_whole_sentence(IssueKind.CLAIM_WITHOUT_EVIDENCE, sentence, ClaimDetail(triggers=tuple(triggers)))]


def count_clauses(text: str) -> int:
    """Estimate clauses as 1 + separators + joining words."""
    return 1 + len(CLAUSE_PUNCT_RE.findall(text)) + len(CLAUSE_WORDS_RE.findall(text))


def evaluate_hard_to_read(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    """Flag sentences that are too long, have too many clauses or use heavy jargon."""
    opts = rules.options
    text = sentence.text
    words = word_count(text)
    clauses = count_clauses(text)
    jargon = tuple(m.text for m in rules.jargon.finditer(text))

    if words <= opts.max_sentence_words and clauses <= opts.max_clauses and not jargon:
        return []
    detail = ReadabilityDetail(
        word_count=words,
        clause_count=clauses,
        max_words=opts.max_sentence_words,
        max_clauses=opts.max_clauses,
        jargon=jargon,
    )
    return [_whole_sentence(IssueKind.HARD_TO_READ, sentence, detail)]


def evaluate_fluff(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    return _lexicon_findings(IssueKind.FLUFF, rules.fluff, sentence)


def evaluate_hedging(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    return _lexicon_findings(IssueKind.HEDGING, rules.hedges, sentence)


def evaluate_vague_date(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    return _lexicon_findings(IssueKind.VAGUE_DATE, rules.vague_dates, sentence)


def evaluate_vague_number(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    return _lexicon_findings(IssueKind.VAGUE_NUMBER, rules.vague_quantities, sentence)


def evaluate_emoji_excess(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    """
    Flag sentences with more emoji than allowed.

    Emits a single finding from the first emoji to the last, never one
    finding per emoji.
    """
    emojis = list(EMOJI_RE.finditer(sentence.text))
    threshold = rules.options.max_emoji
    if len(emojis) <= threshold:
        return []
    return [_finding(
        IssueKind.EMOJI_EXCESS, sentence, emojis[0].start(), emojis[-1].end(),
        EmojiDetail(count=len(emojis), threshold=threshold),
    )]


def evaluate_cta(sentence: Sentence, rules: "RuleSet") -> list[Finding]:
    """Flag sentences that lead with an action verb or contain a call-to-action phrase."""
    text = sentence.text
    phrases: list[str] = []

    body = BULLET_PREFIX_RE.sub("", text)
    first = WORD_RE.search(body)
    if first and first.start() == 0 and first.group(0).lower() in rules.action_verbs:
        phrases.append(first.group(0))

    phrases.extend(m.text for m in rules.ctas.finditer(text, skip=locked_spans(text)))
    if not phrases:
        return []
    return [_whole_sentence(IssueKind.CTA, sentence, LexiconDetail(phrases=tuple(phrases)))]


# =============================================================================
# DOCUMENT-LEVEL EVALUATORS
# =============================================================================

def _document_finding(kind: IssueKind, plain_text: str, detail: FindingDetail) -> Finding:
    return Finding(kind=kind, sentence_index=None, start=0, end=len(plain_text), detail=detail)


def evaluate_readability_grade(
    plain_text: str, sentences: Sequence[Sentence], rules: "RuleSet"
) -> Optional[Finding]:
    """Flag documents whose Flesch-Kincaid grade exceeds the threshold."""
    if not sentences:
        return None
    threshold = rules.options.readability_grade_threshold
    grade = flesch_kincaid_grade(plain_text, len(sentences))
    if grade <= threshold:
        return None
    return _document_finding(
        IssueKind.HARD_TO_READ, plain_text,
        ReadabilityGradeDetail(grade=grade, threshold=threshold),
    )


def _jaccard_tokens(text: str) -> set[str]:
    return {
        w for w in (t.lower() for t in WORD_RE.findall(text))
        if len(w) > 3 and w not in lexicons.STOPWORDS
    }


def evaluate_redundancy(
    plain_text: str, sentences: Sequence[Sentence], rules: "RuleSet"
) -> Optional[Finding]:
    """Flag pairs of near-duplicate sentences (token Jaccard similarity)."""
    opts = rules.options
    candidates = [
        (s.index, _jaccard_tokens(s.text))
        for s in sentences
        if word_count(s.text) >= opts.redundancy_min_words
    ]
    pairs = []
    for (i, a), (j, b) in combinations(candidates, 2):
        union = len(a | b)
        if not union:
            continue
        similarity = len(a & b) / union
        if similarity >= opts.redundancy_threshold:
            pairs.append((i, j, round(similarity, 2)))
    if not pairs:
        return None
    return _document_finding(IssueKind.FLUFF, plain_text, RedundancyDetail(pairs=tuple(pairs)))


def evaluate_link_density(
    plain_text: str, sentences: Sequence[Sentence], rules: "RuleSet"
) -> Optional[Finding]:
    """Flag documents with too many links per 100 words."""
    words = word_count(plain_text)
    links = count_urls(plain_text)
    if not links:
        return None
    per_100 = round(links / max(words, 1) * 100, 2)
    threshold = rules.options.max_links_per_100_words
    if per_100 <= threshold:
        return None
    return _document_finding(
        IssueKind.SPAM_WORDS, plain_text,
        LinkDensityDetail(links=links, words=words, per_100_words=per_100, threshold=threshold),
    )


def evaluate_formatting(
    plain_text: str, sentences: Sequence[Sentence], rules: "RuleSet"
) -> Optional[Finding]:
    """Flag double spaces, mixed quote styles, mixed dash styles and trailing spaces."""
    double_spaces = len(DOUBLE_SPACE_RE.findall(plain_text))
    mixed_quotes = (
        ("'" in plain_text and ("‘" in plain_text or "’" in plain_text))
        or ('"' in plain_text and ("“" in plain_text or "”" in plain_text))
    )
    dash_kinds = sum(1 for d in (" - ", "–", "—") if d in plain_text)
    mixed_dashes = dash_kinds > 1
    trailing = len(TRAILING_SPACE_RE.findall(plain_text))

    if not (double_spaces or mixed_quotes or mixed_dashes or trailing):
        return None
    return _document_finding(
        IssueKind.GRAMMAR_SPELLING, plain_text,
        FormattingDetail(
            double_spaces=double_spaces,
            mixed_quotes=mixed_quotes,
            mixed_dashes=mixed_dashes,
            trailing_space_lines=trailing,
        ),
    )


# =============================================================================
# REGISTRY
# =============================================================================

SentenceEvaluator = Callable[[Sentence, "RuleSet"], list[Finding]]
DocumentEvaluator = Callable[[str, Sequence[Sentence], "RuleSet"], Optional[Finding]]


@dataclass(frozen=True)
class Rule:
    """A registered sentence-level evaluator."""
    kind: IssueKind
    evaluate: SentenceEvaluator


@dataclass(frozen=True)
class DocumentRule:
    """A registered document-level evaluator."""
    name: str
    evaluate: DocumentEvaluator


# Registration order: token-level rules first, sentence-wide rules last.
# The injector trims later-registered spans when two conflict.
DEFAULT_RULES: tuple[Rule, ...] = (
    Rule(IssueKind.SPAM_WORDS, evaluate_spam_words),
    Rule(IssueKind.GRAMMAR_SPELLING, evaluate_grammar_spelling),
    Rule(IssueKind.FLUFF, evaluate_fluff),
    Rule(IssueKind.HEDGING, evaluate_hedging),
    Rule(IssueKind.VAGUE_DATE, evaluate_vague_date),
    Rule(IssueKind.VAGUE_NUMBER, evaluate_vague_number),
    Rule(IssueKind.EMOJI_EXCESS, evaluate_emoji_excess),
    Rule(IssueKind.CLAIM_WITHOUT_EVIDENCE, evaluate_claim_without_evidence),
    Rule(IssueKind.HARD_TO_READ, evaluate_hard_to_read),
    Rule(IssueKind.CTA, evaluate_cta),
)

DEFAULT_DOCUMENT_RULES: tuple[DocumentRule, ...] = (
    DocumentRule("readability_grade", evaluate_readability_grade),
    DocumentRule("redundancy", evaluate_redundancy),
    DocumentRule("link_density", evaluate_link_density),
    DocumentRule("formatting", evaluate_formatting),
)


class RuleSet:
    """
    An explicit, immutable collection of rules plus their options.

    Lexicons are compiled once at construction. Pass a RuleSet into
    analyze() instead of relying on module-level registries, so analyses
    with different configurations can run in parallel.
    """

    def __init__(
        self,
        options: Optional[AnalysisOptions] = None,
        rules: Optional[Sequence[Rule]] = None,
        document_rules: Optional[Sequence[DocumentRule]] = None,
    ):
        self.options = options or AnalysisOptions()
        self.rules: tuple[Rule, ...] = tuple(DEFAULT_RULES if rules is None else rules)
        self.document_rules: tuple[DocumentRule, ...] = tuple(
            DEFAULT_DOCUMENT_RULES if document_rules is None else document_rules
        )

        opts = self.options
        self.spam = LexiconMatcher(opts.spam_lexicon)
        self.fluff = LexiconMatcher(opts.fluff_lexicon)
        self.hedges = LexiconMatcher(opts.hedge_lexicon)
        self.vague_dates = LexiconMatcher(opts.vague_date_lexicon)
        self.vague_quantities = LexiconMatcher(opts.vague_quantity_lexicon)
        self.ctas = LexiconMatcher(opts.cta_lexicon)
        self.claims = LexiconMatcher(opts.claim_lexicon)
        self.evidence = LexiconMatcher(lexicons.EVIDENCE_PHRASES)
        self.jargon = LexiconMatcher(opts.jargon_lexicon)
        self.action_verbs = frozenset(v.lower() for v in opts.action_verb_lexicon)

    @classmethod
    def default(cls) -> "RuleSet":
        return cls()

    @property
    def kind_order(self) -> tuple[IssueKind, ...]:
        """Issue kinds in registration order; unregistered kinds follow in enum order."""
        order: list[IssueKind] = []
        for rule in self.rules:
            if rule.kind not in order:
                order.append(rule.kind)
        order.extend(k for k in IssueKind if k not in order)
        return tuple(order)

    def only(self, *kinds: IssueKind) -> "RuleSet":
        """Return a RuleSet restricted to the given kinds, with no document rules."""
        wanted = set(kinds)
        return RuleSet(
            options=self.options,
            rules=[r for r in self.rules if r.kind in wanted],
            document_rules=(),
        )

    def evaluate_sentence(self, sentence: Sentence) -> list[Finding]:
        """Run every sentence rule, in registration order."""
        findings: list[Finding] = []
        for rule in self.rules:
            findings.extend(rule.evaluate(sentence, self))
        return findings

    def evaluate_document(self, plain_text: str, sentences: Sequence[Sentence]) -> list[Finding]:
        """Run every document rule; each contributes at most one finding."""
        findings = []
        for rule in self.document_rules:
            finding = rule.evaluate(plain_text, sentences, self)
            if finding is not None:
                logger.debug(f"Document rule {rule.name} fired: {finding.kind.value}")
                findings.append(finding)
        return findings
