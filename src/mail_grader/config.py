# -*- coding: utf-8 -*-
"""
Centralized configuration for Mail Grader.

This module provides the configuration dataclasses that control rule
thresholds, lexicon overrides and sentence segmentation. A RuleSet is
built from an AnalysisOptions value, so two analyses with different
options can run side by side.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional

from . import lexicons


class ConfigError(ValueError):
    """Raised when analysis options are unknown or out of range."""
    pass


@dataclass(frozen=True)
class SegmenterOptions:
    """
    Abbreviation data for sentence segmentation.

    Attributes:
        abbreviations: Lowercase abbreviations (without the trailing period)
            that do not end a sentence when the next word is lowercase.
        honorifics: Lowercase titles (without the period) that never end a
            sentence, regardless of what follows.
        split_bullets: Treat a newline followed by a list item as a boundary.
    """
    abbreviations: frozenset[str] = lexicons.ABBREVIATIONS
    honorifics: frozenset[str] = lexicons.HONORIFICS
    split_bullets: bool = True


@dataclass(frozen=True)
class AnalysisOptions:
    """
    Thresholds and lexicon overrides for one analysis pass.

    Attributes:
        max_sentence_words: hard_to_read fires above this many words.
        max_clauses: hard_to_read fires above this many clauses.
        max_emoji: emoji_excess fires above this many emoji in a sentence.
        max_exclamations: spam_words flags exclamation runs longer than this.
        max_all_caps_words: spam_words flags shouted words once a sentence
            has more than this many.
        min_span_length: Minimum visible characters for a highlight.
        readability_grade_threshold: Document flag above this FK grade.
        max_links_per_100_words: Document flag above this link density.
        redundancy_threshold: Token Jaccard similarity for near-duplicates.
        redundancy_min_words: Sentences shorter than this skip redundancy.
        long_paragraph_words: Paragraphs above this are reported as long.

        Lexicon overrides (None = use the defaults in lexicons.py):
            spam_phrases, fluff_phrases, hedge_words, vague_dates,
            vague_quantities, cta_phrases, action_verbs, claim_patterns,
            heavy_jargon, misspellings.
    """

    # Sentence thresholds
    max_sentence_words: int = 25
    max_clauses: int = 4
    max_emoji: int = 2
    max_exclamations: int = 1
    max_all_caps_words: int = 1
    min_span_length: int = 3

    # Document thresholds
    readability_grade_threshold: float = 9.0
    max_links_per_100_words: float = 3.0
    redundancy_threshold: float = 0.85
    redundancy_min_words: int = 6
    long_paragraph_words: int = 120

    # Lexicon overrides
    spam_phrases: Optional[tuple[str, ...]] = None
    fluff_phrases: Optional[tuple[str, ...]] = None
    hedge_words: Optional[tuple[str, ...]] = None
    vague_dates: Optional[tuple[str, ...]] = None
    vague_quantities: Optional[tuple[str, ...]] = None
    cta_phrases: Optional[tuple[str, ...]] = None
    action_verbs: Optional[tuple[str, ...]] = None
    claim_patterns: Optional[tuple[str, ...]] = None
    heavy_jargon: Optional[tuple[str, ...]] = None
    misspellings: Optional[Mapping[str, str]] = None

    segmentation: SegmenterOptions = field(default_factory=SegmenterOptions)

    def __post_init__(self) -> None:
        """Validate thresholds."""
        for name in (
            "max_sentence_words",
            "max_clauses",
            "min_span_length",
            "redundancy_min_words",
            "long_paragraph_words",
        ):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1, got {getattr(self, name)}")
        for name in ("max_emoji", "max_exclamations", "max_all_caps_words"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0, got {getattr(self, name)}")
        if not 0.0 < self.redundancy_threshold <= 1.0:
            raise ConfigError(
                f"redundancy_threshold must be in (0, 1], got {self.redundancy_threshold}"
            )

    # Lexicon accessors fall back to the shipped defaults

    @property
    def spam_lexicon(self) -> tuple[str, ...]:
        return self.spam_phrases if self.spam_phrases is not None else lexicons.SPAM_PHRASES

    @property
    def fluff_lexicon(self) -> tuple[str, ...]:
        return self.fluff_phrases if self.fluff_phrases is not None else lexicons.FLUFF_PHRASES

    @property
    def hedge_lexicon(self) -> tuple[str, ...]:
        return self.hedge_words if self.hedge_words is not None else lexicons.HEDGE_WORDS

    @property
    def vague_date_lexicon(self) -> tuple[str, ...]:
        return self.vague_dates if self.vague_dates is not None else lexicons.VAGUE_DATES

    @property
    def vague_quantity_lexicon(self) -> tuple[str, ...]:
        if self.vague_quantities is not None:
            return self.vague_quantities
        return lexicons.VAGUE_QUANTITIES

    @property
    def cta_lexicon(self) -> tuple[str, ...]:
        return self.cta_phrases if self.cta_phrases is not None else lexicons.CTA_PHRASES

    @property
    def action_verb_lexicon(self) -> tuple[str, ...]:
        return self.action_verbs if self.action_verbs is not None else lexicons.ACTION_VERBS

    @property
    def claim_lexicon(self) -> tuple[str, ...]:
        return self.claim_patterns if self.claim_patterns is not None else lexicons.CLAIM_TRIGGERS

    @property
    def jargon_lexicon(self) -> tuple[str, ...]:
        return self.heavy_jargon if self.heavy_jargon is not None else lexicons.HEAVY_JARGON

    @property
    def misspelling_map(self) -> Mapping[str, str]:
        return self.misspellings if self.misspellings is not None else lexicons.MISSPELLINGS

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AnalysisOptions":
        """
        Build options from a plain mapping (API payload, CLI flags).

        List values for lexicon fields are converted to tuples.

        Raises:
            ConfigError: On unknown keys or invalid values.
        """
        if not data:
            return cls()

        known = {f.name for f in fields(cls)} - {"segmentation"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown analysis option(s): {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            if key == "misspellings":
                if not isinstance(value, Mapping):
                    raise ConfigError("misspellings must be a mapping of word -> correction")
                kwargs[key] = {str(k).lower(): str(v) for k, v in value.items()}
            elif key.endswith(("_phrases", "_words", "_dates", "_quantities", "_verbs", "_patterns", "_jargon")) \
                    and isinstance(value, (list, tuple, set, frozenset)):
                kwargs[key] = tuple(str(v) for v in value)
            else:
                kwargs[key] = value

        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigError(str(e)) from e

    def with_overrides(self, **overrides: Any) -> "AnalysisOptions":
        """Return a copy with some fields replaced."""
        return replace(self, **overrides)
