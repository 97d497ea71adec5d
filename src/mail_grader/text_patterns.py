# -*- coding: utf-8 -*-
"""
Shared text patterns: URLs, emails, words, emoji and lexicon matching.

URLs and emails are "locked" tokens: lexicon rules never report a match
that falls inside one, so "https://example.com/free-deal" does not count
as spam language.
"""

import re
import unicodedata
from typing import Iterable, Iterator, NamedTuple, Optional

# =============================================================================
# URL PATTERN
# =============================================================================
# Matches:
# - Full URLs: https://example.com/path?query=1
# - Domain-only URLs: example.com/path, www.example.com
#
# Does NOT match:
# - Single words without TLD (to avoid false positives)

URL_PATTERN = re.compile(
    r"""
    (?:
        # Full URL with protocol
        (?:https?|ftp)://
        (?:[\w-]+\.)+[\w-]+
        (?:/[^\s<>"']*)?
    )
    |
    (?:
        # Domain-style URL without protocol (must have recognizable TLD)
        (?<![@\w.])
        (?:www\.)?
        (?:[\w-]+\.)+
        (?:com|org|net|edu|gov|io|co|ai|app|dev|info|biz|us|uk|ca|de|fr|eu|me|ly)
        \b
        (?:/[^\s<>"']*)?
    )
    """,
    re.VERBOSE | re.IGNORECASE
)

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
    re.IGNORECASE
)

# Words: letters/digits with inner apostrophes or hyphens
WORD_RE = re.compile(r"[A-Za-z0-9]+(?:['’\-][A-Za-z0-9]+)*")

# Numbers (integers, decimals, thousands separators)
NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)*")

# One emoji: a pictograph, optional skin tone, optional variation selector,
# optional zero-width-joiner chain. A ZWJ sequence counts as one emoji.
_PICTOGRAPH = r"[\U0001F300-\U0001FAFF\u2600-\u27bf\U0001F1E6-\U0001F1FF\u2b50\u2b06\u2194-\u21aa]"
_MODIFIERS = r"[\U0001F3FB-\U0001F3FF]?\ufe0f?"
EMOJI_RE = re.compile(
    rf"{_PICTOGRAPH}{_MODIFIERS}(?:\u200d{_PICTOGRAPH}{_MODIFIERS})*"
)


class TextMatch(NamedTuple):
    """A matched substring with its offsets."""
    start: int
    end: int
    text: str


def locked_spans(text: str) -> list[tuple[int, int]]:
    """Return (start, end) ranges of URLs and emails in text."""
    spans = [(m.start(), m.end()) for m in URL_PATTERN.finditer(text)]
    spans.extend((m.start(), m.end()) for m in EMAIL_PATTERN.finditer(text))
    spans.sort()
    return spans


def inside_any(start: int, end: int, spans: Iterable[tuple[int, int]]) -> bool:
    """Check whether [start, end) overlaps any of the given ranges."""
    return any(start < s_end and s_start < end for s_start, s_end in spans)


def count_urls(text: str) -> int:
    return sum(1 for _ in URL_PATTERN.finditer(text))


def words(text: str) -> list[str]:
    return WORD_RE.findall(text)


def word_count(text: str) -> int:
    return len(WORD_RE.findall(text))


# Joiners, variation selectors and skin tones take no width of their own
_ZERO_WIDTH = frozenset("\u200d\ufe0e\ufe0f") | frozenset(chr(c) for c in range(0x1F3FB, 0x1F400))


def visible_length(text: str) -> int:
    """
    Count the characters a reader sees.

    An emoji sequence (skin tone, variation selector, ZWJ chain) counts
    once, and combining marks count with the letter they sit on.
    """
    collapsed = EMOJI_RE.sub("*", text)
    return sum(
        1 for ch in collapsed
        if ch not in _ZERO_WIDTH and not unicodedata.combining(ch)
    )


def normalize_apostrophes(text: str) -> str:
    """Map curly apostrophes to straight ones (same length)."""
    return text.replace("’", "'").replace("‘", "'")


class LexiconMatcher:
    """
    Case-insensitive, word-bounded matcher for a phrase list.

    All phrases compile into one alternation, longest first, so
    "really great" wins over "really" at the same position. Apostrophes
    in phrases match both straight and curly forms.
    """

    def __init__(self, phrases: Iterable[str]):
        cleaned = sorted(
            {p.strip().lower() for p in phrases if p and p.strip()},
            key=lambda p: (-len(p), p),
        )
        self.phrases: tuple[str, ...] = tuple(cleaned)
        self._pattern: Optional[re.Pattern] = None
        if cleaned:
            alternatives = "|".join(self._phrase_pattern(p) for p in cleaned)
            self._pattern = re.compile(rf"(?<![\w])(?:{alternatives})(?![\w])", re.IGNORECASE)

    @staticmethod
    def _phrase_pattern(phrase: str) -> str:
        parts = [re.escape(part) for part in phrase.split()]
        pattern = r"\s+".join(parts)
        return pattern.replace("'", "['’]")

    def __bool__(self) -> bool:
        return self._pattern is not None

    def finditer(self, text: str, skip: Iterable[tuple[int, int]] = ()) -> Iterator[TextMatch]:
        """Yield non-overlapping matches, leaving out those inside ``skip`` ranges."""
        if self._pattern is None:
            return
        skip = list(skip)
        for match in self._pattern.finditer(text):
            if skip and inside_any(match.start(), match.end(), skip):
                continue
            yield TextMatch(match.start(), match.end(), match.group(0))

    def search(self, text: str) -> Optional[TextMatch]:
        return next(self.finditer(text), None)
