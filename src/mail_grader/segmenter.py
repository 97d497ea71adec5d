# -*- coding: utf-8 -*-
"""
Sentence segmentation with exact character offsets.

Splits a document's plain text into sentences whose offsets point back
into the original string:
- Terminal punctuation (. ! ?) followed by whitespace or end-of-text ends
  a sentence, with closing quotes/brackets kept on the sentence.
- A lone period after a single letter, dotted initials or a known
  abbreviation does not end the sentence when the next word is lowercase.
- Honorifics (Mr., Dr., ...) never end a sentence.
- A line followed by a blank line ends a sentence (headers, short lines).
- A newline followed by a list item ends a sentence (bullet lists).

Sentences are trimmed of surrounding whitespace, so the text between two
consecutive sentences is always whitespace.
"""

import re
from typing import Optional

from .config import SegmenterOptions
from .models import Sentence

# Run of terminal punctuation plus trailing closing quotes/brackets,
# followed by whitespace or end of text
TERMINAL_RE = re.compile(r"[.!?]+[\"'\)\]”’]*(?=\s|$)")

# Blank line: newline, optional horizontal space, newline
PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t]*\n")

# Newline followed by a bullet or numbered list item
BULLET_LINE_RE = re.compile(r"\n(?=[ \t]*(?:[-*•▪–]|\d{1,3}[.)])\s)")

# Dotted initials like "U.S" or "e.g" (the final period is the match itself)
INITIALS_RE = re.compile(r"(?:[A-Za-z]\.)+[A-Za-z]")

_OPENING_PUNCT = "\"'([“‘"


def _preceding_token(text: str, end: int) -> str:
    """Return the non-whitespace token ending at ``end``."""
    start = end
    while start > 0 and not text[start - 1].isspace():
        start -= 1
    return text[start:end].lstrip(_OPENING_PUNCT)


def _following_word_start(text: str, pos: int) -> Optional[str]:
    """Return the first letter-or-digit character after ``pos``, skipping whitespace and quotes."""
    i = pos
    n = len(text)
    while i < n and (text[i].isspace() or text[i] in _OPENING_PUNCT):
        i += 1
    return text[i] if i < n else None


def _is_guarded(text: str, match: re.Match, options: SegmenterOptions) -> bool:
    """
    Check whether a terminal-punctuation match must not split.

    Only a single period is ever guarded; "?" and "!" always split.
    """
    punct = match.group(0).rstrip("\"')]”’")
    if punct != ".":
        return False

    token = _preceding_token(text, match.start())
    if not token:
        return False
    key = token.lower()

    if key in options.honorifics:
        return True

    is_abbreviation = (
        (len(token) == 1 and token.isalpha())
        or INITIALS_RE.fullmatch(token) is not None
        or key in options.abbreviations
    )
    if not is_abbreviation:
        return False

    nxt = _following_word_start(text, match.end())
    return nxt is not None and nxt.islower()


def _boundaries(text: str, options: SegmenterOptions) -> list[int]:
    """Collect sorted, unique cut positions (exclusive sentence ends)."""
    cuts = set()

    for match in TERMINAL_RE.finditer(text):
        if not _is_guarded(text, match, options):
            cuts.add(match.end())

    for match in PARAGRAPH_BREAK_RE.finditer(text):
        cuts.add(match.start())

    if options.split_bullets:
        for match in BULLET_LINE_RE.finditer(text):
            cuts.add(match.start())

    cuts.add(len(text))
    return sorted(cuts)


def segment(plain_text: str, options: Optional[SegmenterOptions] = None) -> list[Sentence]:
    """
    Split plain text into sentences with exact offsets.

    Args:
        plain_text: The document's plain text.
        options: Abbreviation data; defaults to SegmenterOptions().

    Returns:
        Ordered, non-overlapping sentences. Empty or whitespace-only text
        yields an empty list.
    """
    if not plain_text or not plain_text.strip():
        return []

    options = options or SegmenterOptions()
    sentences: list[Sentence] = []
    piece_start = 0

    for cut in _boundaries(plain_text, options):
        if cut <= piece_start:
            continue
        start = piece_start
        end = cut
        # Trim surrounding whitespace without touching inner characters
        while start < end and plain_text[start].isspace():
            start += 1
        while end > start and plain_text[end - 1].isspace():
            end -= 1
        if end > start:
            sentences.append(Sentence(
                index=len(sentences),
                text=plain_text[start:end],
                start=start,
                end=end,
            ))
        piece_start = cut

    return sentences


def separators(plain_text: str, sentences: list[Sentence]) -> list[str]:
    """
    Return the whitespace around and between sentences.

    The result has len(sentences) + 1 entries: leading text, the gaps
    between consecutive sentences, and trailing text. Interleaving them
    with the sentence texts reconstructs plain_text exactly.
    """
    if not sentences:
        return [plain_text]

    gaps = [plain_text[:sentences[0].start]]
    for prev, nxt in zip(sentences, sentences[1:]):
        gaps.append(plain_text[prev.end:nxt.start])
    gaps.append(plain_text[sentences[-1].end:])
    return gaps


def reconstruct(plain_text: str, sentences: list[Sentence]) -> str:
    """Rebuild the text from sentences and their separators."""
    gaps = separators(plain_text, sentences)
    parts = [gaps[0]]
    for sentence, gap in zip(sentences, gaps[1:]):
        parts.append(sentence.text)
        parts.append(gap)
    return "".join(parts)
