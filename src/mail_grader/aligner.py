# -*- coding: utf-8 -*-
"""
Side-by-side alignment of draft pairs against the original text.

Each pair's original text is located in the original document, strictly
after the previous match. The text between matches becomes "equal"
segments shown in both columns; a matched span becomes a "removed"
segment in the original column linked by pair id to an "added" segment
in the improved column.

Uses difflib's SequenceMatcher for the word-level diff inside a pair.
"""

import logging
import re
from difflib import SequenceMatcher
from typing import Optional, Sequence

from .models import (
    AlignmentResult,
    DiffSegment,
    DraftPair,
    IssueCategory,
    MatchedSpan,
    ProcessingIssue,
    SegmentKind,
    WordDiff,
)

logger = logging.getLogger(__name__)

# Words and the whitespace between them, both kept as tokens
TOKEN_RE = re.compile(r"\s+|\S+")


def _tokenize(text: str) -> list[str]:
    return TOKEN_RE.findall(text)


def word_diff(original: str, replacement: str) -> tuple[WordDiff, ...]:
    """
    Compute a token-level diff between two strings.

    Concatenating the equal and removed parts gives back original;
    concatenating the equal and added parts gives back replacement.
    """
    old_tokens = _tokenize(original)
    new_tokens = _tokenize(replacement)
    matcher = SequenceMatcher(None, old_tokens, new_tokens, autojunk=False)

    ops: list[WordDiff] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            ops.append(WordDiff(SegmentKind.EQUAL, "".join(old_tokens[i1:i2])))
            continue
        if tag in ("replace", "delete"):
            ops.append(WordDiff(SegmentKind.REMOVED, "".join(old_tokens[i1:i2])))
        if tag in ("replace", "insert"):
            ops.append(WordDiff(SegmentKind.ADDED, "".join(new_tokens[j1:j2])))
    return tuple(ops)


def _find(original: str, needle: str, cursor: int) -> Optional[tuple[int, int]]:
    """
    Locate needle at or after cursor.

    Tries an exact match first, then a match where any whitespace run in
    needle may stand for any whitespace run in original.
    """
    index = original.find(needle, cursor)
    if index != -1:
        return index, index + len(needle)

    words = needle.split()
    if not words:
        return None
    pattern = re.compile(r"\s+".join(re.escape(w) for w in words))
    match = pattern.search(original, cursor)
    if match:
        return match.start(), match.end()
    return None


def align(original_plain_text: str, pairs: Sequence[DraftPair]) -> AlignmentResult:
    """
    Build the two comparison columns for a set of draft pairs.

    Args:
        original_plain_text: The original document.
        pairs: Draft pairs in emission order.

    Returns:
        AlignmentResult. Pairs whose original text cannot be found after
        the previous match (or is empty) are skipped and listed in
        result.skipped. Joining the original column's equal and removed
        segments reproduces original_plain_text exactly.
    """
    result = AlignmentResult()
    cursor = 0
    equal_count = 0

    def add_equal(text: str) -> None:
        nonlocal equal_count
        segment_id = f"eq-{equal_count}"
        equal_count += 1
        result.original.append(DiffSegment(segment_id, SegmentKind.EQUAL, text, segment_id))
        result.improved.append(DiffSegment(segment_id, SegmentKind.EQUAL, text, segment_id))

    for pair in pairs:
        needle = pair.original_span_text
        location = _find(original_plain_text, needle, cursor) if needle and needle.strip() else None

        if location is None:
            logger.warning(f"Draft pair {pair.ordinal} not found after offset {cursor}, skipping")
            result.skipped.append(ProcessingIssue(
                category=IssueCategory.ALIGNMENT_MISS,
                description=f"Original text of pair {pair.ordinal} not found after offset {cursor}",
                position=cursor,
                span_text=needle,
            ))
            continue

        start, end = location
        if start > cursor:
            add_equal(original_plain_text[cursor:start])

        matched_text = original_plain_text[start:end]
        result.original.append(DiffSegment(
            f"del-{pair.ordinal}", SegmentKind.REMOVED, matched_text, pair.pair_id,
        ))
        if pair.replacement_text:
            result.improved.append(DiffSegment(
                f"ins-{pair.ordinal}", SegmentKind.ADDED, pair.replacement_text, pair.pair_id,
            ))
        result.matched.append(MatchedSpan(
            pair=pair,
            start=start,
            end=end,
            word_diff=word_diff(matched_text, pair.replacement_text),
        ))
        cursor = end

    if cursor < len(original_plain_text):
        add_equal(original_plain_text[cursor:])

    logger.info(
        f"Aligned {len(result.matched)} of {len(pairs)} draft pair(s), "
        f"{result.skipped_count} skipped"
    )
    return result
