# -*- coding: utf-8 -*-
"""
Draft pairs from rewrite output.

The rewrite pass returns pairs in the form

    <old_draft>original text</old_draft><optimized_draft>new text</optimized_draft>

parse_draft_pairs() reads them with a plain left-to-right scan (the tags
never nest). rewrite_to_pairs() produces the same pairs from a plain
full-text rewrite by diffing the two drafts sentence by sentence.
"""

import logging
from dataclasses import dataclass, field
from difflib import SequenceMatcher

from .models import DraftPair, IssueCategory, ProcessingIssue
from .segmenter import segment

logger = logging.getLogger(__name__)

OLD_OPEN = "<old_draft>"
OLD_CLOSE = "</old_draft>"
NEW_OPEN = "<optimized_draft>"
NEW_CLOSE = "</optimized_draft>"


@dataclass
class DraftParseResult:
    """Pairs in emission order plus any malformed markup found."""
    pairs: list[DraftPair] = field(default_factory=list)
    issues: list[ProcessingIssue] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "pairs": [
                {
                    "ordinal": p.ordinal,
                    "pairId": p.pair_id,
                    "original": p.original_span_text,
                    "replacement": p.replacement_text,
                }
                for p in self.pairs
            ],
            "issues": [i.to_dict() for i in self.issues],
        }


def _malformed(description: str, position: int, span_text: str = "") -> ProcessingIssue:
    return ProcessingIssue(
        category=IssueCategory.MALFORMED_MARKER,
        description=description,
        position=position,
        span_text=span_text[:80] or None,
    )


def parse_draft_pairs(markup: str) -> DraftParseResult:
    """
    Parse <old_draft>/<optimized_draft> pairs from rewrite output.

    Text outside the tags is ignored. Both sides are stripped of
    surrounding whitespace. An old draft with no following optimized
    draft, or either tag left unterminated, is reported as
    malformed_marker and skipped.

    Args:
        markup: Raw rewrite output.

    Returns:
        DraftParseResult with ordinals assigned in emission order.
    """
    result = DraftParseResult()
    pos = 0

    while True:
        old_start = markup.find(OLD_OPEN, pos)
        if old_start == -1:
            stray = markup.find(NEW_OPEN, pos)
            if stray != -1:
                result.issues.append(_malformed(
                    "Optimized draft without a preceding old draft", stray,
                    markup[stray:],
                ))
            break

        stray = markup.find(NEW_OPEN, pos, old_start)
        if stray != -1:
            result.issues.append(_malformed(
                "Optimized draft without a preceding old draft", stray,
                markup[stray:old_start],
            ))

        body_start = old_start + len(OLD_OPEN)
        old_end = markup.find(OLD_CLOSE, body_start)
        if old_end == -1:
            result.issues.append(_malformed("Unterminated <old_draft>", old_start, markup[body_start:]))
            break

        old_text = markup[body_start:old_end]
        after_old = old_end + len(OLD_CLOSE)
        if OLD_OPEN in old_text:
            result.issues.append(_malformed("Nested <old_draft>", old_start, old_text))
            pos = after_old
            continue

        new_start = markup.find(NEW_OPEN, after_old)
        next_old = markup.find(OLD_OPEN, after_old)
        if new_start == -1 or (next_old != -1 and next_old < new_start):
            result.issues.append(_malformed("Old draft has no optimized draft", old_start, old_text))
            pos = after_old
            continue

        new_body = new_start + len(NEW_OPEN)
        new_end = markup.find(NEW_CLOSE, new_body)
        if new_end == -1:
            result.issues.append(_malformed("Unterminated <optimized_draft>", new_start, markup[new_body:]))
            break

        result.pairs.append(DraftPair(
            original_span_text=old_text.strip(),
            replacement_text=markup[new_body:new_end].strip(),
            ordinal=len(result.pairs),
        ))
        pos = new_end + len(NEW_CLOSE)

    if result.issues:
        logger.warning(f"Draft markup: {len(result.pairs)} pair(s), {len(result.issues)} malformed")
    else:
        logger.info(f"Draft markup: {len(result.pairs)} pair(s)")
    return result


def rewrite_to_pairs(original: str, rewritten: str) -> list[DraftPair]:
    """
    Turn a full-text rewrite into draft pairs.

    Sentences of both drafts are compared in order. Each changed run of
    original sentences becomes one pair. A deleted run pairs with an empty
    replacement. An inserted run is attached to the neighbouring original
    sentence so it still has an anchor in the original.

    When the changed text also occurs earlier in the unchanged stretch
    before it, the pair is widened backwards over that stretch, one
    sentence at a time, until its first occurrence after the previous
    pair is the right one.

    Every original_span_text is an exact substring of original, in order.
    """
    old_sentences = segment(original)
    new_sentences = segment(rewritten)
    if not old_sentences:
        return []

    old_texts = [s.text for s in old_sentences]
    new_texts = [s.text for s in new_sentences]

    def old_block(i1: int, i2: int) -> str:
        return original[old_sentences[i1].start:old_sentences[i2 - 1].end]

    def new_block(j1: int, j2: int) -> str:
        return rewritten[new_sentences[j1].start:new_sentences[j2 - 1].end]

    def widen(first: int, stop: int, cursor: int) -> int:
        # Earliest sentence to start from so old_block(first, stop) is found
        # at its own offset when searching from cursor
        while first > 0 and old_sentences[first - 1].start >= cursor:
            if original.find(old_block(first, stop), cursor) == old_sentences[first].start:
                break
            first -= 1
        return first

    pairs: list[DraftPair] = []
    cursor = 0
    opcodes = SequenceMatcher(None, old_texts, new_texts, autojunk=False).get_opcodes()

    for index, (tag, i1, i2, j1, j2) in enumerate(opcodes):
        if tag == "equal":
            continue
        if tag in ("replace", "delete"):
            first = widen(i1, i2, cursor)
            prefix = original[old_sentences[first].start:old_sentences[i1].start]
            old = old_block(first, i2)
            new = prefix + new_block(j1, j2) if tag == "replace" else prefix.rstrip()
            cursor = old_sentences[i2 - 1].end
        elif i1 > 0:
            # Insertion after an unchanged sentence
            old = old_block(widen(i1 - 1, i1, cursor), i1)
            new = f"{old} {new_block(j1, j2)}"
            cursor = old_sentences[i1 - 1].end
        else:
            # Insertion before the first sentence
            next_op = opcodes[index + 1] if index + 1 < len(opcodes) else None
            if next_op is None or next_op[0] != "equal":
                continue
            old = old_texts[0]
            new = f"{new_block(j1, j2)} {old}"
            cursor = old_sentences[0].end
        pairs.append(DraftPair(original_span_text=old, replacement_text=new, ordinal=len(pairs)))

    logger.info(f"Rewrite mapped to {len(pairs)} pair(s) from {len(opcodes)} diff block(s)")
    return pairs
