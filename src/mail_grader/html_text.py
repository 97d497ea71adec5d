# -*- coding: utf-8 -*-
"""
Plain text from formatted content, and the visible-character walk over it.

html_to_plain_text() uses BeautifulSoup to derive a document's plain
text. visible_units() walks the raw formatted string without parsing it
into a tree, so every visible character keeps its exact offset in the
original markup.
"""

import html
import re
from typing import Iterator, NamedTuple

from bs4 import BeautifulSoup

# Elements whose content is never visible
HIDDEN_TAGS = ("script", "style", "noscript", "template", "head")

# Elements that start a new block (rendered as a paragraph break)
BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
    "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
})

_BLOCK_SENTINEL = "\x01"
_BREAK_SENTINEL = "\x00"

WHITESPACE_RE = re.compile(r"\s+")
BLOCK_BREAK_RE = re.compile(r"[ \x00\x01]*\x01[ \x00\x01]*")
LINE_BREAK_RE = re.compile(r" *\x00 *")

# A tag starts at "<" followed by a name, a closing slash, "!" or "?"
TAG_START_RE = re.compile(r"<[A-Za-z/!?]")
TAG_NAME_RE = re.compile(r"</?\s*([A-Za-z][A-Za-z0-9-]*)")
ENTITY_RE = re.compile(r"&(?:#\d+|#[xX][0-9A-Fa-f]+|[A-Za-z][A-Za-z0-9]*);")


def html_to_plain_text(formatted_content: str) -> str:
    """
    Extract plain text from HTML.

    Block elements become paragraph breaks, <br> a line break, and other
    whitespace runs collapse to one space, as a browser renders them.

    Args:
        formatted_content: HTML string (fragment or full page).

    Returns:
        Plain text with no leading or trailing whitespace.
    """
    if not formatted_content:
        return ""

    soup = BeautifulSoup(formatted_content, "lxml")
    for tag in soup.find_all(list(HIDDEN_TAGS)):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with(_BREAK_SENTINEL)
    for tag in soup.find_all(list(BLOCK_TAGS)):
        tag.insert_before(_BLOCK_SENTINEL)
        tag.insert_after(_BLOCK_SENTINEL)

    text = WHITESPACE_RE.sub(" ", soup.get_text())
    text = BLOCK_BREAK_RE.sub("\n\n", text)
    text = LINE_BREAK_RE.sub("\n", text)
    return text.strip()


class VisibleUnit(NamedTuple):
    """One visible character and the formatted range that produces it."""
    char: str
    start: int
    end: int


def _tag_end(formatted: str, pos: int) -> int:
    """Return the offset just past the tag or comment starting at pos."""
    if formatted.startswith("<!--", pos):
        close = formatted.find("-->", pos + 4)
        return len(formatted) if close == -1 else close + 3
    close = formatted.find(">", pos + 1)
    return len(formatted) if close == -1 else close + 1


def visible_units(formatted: str) -> Iterator[VisibleUnit]:
    """
    Walk formatted content one visible character at a time.

    Tags are skipped; block-level tags and <br> yield a single space unit.
    An entity yields its decoded character with the entity's full range.
    Content of script/style elements is skipped entirely.
    """
    pos = 0
    n = len(formatted)

    while pos < n:
        ch = formatted[pos]

        if ch == "<" and TAG_START_RE.match(formatted, pos):
            end = _tag_end(formatted, pos)
            name_match = TAG_NAME_RE.match(formatted, pos)
            name = name_match.group(1).lower() if name_match else ""
            closing = formatted.startswith("</", pos)

            if name in HIDDEN_TAGS and not closing:
                close = re.compile(rf"</\s*{name}\s*>", re.IGNORECASE).search(formatted, end)
                pos = n if close is None else close.end()
                continue
            if name in BLOCK_TAGS or name == "br":
                yield VisibleUnit(" ", pos, end)
            pos = end
            continue

        if ch == "&":
            entity = ENTITY_RE.match(formatted, pos)
            if entity:
                decoded = html.unescape(entity.group(0))
                for c in decoded:
                    yield VisibleUnit(c, pos, entity.end())
                pos = entity.end()
                continue

        yield VisibleUnit(ch, pos, pos + 1)
        pos += 1
