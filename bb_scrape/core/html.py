"""Case-insensitive substring and tag-block helpers over raw HTML strings.

Blocks are offset spans into the caller's document; nothing here builds a
tree. All case folding is ASCII-only.
"""

import re
from functools import lru_cache
from typing import Iterator, NamedTuple, Optional

from .sanitize import normalize_entities, normalize_whitespace

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)

_TAG_RE = re.compile(r"<[^>]*>?")
_DIGITS_RE = re.compile(r"[0-9]*")
_DIGIT_RUN_RE = re.compile(r"[0-9]+")
_CLASS_ATTR_RE = re.compile(
    r"""\bclass\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""",
    re.IGNORECASE | re.ASCII,
)
# One alternative per VisChars rule: quote-aware tag, entity, whitespace run
_VISIBLE_RE = re.compile(
    r"""<(?:[^'">]|'[^']*(?:'|\Z)|"[^"]*(?:"|\Z))*(?:>|\Z)"""
    r"""|&[^;]*(?:;|\Z)"""
    r"""|[ \t\r\n]+"""
)


class TagBlock(NamedTuple):
    """Span from the start of an opening tag to the end of its closing tag."""

    start: int
    open_end: int
    end: int

    def text(self, doc: str) -> str:
        return doc[self.start : self.end]

    def opener(self, doc: str) -> str:
        return doc[self.start : self.open_end]

    def inner(self, doc: str) -> str:
        return inner_after_open_tag(self.text(doc))


def to_lower(s: str) -> str:
    return s.translate(_ASCII_LOWER)


@lru_cache(maxsize=256)
def _ci_pattern(pattern: str) -> "re.Pattern[str]":
    return re.compile(re.escape(pattern), re.IGNORECASE | re.ASCII)


def find_ci(doc: str, pattern: str, start: int = 0) -> int:
    """Case-insensitive ``str.find`` that does not copy ``doc``."""
    m = _ci_pattern(pattern).search(doc, start)
    return m.start() if m else -1


def slice_between(doc: str, open_pattern: str, close_pattern: str) -> Optional[str]:
    """Text strictly between the tag opened by ``open_pattern`` and ``close_pattern``.

    Only the first occurrence is considered.
    """
    o = find_ci(doc, open_pattern)
    if o < 0:
        return None
    gt = doc.find(">", o)
    if gt < 0:
        return None
    after = gt + 1
    c = find_ci(doc, close_pattern, after)
    if c < 0:
        return None
    return doc[after:c]


def next_tag_block(
    doc: str, open_tag: str, close_tag: str, from_offset: int = 0
) -> Optional[TagBlock]:
    """Next ``open_tag ... close_tag`` span starting at or after ``from_offset``.

    Call again with the previous block's ``end`` to walk every block once.
    """
    if from_offset > len(doc):
        return None
    start = find_ci(doc, open_tag, from_offset)
    if start < 0:
        return None
    gt = doc.find(">", start)
    if gt < 0:
        return None
    open_end = gt + 1
    close = find_ci(doc, close_tag, open_end)
    if close < 0:
        return None
    return TagBlock(start, open_end, close + len(close_tag))


def iter_tag_blocks(
    doc: str, open_tag: str, close_tag: str, from_offset: int = 0
) -> Iterator[TagBlock]:
    pos = from_offset
    while True:
        block = next_tag_block(doc, open_tag, close_tag, pos)
        if block is None:
            return
        yield block
        pos = block.end


def inner_after_open_tag(block: str) -> str:
    """Substring after the first ``>`` and before the last ``<``."""
    oe = block.find(">")
    cs = block.rfind("<")
    if oe >= 0 and cs > oe:
        return block[oe + 1 : cs]
    return ""


def strip_tags(text: str) -> str:
    """Drop every ``<...>`` span (no quote handling) and normalize whitespace."""
    return normalize_whitespace(_TAG_RE.sub("", text).replace(">", ""))


def cell_text(block: str) -> str:
    """Inner text of a table cell block, entities normalized and tags stripped."""
    return strip_tags(normalize_entities(inner_after_open_tag(block)))


def visible_text(line: str) -> str:
    """Whole-string equivalent of ``"".join(VisChars(line))``."""
    return _VISIBLE_RE.sub(lambda m: "" if m.group(0)[0] == "<" else " ", line)


def has_class(opener: str, name: str) -> bool:
    """True if the tag opener's class attribute lists ``name`` (any quoting)."""
    wanted = to_lower(name)
    for m in _CLASS_ATTR_RE.finditer(opener):
        value = m.group(1) or m.group(2) or m.group(3) or ""
        if wanted in to_lower(value).split():
            return True
    return False


def read_digits(text: str, pos: int = 0) -> str:
    """ASCII digit run starting exactly at ``pos`` (may be empty)."""
    m = _DIGITS_RE.match(text, pos)
    return m.group(0) if m else ""


def first_digit_run(text: str, pos: int = 0) -> str:
    """Skip to the first ASCII digit at or after ``pos`` and read its run."""
    m = _DIGIT_RUN_RE.search(text, pos)
    return m.group(0) if m else ""


def href_value(opener: str) -> str:
    """Value of the ``href`` attribute of a tag opener, quotes optional."""
    hp = find_ci(opener, "href=")
    if hp < 0:
        return ""
    val = opener[hp + len("href=") :].lstrip()
    if val[:1] in ("'", '"'):
        quote = val[0]
        end = val.find(quote, 1)
        return val[1:] if end < 0 else val[1:end]
    m = re.match(r"[^\s>]*", val)
    return m.group(0) if m else ""


def query_digits(href: str, marker: str) -> str:
    """Digit run following ``marker`` (e.g. ``team.php?i=``) inside an href."""
    idx = find_ci(href, marker)
    if idx < 0:
        return ""
    return read_digits(href, idx + len(marker))
