import re

_WS_RE = re.compile(r"\s+")
_BRACKET_RE = re.compile(r"\[[^\]]*\]?")
_RECORD_RE = re.compile(r"^[0-9\-\s]*$", re.ASCII)


def normalize_entities(text: str) -> str:
    """Decodes ``&nbsp;`` and ``&amp;`` only; every other entity is left as-is."""
    return text.replace("&nbsp;", " ").replace("&amp;", "&")


def normalize_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def strip_bracket_tags(text: str) -> str:
    """Removes ``[...]`` annotations such as ``[CAPTAIN]``. No nesting."""
    return _BRACKET_RE.sub("", text).replace("]", "").strip()


def letters_only_trim(text: str) -> str:
    """Cuts ``text`` at the first character that is neither a letter nor a space.

    "Failurewood Hills (6 - 0 - 2)" -> "Failurewood Hills"
    """
    s = normalize_whitespace(text)
    for i, ch in enumerate(s):
        if not (ch.isalpha() or ch == " "):
            return s[:i].rstrip(" ")
    return s


def strip_record_suffix(text: str) -> str:
    """Drops a trailing win-loss record like ``(6 - 0 - 2)``.

    Only parentheses holding digits, hyphens and spaces (at least one of
    each of the first two) count as a record.
    """
    t = text.strip()
    if not t.endswith(")"):
        return t
    open_ix = t.rfind("(")
    if open_ix <= 0:
        return t
    inner = t[open_ix + 1 : -1]
    if any(c.isdigit() for c in inner) and "-" in inner and _RECORD_RE.match(inner):
        return t[:open_ix].strip()
    return t
