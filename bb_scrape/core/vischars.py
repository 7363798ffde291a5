"""Visible-text character iterator for a single line of HTML.

Tags (``<...>``) are skipped, honouring quoted attribute values. Entities
(``&...;``) become one space. Runs of ASCII whitespace collapse to one space.
"""

from typing import Iterator

WHITESPACE = " \t\r\n"


class VisChars:
    """Forward-only iterator over the visible characters of ``line``.

    Holds nothing but an index into the borrowed string; each call to
    ``next()`` returns a one-character string.
    """

    __slots__ = ("_s", "_i", "_n")

    def __init__(self, line: str):
        self._s = line
        self._i = 0
        self._n = len(line)

    def __iter__(self) -> Iterator[str]:
        return self

    def _skip_tag(self) -> None:
        # current char is '<'
        s, n = self._s, self._n
        i = self._i + 1
        in_single = False
        in_double = False
        while i < n:
            c = s[i]
            if c == "'" and not in_double:
                in_single = not in_single
            elif c == '"' and not in_single:
                in_double = not in_double
            elif c == ">" and not in_single and not in_double:
                i += 1
                break
            i += 1
        self._i = i

    def _skip_entity(self) -> None:
        # current char is '&'
        end = self._s.find(";", self._i + 1)
        self._i = self._n if end < 0 else end + 1

    def __next__(self) -> str:
        s, n = self._s, self._n
        while self._i < n:
            c = s[self._i]
            if c == "<":
                self._skip_tag()
                continue
            if c == "&":
                self._skip_entity()
                return " "
            if c in WHITESPACE:
                i = self._i + 1
                while i < n and s[i] in WHITESPACE:
                    i += 1
                self._i = i
                return " "
            self._i += 1
            return c
        raise StopIteration
