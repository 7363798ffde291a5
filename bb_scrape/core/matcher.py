class StreamMatcher:
    """Incremental literal matcher fed one character at a time.

    ``feed`` returns True on the character that completes ``pattern``, then
    starts over. On a mismatch the cursor restarts at 1 if the character
    equals the pattern's first character, else at 0. That restart is exact
    for the markers used by the injury parser, none of which has a proper
    border longer than one character.

    With ``fold=True`` both sides are compared ASCII-lowercased.
    """

    __slots__ = ("pattern", "fold", "_pat", "_pos")

    def __init__(self, pattern: str, fold: bool = False):
        if not pattern:
            raise ValueError("StreamMatcher needs a non-empty pattern")
        self.pattern = pattern
        self.fold = fold
        self._pat = _ascii_lower(pattern) if fold else pattern
        self._pos = 0

    def reset(self) -> None:
        self._pos = 0

    def feed(self, ch: str) -> bool:
        if self.fold and "A" <= ch <= "Z":
            ch = chr(ord(ch) + 32)
        pat = self._pat
        if ch == pat[self._pos]:
            self._pos += 1
            if self._pos == len(pat):
                self._pos = 0
                return True
            return False
        self._pos = 1 if ch == pat[0] else 0
        if self._pos == len(pat):
            self._pos = 0
            return True
        return False


def _ascii_lower(s: str) -> str:
    return "".join(chr(ord(c) + 32) if "A" <= c <= "Z" else c for c in s)
