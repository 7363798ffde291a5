from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from bb_scrape.models.team import Team

# (team, remainder) on a prefix hit
PrefixSplit = Tuple[str, str]


def _fold_first(s: str) -> str:
    c = s[0]
    return chr(ord(c) + 32) if "A" <= c <= "Z" else c


class TeamLookup(ABC):
    """Longest-prefix team resolution for strings like ``"StormriderBob Smith"``.

    The league fuses the team name and the player name with no separator,
    so the longest known team name that literally prefixes the string wins.
    Matching is case-sensitive.
    """

    @abstractmethod
    def split_prefix(self, s: str) -> Optional[PrefixSplit]:
        """Returns ``(team, remainder.lstrip())`` or None when no team prefixes ``s``."""
        pass

    @classmethod
    def from_teams(cls, teams: Iterable[Team]) -> "TeamLookup":
        return cls([t.name for t in teams])


class LinearTeamLookup(TeamLookup):
    """Scans every team name; kept as the baseline the index is checked against."""

    def __init__(self, names: Iterable[str]):
        self.names: List[str] = [n for n in names if n]

    def split_prefix(self, s: str) -> Optional[PrefixSplit]:
        best: Optional[str] = None
        for name in self.names:
            if s.startswith(name) and (best is None or len(name) > len(best)):
                best = name
        if best is None:
            return None
        return best, s[len(best) :].lstrip()


class TeamIndex(TeamLookup):
    """Team names bucketed by ASCII-lowercased first character, longest first.

    Built once per document and read-only afterwards, so it can be shared
    between tasks.
    """

    def __init__(self, names: Iterable[str]):
        self.buckets: Dict[str, List[str]] = {}
        for name in names:
            if not name:
                continue
            self.buckets.setdefault(_fold_first(name), []).append(name)
        for bucket in self.buckets.values():
            # stable, so equal lengths keep directory order
            bucket.sort(key=len, reverse=True)
        logger.debug(
            f"TeamIndex built with {sum(len(b) for b in self.buckets.values())} names in {len(self.buckets)} buckets"
        )

    def split_prefix(self, s: str) -> Optional[PrefixSplit]:
        if not s:
            return None
        for name in self.buckets.get(_fold_first(s), ()):
            if s.startswith(name):
                return name, s[len(name) :].lstrip()
        return None


def split_team_and_name(
    segment: str, lookup: TeamLookup, strict: bool
) -> Optional[PrefixSplit]:
    """Splits a fused ``"{Team}{Player}"`` segment into ``(team, name)``.

    Falls back to a heuristic when no known team prefixes the segment: the
    last two whitespace tokens are the player name and everything before is
    the team. With fewer than two tokens the strict (victim) side rejects,
    the lenient (offender) side returns ``(segment, "")``.
    """
    hit = lookup.split_prefix(segment)
    if hit is not None:
        team, rest = hit
        return team, rest.strip()

    tokens = segment.split()
    if len(tokens) < 2:
        if strict:
            return None
        return segment, ""
    return " ".join(tokens[:-2]), " ".join(tokens[-2:])
