"""Injury log parsing.

The injury page is one long log with an event per ``<br>``-separated chunk::

    W7 StormridersBob Smith SR 12 DUR 3 Broken Ribs by Iron WallJoe Bloggs BRU 40 Drops from 12 to 10

Three parsers share one contract and must return identical rows:

* ``parse_line_reference``: ``find`` calls over the whole visible text.
* ``parse_line_fast_base``: a single streaming pass over ``VisChars`` with a
  linear team scan.
* ``parse_line_fast_idx``: the same streaming pass with a ``TeamIndex``.

A chunk that does not fit the grammar returns None. Only week, the victim
segment and duration are required; everything else degrades to ``""``.
"""

import re
from typing import List, NamedTuple, Optional, Sequence, Union

from loguru import logger

from bb_scrape.core.html import (
    find_ci,
    first_digit_run,
    read_digits,
    slice_between,
    to_lower,
    visible_text,
)
from bb_scrape.core.matcher import StreamMatcher
from bb_scrape.core.sanitize import normalize_entities
from bb_scrape.core.vischars import VisChars
from bb_scrape.models.bundle import OutputBundle, Row
from bb_scrape.models.pages import INJURY_HEADERS
from bb_scrape.models.team import Team
from bb_scrape.normalization.team_index import (
    LinearTeamLookup,
    TeamIndex,
    TeamLookup,
    split_team_and_name,
)

CHUNK_SEPARATOR = "<br>"
CHUNK_MARKER = " DUR "
BOUNTY_FLAG = "BOUNTY COLLECTED"

DUR_MARKER = " DUR "
BY_MARKER = " by "
BRU_MARKER = " BRU "
DROPS_MARKER = "drops from "
TO_MARKER = " to "
BOUNTY_MARKER = "bounty collected"

_DIGITS = "0123456789"
_SEASON_RE = re.compile(r"season ([0-9]+)", re.IGNORECASE | re.ASCII)


class _RawEvent(NamedTuple):
    """Unshaped fields as cut from the visible text."""

    week: str
    victim_segment: str
    dur: str
    type_text: str
    offender_segment: str
    bru: str
    sr0: str
    sr1: str
    saw_drops: bool
    saw_bounty: bool


def _shape_row(season: str, raw: _RawEvent, lookup: TeamLookup) -> Optional[Row]:
    """Turns raw fields into the 12-column row, or None if a required field is missing."""
    victim_segment = raw.victim_segment.strip()
    if not victim_segment or not raw.dur:
        return None
    victim = split_team_and_name(victim_segment, lookup, strict=True)
    if victim is None:
        return None
    victim_team, victim_name = victim

    # KILLED lines carry the SR inside the victim segment
    sr_from_name = ""
    ix = victim_name.rfind(" SR ")
    if ix >= 0:
        digits = read_digits(victim_name[ix + 4 :].strip())
        if digits:
            sr_from_name = digits
            victim_name = victim_name[:ix].strip()

    type_text = raw.type_text.strip()
    if type_text.endswith(" by"):
        type_text = type_text[:-3]

    offender_segment = raw.offender_segment.strip()
    if to_lower(offender_segment[:3]) == "by ":
        offender_segment = offender_segment[3:].strip()
    offender_team, offender_name = split_team_and_name(
        offender_segment, lookup, strict=False
    )

    if not raw.saw_drops and "kill" in to_lower(type_text):
        type_text = "KILLED"

    return [
        season,
        raw.week,
        victim_team,
        victim_name,
        raw.dur,
        raw.sr0 or sr_from_name,
        raw.sr1,
        type_text,
        offender_team,
        offender_name,
        raw.bru,
        BOUNTY_FLAG if raw.saw_bounty else "",
    ]


def parse_line_reference(line: str, season: str, teams: Sequence[Team]) -> Optional[Row]:
    """Whole-string parser, kept as the readable baseline for the streaming ones."""
    text = visible_text(line)

    w = text.find("W")
    if w < 0:
        return None
    week = read_digits(text, w + 1)
    if not week:
        return None
    pos = w + 1 + len(week)

    d = text.find(DUR_MARKER, pos)
    if d < 0:
        return None
    victim_segment = text[pos:d]
    pos = d + len(DUR_MARKER)
    dur = read_digits(text, pos)
    pos += len(dur)

    type_text = offender_segment = bru = ""
    b = find_ci(text, BY_MARKER, pos)
    if b < 0:
        type_text, pos = text[pos:], len(text)
    else:
        type_text, pos = text[pos:b], b + len(BY_MARKER)
        k = text.find(BRU_MARKER, pos)
        if k < 0:
            offender_segment, pos = text[pos:], len(text)
        else:
            offender_segment, pos = text[pos:k], k + len(BRU_MARKER)
            bru = read_digits(text, pos)
            pos += len(bru)

    rest = text[pos:]
    sr0 = sr1 = ""
    drops = find_ci(rest, DROPS_MARKER)
    if drops >= 0:
        p = drops + len(DROPS_MARKER)
        sr0 = read_digits(rest, p)
        t = find_ci(rest, TO_MARKER, p + len(sr0))
        if t >= 0:
            sr1 = read_digits(rest, t + len(TO_MARKER))

    raw = _RawEvent(
        week=week,
        victim_segment=victim_segment,
        dur=dur,
        type_text=type_text,
        offender_segment=offender_segment,
        bru=bru,
        sr0=sr0,
        sr1=sr1,
        saw_drops=drops >= 0,
        saw_bounty=find_ci(rest, BOUNTY_MARKER) >= 0,
    )
    return _shape_row(season, raw, LinearTeamLookup.from_teams(teams))


class _Cursor:
    """``VisChars`` with room for one pushed-back character."""

    __slots__ = ("_chars", "_held")

    def __init__(self, line: str):
        self._chars = VisChars(line)
        self._held: Optional[str] = None

    def next(self) -> Optional[str]:
        if self._held is not None:
            ch, self._held = self._held, None
            return ch
        return next(self._chars, None)

    def read_digits(self) -> str:
        digits: List[str] = []
        while True:
            ch = self.next()
            if ch is None:
                break
            if ch not in _DIGITS:
                self._held = ch
                break
            digits.append(ch)
        return "".join(digits)

    def read_until(self, matcher: StreamMatcher):
        """Text before the matcher's pattern, and whether the pattern was seen."""
        buf: List[str] = []
        while True:
            ch = self.next()
            if ch is None:
                return "".join(buf), False
            if matcher.feed(ch):
                # the pattern's other characters were already buffered
                keep = len(buf) - (len(matcher.pattern) - 1)
                return "".join(buf[:keep]), True
            buf.append(ch)


def parse_line_streaming(line: str, season: str, lookup: TeamLookup) -> Optional[Row]:
    """Single forward pass over the visible characters of ``line``."""
    cur = _Cursor(line)

    while True:
        ch = cur.next()
        if ch is None:
            return None
        if ch == "W":
            break
    week = cur.read_digits()
    if not week:
        return None

    victim_segment, found = cur.read_until(StreamMatcher(DUR_MARKER))
    if not found:
        return None
    dur = cur.read_digits()
    if not dur:
        return None

    offender_segment = bru = sr0 = sr1 = ""
    saw_bounty = False
    phase = 0  # 0 drops, 1 sr0 digits, 2 " to ", 3 sr1 digits, 4 done
    type_text, found = cur.read_until(StreamMatcher(BY_MARKER, fold=True))
    if found:
        offender_segment, found = cur.read_until(StreamMatcher(BRU_MARKER))
        if found:
            bru = cur.read_digits()

            m_drops = StreamMatcher(DROPS_MARKER, fold=True)
            m_to = StreamMatcher(TO_MARKER, fold=True)
            m_bounty = StreamMatcher(BOUNTY_MARKER, fold=True)
            sr0_digits: List[str] = []
            sr1_digits: List[str] = []
            while True:
                ch = cur.next()
                if ch is None:
                    break
                if m_bounty.feed(ch):
                    saw_bounty = True
                if phase == 0:
                    if m_drops.feed(ch):
                        phase = 1
                elif phase == 1:
                    if ch in _DIGITS:
                        sr0_digits.append(ch)
                    else:
                        phase = 2
                        m_to.feed(ch)
                elif phase == 2:
                    if m_to.feed(ch):
                        phase = 3
                elif phase == 3:
                    if ch in _DIGITS:
                        sr1_digits.append(ch)
                    else:
                        phase = 4
            sr0 = "".join(sr0_digits)
            sr1 = "".join(sr1_digits)

    raw = _RawEvent(
        week=week,
        victim_segment=victim_segment,
        dur=dur,
        type_text=type_text,
        offender_segment=offender_segment,
        bru=bru,
        sr0=sr0,
        sr1=sr1,
        saw_drops=phase > 0,
        saw_bounty=saw_bounty,
    )
    return _shape_row(season, raw, lookup)


def parse_line_fast_base(line: str, season: str, teams: Sequence[Team]) -> Optional[Row]:
    return parse_line_streaming(line, season, LinearTeamLookup.from_teams(teams))


def parse_line_fast_idx(
    line: str, season: str, teams: Union[Sequence[Team], TeamIndex]
) -> Optional[Row]:
    """Streaming parser over a ``TeamIndex``; a plain team list is indexed first.

    Callers parsing many lines should build the index once and pass it in.
    """
    index = teams if isinstance(teams, TeamIndex) else TeamIndex.from_teams(teams)
    return parse_line_streaming(line, season, index)


def _event_chunks(doc: str):
    for i, chunk in enumerate(doc.split(CHUNK_SEPARATOR)):
        if CHUNK_MARKER in chunk:
            yield i, chunk


def parse_doc_reference(doc: str, season: str, teams: Sequence[Team]) -> List[Row]:
    rows: List[Row] = []
    for _, chunk in _event_chunks(doc):
        row = parse_line_reference(chunk, season, teams)
        if row is not None:
            rows.append(row)
    return rows


def parse_doc_fast_base(doc: str, season: str, teams: Sequence[Team]) -> List[Row]:
    lookup = LinearTeamLookup.from_teams(teams)
    rows: List[Row] = []
    for _, chunk in _event_chunks(doc):
        row = parse_line_streaming(chunk, season, lookup)
        if row is not None:
            rows.append(row)
    return rows


def parse_doc_fast_idx(doc: str, season: str, teams: Sequence[Team]) -> List[Row]:
    index = TeamIndex.from_teams(teams)
    rows: List[Row] = []
    for i, chunk in _event_chunks(doc):
        logger.debug(f"Injuries: consider chunk #{i}: {chunk.strip()[:120]}...")
        row = parse_line_fast_idx(chunk, season, index)
        if row is None:
            logger.debug(f"Injuries: parse failed on chunk #{i}")
            continue
        rows.append(row)
    return rows


def detect_injury_season(doc: str) -> str:
    """Season number from the title, else from the first ``season N`` in the page."""
    title = slice_between(doc, "<title", "</title>")
    if title is not None:
        clean = normalize_entities(title)
        idx = find_ci(clean, "season")
        if idx >= 0:
            season = first_digit_run(clean, idx + len("season"))
            if season:
                return season
    m = _SEASON_RE.search(doc)
    return m.group(1) if m else ""


def extract_injuries(
    doc: str, teams: Sequence[Team], season_fallback: str = ""
) -> OutputBundle:
    """Parses the whole injury page into an ``OutputBundle``."""
    season = detect_injury_season(doc) or season_fallback
    if not season:
        logger.warning("Injuries: no season found in page and no fallback supplied")
    rows = parse_doc_fast_idx(doc, season, teams)
    logger.info(f"Injuries: parsed {len(rows)} event rows (season '{season}')")
    return OutputBundle(headers=list(INJURY_HEADERS), rows=rows)
