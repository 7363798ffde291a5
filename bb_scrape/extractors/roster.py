import re
from typing import List, Tuple

from loguru import logger

from bb_scrape.core.html import (
    cell_text,
    has_class,
    iter_tag_blocks,
    next_tag_block,
    slice_between,
    to_lower,
)
from bb_scrape.core.sanitize import (
    letters_only_trim,
    normalize_whitespace,
    strip_bracket_tags,
    strip_record_suffix,
)
from bb_scrape.extractors.errors import RosterTableNotFound
from bb_scrape.models.bundle import OutputBundle, Row
from bb_scrape.models.pages import ROSTER_FIXED_HEADERS

ROSTER_TABLE_OPEN = "<table class=teamroster"
PLAYER_ROW_CLASSES = ("playerrow", "playerrow1")
TEAM_NAME_CUTS = (" Team owner", " | ")

_NEXT_TH_RE = re.compile(r"\s*<th", re.IGNORECASE)


def is_player_row(opener: str) -> bool:
    return any(has_class(opener, cls) for cls in PLAYER_ROW_CLASSES)


def split_first_cell(fused: str) -> Tuple[str, str, str]:
    """Splits ``"Name #27 Common Drakon"`` into ``("Name", "#27", "Common Drakon")``."""
    hidx = fused.find("#")
    if hidx < 0:
        return normalize_whitespace(fused), "", ""
    name = fused[:hidx].strip()
    number, _, race = fused[hidx:].strip().partition(" ")
    return normalize_whitespace(name), number, normalize_whitespace(race)


def read_site_headers(table: str) -> List[str]:
    """Reads the run of consecutive ``<th>`` cells; stops at the first non-``<th>``."""
    headers: List[str] = []
    pos = 0
    while True:
        block = next_tag_block(table, "<th", "</th>", pos)
        if block is None:
            break
        headers.append(cell_text(block.text(table)))
        pos = block.end
        if not _NEXT_TH_RE.match(table, pos):
            break
    return headers


def extract_team_name(table: str, team_id: int) -> str:
    """Team display name from the first cell of the roster table's first row."""
    name = ""
    tr = next_tag_block(table, "<tr", "</tr>")
    if tr is not None:
        row = tr.text(table)
        td = next_tag_block(row, "<td", "</td>")
        if td is not None:
            text = cell_text(td.text(row))
            for cut in TEAM_NAME_CUTS:
                idx = text.find(cut)
                if idx >= 0:
                    text = text[:idx]
                    break
            name = letters_only_trim(strip_record_suffix(text))
    if not name:
        logger.warning(f"Team {team_id}: no team name in roster table, using placeholder")
        name = f"Team {team_id}"
    return name


def build_headers(site_headers: List[str]) -> List[str]:
    tail = site_headers
    if site_headers and "name" in to_lower(site_headers[0]):
        tail = site_headers[1:]
    return list(ROSTER_FIXED_HEADERS) + tail


def extract_roster(doc: str, team_id: int, keep_hash: bool = True) -> OutputBundle:
    """Extracts one team page's roster.

    Args:
        doc: Raw HTML of ``team.php?i=<team_id>``.
        team_id: Used for the placeholder name and error reporting.
        keep_hash: Keep the leading ``#`` on the number column.

    Returns:
        OutputBundle with ``Name, Number, Race, Team`` followed by the site's
        own columns.

    Raises:
        RosterTableNotFound: If the page has no roster table.
    """
    table = slice_between(doc, ROSTER_TABLE_OPEN, "</table>")
    if table is None:
        raise RosterTableNotFound(team_id)

    team_name = extract_team_name(table, team_id)
    headers = build_headers(read_site_headers(table))

    rows: List[Row] = []
    for tr in iter_tag_blocks(table, "<tr", "</tr>"):
        if not is_player_row(tr.opener(table)):
            continue
        row_html = tr.text(table)
        cells = [cell_text(td.text(row_html)) for td in iter_tag_blocks(row_html, "<td", "</td>")]
        if not cells:
            continue
        name, number, race = split_first_cell(strip_bracket_tags(cells[0]))
        if not keep_hash and number.startswith("#"):
            number = number[1:]
        rows.append([name, number, race, team_name] + cells[1:])

    logger.debug(f"Team {team_id} ({team_name}): {len(rows)} player rows")
    return OutputBundle(headers=headers, rows=rows)
