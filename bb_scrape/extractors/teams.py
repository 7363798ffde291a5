from typing import Dict, Iterator, List, Sequence, Tuple

from loguru import logger
from pydantic import ValidationError

from bb_scrape.core.html import (
    cell_text,
    has_class,
    href_value,
    iter_tag_blocks,
    next_tag_block,
    query_digits,
)
from bb_scrape.models.bundle import OutputBundle, Row
from bb_scrape.models.pages import TEAMS_HEADERS
from bb_scrape.models.team import MAX_TEAMS, Team

TEAM_LINK_MARKER = "team.php?i="


def _team_anchors(html: str) -> Iterator[Tuple[int, str]]:
    """(id, name) for every ``<a href=...team.php?i=N>`` in ``html``."""
    for anchor in iter_tag_blocks(html, "<a", "</a>"):
        digits = query_digits(href_value(anchor.opener(html)), TEAM_LINK_MARKER)
        if not digits:
            continue
        name = cell_text(anchor.text(html))
        if name:
            yield int(digits), name


def _from_league_table(doc: str) -> List[Tuple[int, str]]:
    table_block = next_tag_block(doc, "<table", "</table>")
    if table_block is None:
        return []
    table = table_block.text(doc)
    found: List[Tuple[int, str]] = []
    for td in iter_tag_blocks(table, "<td", "</td>"):
        if not has_class(td.opener(table), "namecheck"):
            continue
        first = next(_team_anchors(td.text(table)), None)
        if first is not None:
            found.append(first)
    return found


def _from_mega_menu(doc: str) -> List[Tuple[int, str]]:
    found: List[Tuple[int, str]] = []
    for ul in iter_tag_blocks(doc, "<ul", "</ul>"):
        if has_class(ul.opener(doc), "mega-links"):
            found.extend(_team_anchors(ul.text(doc)))
    return found


def extract_teams(doc: str) -> OutputBundle:
    """Parses the league index page into ``Id, Team`` rows.

    The league table has the full team names; the mega-menu is only used
    when the table yields nothing.
    """
    pairs = _from_league_table(doc)
    if not pairs:
        logger.warning("Teams: league table had no team links, falling back to mega-menu")
        pairs = _from_mega_menu(doc)

    by_id: Dict[int, str] = {}
    for team_id, name in sorted(pairs, key=lambda p: p[0]):
        if team_id >= MAX_TEAMS:
            logger.debug(f"Teams: ignoring out-of-range id {team_id} ({name})")
            continue
        by_id.setdefault(team_id, name)

    rows: List[Row] = [[str(team_id), name] for team_id, name in by_id.items()]
    logger.info(f"Teams: extracted {len(rows)} teams")
    return OutputBundle(headers=list(TEAMS_HEADERS), rows=rows)


def teams_from_bundle(bundle: OutputBundle) -> List[Team]:
    teams: List[Team] = []
    for row in bundle.rows:
        if len(row) < 2:
            continue
        try:
            teams.append(Team(team_id=int(row[0]), name=row[1]))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Skipping malformed team row {row}: {e}")
    return teams


def team_names(teams: Sequence[Team]) -> Dict[int, str]:
    return {t.team_id: t.name for t in teams}
