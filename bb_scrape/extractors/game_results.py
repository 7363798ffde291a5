from typing import List, Optional, Tuple

from loguru import logger

from bb_scrape.core.html import (
    cell_text,
    find_ci,
    first_digit_run,
    has_class,
    href_value,
    iter_tag_blocks,
    next_tag_block,
    query_digits,
)
from bb_scrape.core.sanitize import letters_only_trim
from bb_scrape.extractors.roster import is_player_row
from bb_scrape.models.bundle import OutputBundle, Row
from bb_scrape.models.pages import GAME_RESULTS_HEADERS

# The site names its columns from the visitor's point of view:
# "basicaway" holds the home side and "basichome" the away side.
HOME_CELL_CLASS = "basicaway"
AWAY_CELL_CLASS = "basichome"
MATCH_LINK_MARKER = "game.php?i="


def detect_season(doc: str) -> str:
    """Season number from ``<title>... Season N</title>``, or ``""``."""
    block = next_tag_block(doc, "<title", "</title>")
    if block is None:
        return ""
    title = cell_text(block.text(doc))
    idx = find_ci(title, "season")
    if idx < 0:
        return ""
    return first_digit_run(title, idx + len("season"))


def extract_week_number(table: str) -> Optional[str]:
    """Week number from the table's first ``conference`` cell, if it has one."""
    for td in iter_tag_blocks(table, "<td", "</td>"):
        if not has_class(td.opener(table), "conference"):
            continue
        text = cell_text(td.text(table))
        idx = find_ci(text, "week")
        if idx >= 0:
            week = first_digit_run(text, idx + len("week"))
            if week:
                return week
        # only the first conference cell counts
        return None
    return None


def extract_side(td: str) -> Tuple[str, str]:
    """(team name, score) of one side cell; the score is empty for unplayed games.

    The score comes from whichever ``<strong>`` or ``<em>`` element comes first.
    """
    team = ""
    anchor = next_tag_block(td, "<a", "</a>")
    if anchor is not None:
        team = letters_only_trim(cell_text(anchor.text(td)))

    score = ""
    blocks = [
        block
        for block in (
            next_tag_block(td, "<strong", "</strong>"),
            next_tag_block(td, "<em", "</em>"),
        )
        if block is not None
    ]
    if blocks:
        first = min(blocks, key=lambda b: b.start)
        score = first_digit_run(cell_text(first.text(td)))
    return team, score


def extract_match_id(td: str) -> str:
    anchor = next_tag_block(td, "<a", ">")
    if anchor is None:
        return ""
    return query_digits(href_value(anchor.text(td)), MATCH_LINK_MARKER)


def _select_sides(tds: List[str]) -> Tuple[str, str]:
    """(home cell, away cell), by class when both are marked, else by position."""
    home = next((td for td in tds if has_class(td[: td.find(">") + 1], HOME_CELL_CLASS)), None)
    away = next((td for td in tds if has_class(td[: td.find(">") + 1], AWAY_CELL_CLASS)), None)
    if home is not None and away is not None:
        return home, away
    # Older layout: left cell is away, right cell is home
    return tds[2], tds[0]


def extract_game_results(
    doc: str, season_fallback: str = "", flip_sides: bool = False
) -> OutputBundle:
    """Parses ``season.php`` into one row per scheduled game.

    Future fixtures are kept with empty scores and match id.
    """
    season = detect_season(doc) or season_fallback
    rows: List[Row] = []
    skipped_tables = 0

    for table_block in iter_tag_blocks(doc, "<table", "</table>"):
        table = table_block.text(doc)
        week = extract_week_number(table)
        if week is None:
            skipped_tables += 1
            continue

        for tr in iter_tag_blocks(table, "<tr", "</tr>"):
            if not is_player_row(tr.opener(table)):
                continue
            row_html = tr.text(table)
            tds = [td.text(row_html) for td in iter_tag_blocks(row_html, "<td", "</td>")]
            if len(tds) < 3:
                continue

            home_td, away_td = _select_sides(tds)
            home_team, home_score = extract_side(home_td)
            away_team, away_score = extract_side(away_td)
            if flip_sides:
                home_team, home_score, away_team, away_score = (
                    away_team,
                    away_score,
                    home_team,
                    home_score,
                )

            rows.append(
                [
                    season,
                    week,
                    home_team,
                    home_score,
                    away_score,
                    away_team,
                    extract_match_id(tds[-1]),
                ]
            )

    logger.debug(
        f"Game results: {len(rows)} rows, season '{season}', {skipped_tables} non-week tables skipped"
    )
    return OutputBundle(headers=list(GAME_RESULTS_HEADERS), rows=rows)
