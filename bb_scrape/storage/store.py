"""Local cache of scraped tables: one CSV per page kind plus the last season."""

import csv
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from loguru import logger

from bb_scrape.config.settings import settings
from bb_scrape.extractors.teams import teams_from_bundle
from bb_scrape.models.bundle import OutputBundle, Row
from bb_scrape.models.enums import PageKind
from bb_scrape.models.pages import PLAYERS_TEAM_COL, ROSTER_FIXED_HEADERS, page_spec
from bb_scrape.models.team import Team, placeholder_directory

SEASON_FILE = "season.txt"
# id,name as printed on each roster page; player rows only carry the name
ROSTER_TEAMS_FILE = "roster_teams.csv"


class StoreError(Exception):
    """Raised when a cache file exists but cannot be read or written."""

    pass


def _store_dir(store_dir: Optional[Path]) -> Path:
    return Path(store_dir) if store_dir is not None else settings.store_dir


def _is_header_row(kind: PageKind, row: Row) -> bool:
    spec = page_spec(kind)
    if spec.default_headers is not None and tuple(row) == spec.default_headers:
        return True
    return kind == PageKind.PLAYERS and bool(row) and row[0] == ROSTER_FIXED_HEADERS[0]


def save_dataset(
    kind: PageKind, bundle: OutputBundle, store_dir: Optional[Path] = None
) -> Path:
    path = _store_dir(store_dir) / page_spec(kind).store_file
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            if bundle.headers:
                writer.writerow(bundle.headers)
            writer.writerows(bundle.rows)
    except OSError as e:
        logger.error(f"Failed to write {kind.value} cache to {path}: {e}")
        raise StoreError(f"Cannot write {path}") from e
    logger.success(f"Saved {len(bundle.rows)} {kind.value} rows to {path}")
    return path


def load_dataset(kind: PageKind, store_dir: Optional[Path] = None) -> Optional[OutputBundle]:
    """Cached bundle for ``kind``, or None when nothing has been cached yet."""
    path = _store_dir(store_dir) / page_spec(kind).store_file
    if not path.exists():
        logger.debug(f"No {kind.value} cache at {path}")
        return None
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            rows = [row for row in csv.reader(f)]
    except OSError as e:
        logger.error(f"Failed to read {kind.value} cache from {path}: {e}")
        raise StoreError(f"Cannot read {path}") from e

    headers: Optional[List[str]] = None
    if rows and _is_header_row(kind, rows[0]):
        headers = rows.pop(0)
    logger.debug(f"Loaded {len(rows)} {kind.value} rows from {path}")
    return OutputBundle(headers=headers, rows=rows)


def save_season(season: str, store_dir: Optional[Path] = None) -> None:
    if not season:
        return
    path = _store_dir(store_dir) / SEASON_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(season + "\n", encoding="utf-8")
    logger.debug(f"Saved season {season} to {path}")


def load_season(store_dir: Optional[Path] = None) -> str:
    path = _store_dir(store_dir) / SEASON_FILE
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8").strip()


def load_roster_teams(store_dir: Optional[Path] = None) -> Dict[int, str]:
    """Team id to the name its roster page prints, for every team scraped so far."""
    path = _store_dir(store_dir) / ROSTER_TEAMS_FILE
    if not path.exists():
        return {}
    names: Dict[int, str] = {}
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            for row in csv.reader(f):
                if len(row) >= 2 and row[0].isdigit():
                    names[int(row[0])] = row[1]
    except OSError as e:
        logger.error(f"Failed to read roster team names from {path}: {e}")
        raise StoreError(f"Cannot read {path}") from e
    return names


def save_roster_teams(names: Dict[int, str], store_dir: Optional[Path] = None) -> None:
    """Folds freshly scraped id/name pairs into the cached map."""
    if not names:
        return
    merged = load_roster_teams(store_dir)
    merged.update(names)
    path = _store_dir(store_dir) / ROSTER_TEAMS_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerows([str(team_id), merged[team_id]] for team_id in sorted(merged))
    except OSError as e:
        logger.error(f"Failed to write roster team names to {path}: {e}")
        raise StoreError(f"Cannot write {path}") from e
    logger.debug(f"Saved {len(merged)} roster team names to {path}")


def load_teams(store_dir: Optional[Path] = None) -> List[Team]:
    """Cached team directory, or ``Team 0..31`` placeholders if none is cached."""
    bundle = load_dataset(PageKind.TEAMS, store_dir)
    teams = teams_from_bundle(bundle) if bundle is not None else []
    if not teams:
        logger.warning("No cached team list, using placeholder team names")
        return placeholder_directory()
    return teams


def _merge_players(existing: OutputBundle, new: OutputBundle) -> List[Row]:
    replaced = {row[PLAYERS_TEAM_COL] for row in new.rows if len(row) > PLAYERS_TEAM_COL}
    kept = [
        row
        for row in existing.rows
        if len(row) <= PLAYERS_TEAM_COL or row[PLAYERS_TEAM_COL] not in replaced
    ]
    return kept + list(new.rows)


def _game_key(row: Row) -> Tuple[str, ...]:
    # (season, week, home, away)
    return tuple(row[i] if i < len(row) else "" for i in (0, 1, 2, 5))


def _merge_game_results(existing: OutputBundle, new: OutputBundle) -> List[Row]:
    rows = list(existing.rows)
    index: Dict[Tuple[str, ...], int] = {_game_key(r): i for i, r in enumerate(rows)}
    for row in new.rows:
        key = _game_key(row)
        if key in index:
            rows[index[key]] = row
        else:
            index[key] = len(rows)
            rows.append(row)
    return rows


def merge_dataset(
    kind: PageKind, existing: Optional[OutputBundle], new: OutputBundle
) -> OutputBundle:
    """Folds a fresh scrape into the cached bundle.

    Players are replaced per team, game results are upserted on
    (season, week, home, away), teams and injuries are replaced outright.
    """
    if existing is None:
        return new
    headers = new.headers or existing.headers
    if kind == PageKind.PLAYERS:
        rows = _merge_players(existing, new)
    elif kind == PageKind.GAME_RESULTS:
        rows = _merge_game_results(existing, new)
    else:
        rows = list(new.rows)
    logger.debug(
        f"Merged {kind.value}: {len(existing.rows)} cached + {len(new.rows)} new -> {len(rows)} rows"
    )
    return OutputBundle(headers=headers, rows=rows)
