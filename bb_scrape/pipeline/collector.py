import asyncio
import random
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from bb_scrape.config.settings import settings
from bb_scrape.extractors.errors import RosterTableNotFound
from bb_scrape.extractors.game_results import extract_game_results
from bb_scrape.extractors.injuries import extract_injuries
from bb_scrape.extractors.roster import extract_roster
from bb_scrape.extractors.teams import extract_teams
from bb_scrape.models.bundle import OutputBundle, Row
from bb_scrape.models.pages import PLAYERS_TEAM_COL
from bb_scrape.models.team import MAX_TEAMS, Team
from bb_scrape.pipeline.progress import ScrapeProgress
from bb_scrape.scrapers.base_scraper import ScraperError
from bb_scrape.scrapers.league_scraper import LeagueScraper


def resolve_team_ids(
    all_teams: bool, one: Optional[int], ids_filter: Optional[Sequence[int]]
) -> List[int]:
    """Team ids to scrape: ``--all`` wins, then ``-t``, then ``--ids``, else every id."""
    if all_teams:
        return list(range(MAX_TEAMS))
    if one is not None:
        return [one]
    if ids_filter:
        return sorted(set(ids_filter))
    return list(range(MAX_TEAMS))


async def collect_teams(scraper: LeagueScraper) -> OutputBundle:
    doc = await scraper.fetch_teams_page()
    return extract_teams(doc)


async def collect_game_results(
    scraper: LeagueScraper, season_fallback: str = ""
) -> OutputBundle:
    doc = await scraper.fetch_season_page()
    bundle = extract_game_results(
        doc, season_fallback=season_fallback, flip_sides=settings.flip_sides
    )
    logger.info(f"Game results: {len(bundle.rows)} rows collected")
    return bundle


async def collect_injuries(
    scraper: LeagueScraper, teams: Sequence[Team], season_fallback: str = ""
) -> OutputBundle:
    doc = await scraper.fetch_injury_page()
    return extract_injuries(doc, teams, season_fallback=season_fallback)


async def _polite_pause() -> None:
    delay_ms = settings.request_pause_ms + random.randint(0, settings.jitter_ms)
    if delay_ms:
        await asyncio.sleep(delay_ms / 1000)


async def collect_players(
    scraper: LeagueScraper,
    team_ids: Sequence[int],
    progress: Optional[ScrapeProgress] = None,
    team_names: Optional[Dict[int, str]] = None,
) -> OutputBundle:
    """Scrapes the rosters of ``team_ids`` with a small pool of async workers.

    A team that fails (HTTP error, missing roster table) is logged and
    reported to ``progress``; the other teams still complete. ``item_done``
    receives the team name as printed on the roster page.

    Returns:
        OutputBundle with the first successful header row and all player
        rows ordered by team id.
    """
    progress = progress or ScrapeProgress()
    team_names = team_names or {}
    ids = list(team_ids)
    progress.begin(len(ids))
    if not ids:
        progress.finish()
        return OutputBundle(headers=None, rows=[])

    queue: "asyncio.Queue[int]" = asyncio.Queue()
    for team_id in ids:
        queue.put_nowait(team_id)

    results: Dict[int, OutputBundle] = {}
    failures: List[Tuple[int, str]] = []

    async def worker(worker_no: int) -> None:
        while True:
            try:
                team_id = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            label = team_names.get(team_id, f"Team {team_id}")
            try:
                doc = await scraper.fetch_team_page(team_id)
                bundle = extract_roster(doc, team_id)
                results[team_id] = bundle
                # rows carry the name as printed on the roster page
                if bundle.rows:
                    label = bundle.rows[0][PLAYERS_TEAM_COL]
                logger.info(
                    f"[w{worker_no}] Team {team_id} ({label}): {len(bundle.rows)} players"
                )
                progress.item_done(team_id, label)
            except (ScraperError, RosterTableNotFound) as e:
                logger.error(f"[w{worker_no}] Team {team_id} ({label}) failed: {e}")
                failures.append((team_id, str(e)))
                progress.item_failed(team_id, label, str(e))
            finally:
                queue.task_done()
            await _polite_pause()

    workers = min(settings.workers, len(ids))
    logger.info(f"Scraping {len(ids)} team pages with {workers} workers")
    try:
        await asyncio.gather(*(worker(n) for n in range(workers)))
    finally:
        progress.finish()

    headers: Optional[List[str]] = None
    rows: List[Row] = []
    for team_id in sorted(results):
        bundle = results[team_id]
        if headers is None and bundle.headers:
            headers = bundle.headers
        rows.extend(bundle.rows)

    if failures:
        logger.warning(
            f"{len(failures)} of {len(ids)} teams failed: {[team_id for team_id, _ in sorted(failures)]}"
        )
    return OutputBundle(headers=headers, rows=rows)
