import sys
import asyncio
import argparse
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from bb_scrape.config.settings import APP_VERSION, settings
from bb_scrape.logging.setup import setup_logging
from bb_scrape.extractors.teams import team_names, teams_from_bundle
from bb_scrape.models.bundle import OutputBundle
from bb_scrape.models.enums import ExportFormat, PageKind
from bb_scrape.models.pages import page_spec
from bb_scrape.models.team import MAX_TEAMS, Team
from bb_scrape.pipeline.collector import (
    collect_game_results,
    collect_injuries,
    collect_players,
    collect_teams,
    resolve_team_ids,
)
from bb_scrape.pipeline.progress import ScrapeProgress
from bb_scrape.scrapers.base_scraper import AuthenticationError, ScraperError
from bb_scrape.scrapers.league_scraper import LeagueScraper
from bb_scrape.storage.export import (
    filter_rows_for_selection,
    write_export_per_team,
    write_export_single,
)
from bb_scrape.storage.store import (
    load_dataset,
    load_season,
    load_roster_teams,
    load_teams,
    merge_dataset,
    save_dataset,
    save_roster_teams,
    save_season,
)
from bb_scrape.utils.misc_utils import parse_ids_list

console = Console()


class RichProgress(ScrapeProgress):
    """Progress bar for per-team roster scraping."""

    def __init__(self, console: Console):
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("{task.fields[last]}"),
            console=console,
            transient=True,
        )
        self._task = None
        self.failed: List[int] = []
        self.names: Dict[int, str] = {}

    def begin(self, total: int) -> None:
        self._progress.start()
        self._task = self._progress.add_task("Rosters", total=total, last="")

    def item_done(self, team_id: int, name: str) -> None:
        self.names[team_id] = name
        self._progress.update(self._task, advance=1, last=name)

    def item_failed(self, team_id: int, name: str, reason: str) -> None:
        self.failed.append(team_id)
        self._progress.update(self._task, advance=1, last=f"[red]{name} failed")

    def finish(self) -> None:
        self._progress.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bb-scrape",
        description="Scrape Brutalball league pages into CSV/TSV tables.",
    )
    parser.add_argument(
        "--page",
        choices=[k.value for k in PageKind],
        default=PageKind.PLAYERS.value,
        help="Which page to scrape or export (default: players).",
    )
    parser.add_argument(
        "--list-teams", action="store_true", help="Print id,name for every team and exit."
    )
    who = parser.add_mutually_exclusive_group()
    who.add_argument("-a", "--all", action="store_true", help="Select every team.")
    who.add_argument("-t", "--team", type=int, help=f"Select one team id (0..{MAX_TEAMS - 1}).")
    parser.add_argument("--ids", help='Team id list such as "1,3-5".')
    parser.add_argument("-o", "--out", type=Path, help="Output file, or directory with --per-team.")
    parser.add_argument(
        "--format",
        choices=[f.value for f in ExportFormat],
        default=ExportFormat.CSV.value,
        help="Export format (default: csv).",
    )
    parser.add_argument(
        "--keephash", action="store_true", help="Keep the leading # on player numbers."
    )
    parser.add_argument(
        "--include-headers", action="store_true", help="Write the header row."
    )
    parser.add_argument(
        "--per-team", action="store_true", help="Write one file per team."
    )
    parser.add_argument(
        "--from-cache", action="store_true", help="Use the local cache, skip the network."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser


async def scrape_teams() -> List[Team]:
    """Refreshes the cached team directory from the league index page."""
    scraper = LeagueScraper()
    try:
        bundle = await collect_teams(scraper)
    finally:
        await scraper.close()
    if bundle.rows:
        save_dataset(PageKind.TEAMS, bundle)
    return teams_from_bundle(bundle) or load_teams()


async def scrape_page(
    kind: PageKind, team_ids: Sequence[int], teams: Sequence[Team]
) -> Tuple[OutputBundle, OutputBundle]:
    """Fetches one page kind, merges it into the cache and saves it.

    Returns the merged cache and the freshly scraped bundle.
    """
    scraper = LeagueScraper()
    season = load_season()
    try:
        if kind == PageKind.TEAMS:
            bundle = await collect_teams(scraper)
        elif kind == PageKind.PLAYERS:
            progress = RichProgress(console)
            bundle = await collect_players(
                scraper,
                team_ids,
                progress,
                team_names=team_names(teams),
            )
            save_roster_teams(progress.names)
            if progress.failed:
                console.print(f"[yellow]Failed teams:[/yellow] {sorted(progress.failed)}")
        elif kind == PageKind.GAME_RESULTS:
            bundle = await collect_game_results(scraper, season_fallback=season)
        else:
            bundle = await collect_injuries(scraper, teams, season_fallback=season)
    finally:
        await scraper.close()

    if kind in (PageKind.GAME_RESULTS, PageKind.INJURIES) and bundle.rows:
        save_season(bundle.rows[0][0])

    merged = merge_dataset(kind, load_dataset(kind), bundle)
    save_dataset(kind, merged)
    return merged, bundle


def export_rows(
    args: argparse.Namespace,
    kind: PageKind,
    bundle: OutputBundle,
    teams: Sequence[Team],
) -> List[Path]:
    fmt = ExportFormat(args.format)
    strip_hash = kind == PageKind.PLAYERS and not args.keephash
    if args.per_team and page_spec(kind).per_team_applicable:
        return write_export_per_team(
            args.out or settings.out_dir,
            kind,
            bundle,
            teams,
            fmt=fmt,
            include_headers=args.include_headers,
            strip_number_hash=strip_hash,
        )
    if args.per_team:
        logger.warning(f"--per-team does not apply to {kind.value}, writing one file")
    path = args.out or settings.out_dir / f"{kind.value}.{fmt.ext}"
    return [
        write_export_single(
            path,
            bundle,
            fmt=fmt,
            include_headers=args.include_headers,
            strip_number_hash=strip_hash,
        )
    ]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parses arguments, runs the scrape or cache load, and exports the result."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.team is not None and not 0 <= args.team < MAX_TEAMS:
        parser.error(f"-t/--team must be between 0 and {MAX_TEAMS - 1}")
    ids_filter: Optional[List[int]] = None
    if args.ids:
        try:
            ids_filter = parse_ids_list(args.ids)
        except ValueError as e:
            parser.error(f"--ids: {e}")

    if args.list_teams:
        teams = load_teams() if args.from_cache else asyncio.run(scrape_teams())
        for team in teams:
            console.print(f"{team.team_id},{team.name}", markup=False, highlight=False)
        return 0

    kind = PageKind(args.page)
    team_ids = resolve_team_ids(args.all, args.team, ids_filter)
    teams = load_teams()

    fresh: Optional[OutputBundle] = None
    if args.from_cache:
        bundle = load_dataset(kind)
        if bundle is None:
            logger.warning(f"No cached {kind.value} data, nothing to export")
            bundle = OutputBundle(headers=None, rows=[])
    else:
        logger.info(f"Scraping {kind.value}...")
        try:
            bundle, fresh = asyncio.run(scrape_page(kind, team_ids, teams))
        except AuthenticationError as e:
            logger.critical(f"Authentication Error: {e}")
            return 1
        except ScraperError as e:
            logger.error(f"Scraper Error during fetch: {e}")
            return 1
        if kind == PageKind.TEAMS:
            teams = load_teams()

    selected = None if args.all or (args.team is None and not ids_filter) else team_ids
    if fresh is not None and kind == PageKind.PLAYERS:
        # only the selected team pages were fetched
        rows = list(fresh.rows)
    else:
        rows = filter_rows_for_selection(
            kind, bundle.rows, selected, teams, roster_teams=load_roster_teams()
        )
    selection = OutputBundle(headers=bundle.headers, rows=rows)
    paths = export_rows(args, kind, selection, teams)

    console.print(
        Panel(
            f"Page: [bold]{page_spec(kind).title}[/bold]\n"
            f"Rows: {len(rows)} of {len(bundle.rows)} cached\n"
            f"Files: {len(paths)} ({paths[0].parent if paths else '-'})",
            title="bb-scrape",
            expand=False,
        )
    )
    return 0


def run() -> None:
    setup_logging()
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
