import asyncio

import httpx
import pytest

from bb_scrape.config.settings import settings
from bb_scrape.pipeline.collector import (
    collect_game_results,
    collect_injuries,
    collect_players,
    collect_teams,
    resolve_team_ids,
)
from bb_scrape.pipeline.progress import ScrapeProgress
from bb_scrape.scrapers.base_scraper import AuthenticationError, BaseScraper, ScraperError
from bb_scrape.scrapers.league_scraper import LeagueScraper, page_url


def roster_page(team: str, player: str) -> str:
    return (
        f"<table class=teamroster><tr><td><h5>{team} Team owner X</h5></td></tr>"
        "<th>Name</th><th>MA</th>"
        f'<tr class="playerrow"><td>{player} #1 Orc</td><td>5</td></tr></table>'
    )


class RecordingProgress(ScrapeProgress):
    def __init__(self):
        self.events = []
        self.names = {}

    def begin(self, total):
        self.events.append(("begin", total))

    def item_done(self, team_id, name):
        self.names[team_id] = name
        self.events.append(("done", team_id))

    def item_failed(self, team_id, name, reason):
        self.events.append(("failed", team_id))

    def finish(self):
        self.events.append(("finish",))


@pytest.fixture(autouse=True)
def no_pause(monkeypatch):
    monkeypatch.setattr(settings, "request_pause_ms", 0)
    monkeypatch.setattr(settings, "jitter_ms", 0)
    monkeypatch.setattr(settings, "workers", 2)


def make_scraper(handler) -> LeagueScraper:
    return LeagueScraper(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def team_handler(request: httpx.Request) -> httpx.Response:
    team_id = int(request.url.params["i"])
    if team_id == 2:
        return httpx.Response(404, text="gone")
    if team_id == 3:
        return httpx.Response(200, text="<html>maintenance</html>")
    return httpx.Response(200, text=roster_page(f"Team{team_id}", f"Player{team_id}"))


def test_collect_players_isolates_failing_teams():
    progress = RecordingProgress()

    async def go():
        scraper = make_scraper(team_handler)
        try:
            return await collect_players(scraper, [4, 2, 0, 3, 1], progress)
        finally:
            await scraper.close()

    bundle = asyncio.run(go())
    assert bundle.headers == ["Name", "Number", "Race", "Team", "MA"]
    assert [row[0] for row in bundle.rows] == ["Player0", "Player1", "Player4"]
    assert progress.events[0] == ("begin", 5)
    assert progress.events[-1] == ("finish",)
    failed = sorted(e[1] for e in progress.events if e[0] == "failed")
    done = sorted(e[1] for e in progress.events if e[0] == "done")
    assert failed == [2, 3]
    assert done == [0, 1, 4]
    # names come from the roster pages, not the directory
    assert progress.names == {0: "Team", 1: "Team", 4: "Team"}


def test_collect_players_with_no_ids():
    progress = RecordingProgress()
    bundle = asyncio.run(collect_players(make_scraper(team_handler), [], progress))
    assert bundle.rows == []
    assert progress.events == [("begin", 0), ("finish",)]


def test_collect_other_pages(season_doc, injury_doc, teams):
    pages = {
        "index.php": '<table><tr><td class="namecheck"><a href="team.php?i=0">Storm</a></td></tr></table>',
        "season.php": season_doc,
        "injury.php": injury_doc,
    }

    def handler(request):
        return httpx.Response(200, text=pages[request.url.path.rsplit("/", 1)[-1]])

    async def go():
        scraper = make_scraper(handler)
        try:
            return (
                await collect_teams(scraper),
                await collect_game_results(scraper, season_fallback="1"),
                await collect_injuries(scraper, teams, season_fallback="1"),
            )
        finally:
            await scraper.close()

    team_bundle, games, injuries = asyncio.run(go())
    assert team_bundle.rows == [["0", "Storm"]]
    assert len(games.rows) == 3
    assert games.rows[0][0] == "31"
    assert len(injuries.rows) == 4


def test_fetch_page_requests_prefixed_path_and_decodes_lossily():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(
            200, content=b"caf\xc3\xa9 \xff", headers={"Content-Type": "text/html; charset=utf-8"}
        )

    text = asyncio.run(make_scraper(handler).fetch_page("/team.php?i=3"))
    assert text == "café \ufffd"
    assert seen == [page_url(settings.base_url, "team.php?i=3")]
    assert seen[0].endswith("/brutalball/team.php?i=3")


@pytest.mark.parametrize("status,error", [(401, AuthenticationError), (404, ScraperError)])
def test_fetch_page_errors_are_not_retried(status, error):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(status)

    with pytest.raises(error):
        asyncio.run(make_scraper(handler).fetch_page("index.php"))
    assert len(calls) == 1


def test_fetch_page_retries_server_errors():
    responses = [httpx.Response(503), httpx.Response(200, text="ok")]

    def handler(request):
        return responses.pop(0)

    assert asyncio.run(make_scraper(handler).fetch_page("index.php")) == "ok"
    assert responses == []


def test_resolve_team_ids():
    assert resolve_team_ids(True, 3, [1]) == list(range(32))
    assert resolve_team_ids(False, 3, [1]) == [3]
    assert resolve_team_ids(False, None, [5, 1, 5]) == [1, 5]
    assert resolve_team_ids(False, None, None) == list(range(32))


class BrokenScraper:
    async def fetch_team_page(self, team_id):
        raise RuntimeError("parser bug")


def test_progress_finishes_when_an_unexpected_error_escapes():
    progress = RecordingProgress()
    with pytest.raises(RuntimeError):
        asyncio.run(collect_players(BrokenScraper(), [0, 1], progress))
    assert progress.events[-1] == ("finish",)


def test_base_scraper_requires_fetch_page():
    with pytest.raises(TypeError):
        BaseScraper()
