import httpx
from loguru import logger

from bb_scrape.config.settings import settings
from .base_scraper import BaseScraper, ScraperError

TEAMS_PAGE = "index.php"
TEAM_PAGE = "team.php?i={team_id}"
SEASON_PAGE = "season.php"
INJURY_PAGE = "injury.php"


def page_url(base_url: str, path: str) -> str:
    """Absolute URL of a page path, with exactly one slash after the prefix."""
    return base_url.rstrip("/") + "/" + path.lstrip("/")


class LeagueScraper(BaseScraper):
    """Fetches raw league pages as text."""

    site_name: str = settings.host

    async def fetch_page(self, path: str) -> str:
        """GETs one page under the configured prefix and decodes it lossily."""
        url = page_url(settings.base_url, path)
        try:
            response = await self._make_request("GET", url)
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Max retries exceeded for {url}. Last exception: {e}")
            raise ScraperError(f"Failed request to {url} after multiple retries") from e

        encoding = response.encoding or "utf-8"
        try:
            text = response.content.decode(encoding, errors="replace")
        except LookupError:
            logger.warning(f"Unknown encoding '{encoding}' for {url}, decoding as utf-8")
            text = response.content.decode("utf-8", errors="replace")
        logger.debug(f"Fetched {url}: {len(text)} chars")
        return text

    async def fetch_teams_page(self) -> str:
        return await self.fetch_page(TEAMS_PAGE)

    async def fetch_team_page(self, team_id: int) -> str:
        return await self.fetch_page(TEAM_PAGE.format(team_id=team_id))

    async def fetch_season_page(self) -> str:
        return await self.fetch_page(SEASON_PAGE)

    async def fetch_injury_page(self) -> str:
        return await self.fetch_page(INJURY_PAGE)
