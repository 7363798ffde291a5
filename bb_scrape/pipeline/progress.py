class ScrapeProgress:
    """Receives per-team progress from the collector. Every hook is a no-op here."""

    def begin(self, total: int) -> None:
        pass

    def item_done(self, team_id: int, name: str) -> None:
        pass

    def item_failed(self, team_id: int, name: str, reason: str) -> None:
        pass

    def finish(self) -> None:
        pass
