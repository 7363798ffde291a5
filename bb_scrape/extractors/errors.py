class ExtractionError(Exception):
    """Base class for errors raised while shaping a page into rows."""

    pass


class StructuralNotFound(ExtractionError):
    """Raised when a page lacks the structure an extractor anchors on."""

    pass


class RosterTableNotFound(StructuralNotFound):
    """Raised when a team page has no roster table."""

    def __init__(self, team_id: int):
        self.team_id = team_id
        super().__init__(f"Roster table not found for team {team_id}")
