from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .enums import PageKind

TEAMS_HEADERS = ["Id", "Team"]
ROSTER_FIXED_HEADERS = ["Name", "Number", "Race", "Team"]
GAME_RESULTS_HEADERS = ["S", "W", "Home", "H", "A", "Away", "Match id"]
INJURY_HEADERS = [
    "S",
    "W",
    "Victim Team",
    "Victim",
    "DUR",
    "SR0",
    "SR1",
    "Type",
    "Offender Team",
    "Offender",
    "BRU",
    "Bounty",
]

# Column positions shared by extractors, store and exporter
PLAYERS_TEAM_COL = 3
PLAYERS_NUMBER_COL = 1


class PageSpec(BaseModel):
    """Static description of one page kind's table shape."""

    model_config = ConfigDict(frozen=True)

    kind: PageKind
    title: str
    store_file: str
    default_headers: Optional[Tuple[str, ...]] = None
    team_columns: Tuple[int, ...] = ()
    per_team_applicable: bool = True


PAGE_SPECS: Dict[PageKind, PageSpec] = {
    PageKind.TEAMS: PageSpec(
        kind=PageKind.TEAMS,
        title="Teams",
        store_file="teams.csv",
        default_headers=tuple(TEAMS_HEADERS),
        team_columns=(1,),
        per_team_applicable=False,
    ),
    PageKind.PLAYERS: PageSpec(
        kind=PageKind.PLAYERS,
        title="Players",
        store_file="players.csv",
        team_columns=(PLAYERS_TEAM_COL,),
    ),
    PageKind.GAME_RESULTS: PageSpec(
        kind=PageKind.GAME_RESULTS,
        title="Game Results",
        store_file="game_results.csv",
        default_headers=tuple(GAME_RESULTS_HEADERS),
        team_columns=(2, 5),
    ),
    PageKind.INJURIES: PageSpec(
        kind=PageKind.INJURIES,
        title="Injuries",
        store_file="injuries.csv",
        default_headers=tuple(INJURY_HEADERS),
        team_columns=(2, 8),
    ),
}


def page_spec(kind: PageKind) -> PageSpec:
    return PAGE_SPECS[kind]
