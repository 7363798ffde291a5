# bb_scrape/models/team.py
from typing import List

from pydantic import BaseModel, ConfigDict, Field

MAX_TEAMS = 32


class Team(BaseModel):
    """One entry of the league's team directory."""

    model_config = ConfigDict(frozen=True)

    team_id: int = Field(..., ge=0, lt=MAX_TEAMS)
    name: str = Field(..., min_length=1)


def placeholder_directory() -> List[Team]:
    """Stand-in directory used when no team list has been cached yet."""
    return [Team(team_id=i, name=f"Team {i}") for i in range(MAX_TEAMS)]


def is_placeholder(team: Team) -> bool:
    return team.name == f"Team {team.team_id}"
