from enum import Enum


class PageKind(str, Enum):
    TEAMS = "teams"
    PLAYERS = "players"
    GAME_RESULTS = "game-results"
    INJURIES = "injuries"


class ExportFormat(str, Enum):
    CSV = "csv"
    TSV = "tsv"

    @property
    def ext(self) -> str:
        return self.value

    @property
    def delimiter(self) -> str:
        return "\t" if self is ExportFormat.TSV else ","
