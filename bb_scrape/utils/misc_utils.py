# bb_scrape/utils/misc_utils.py
import re
from typing import List

from bb_scrape.models.team import MAX_TEAMS


def sanitize_team_filename(name: str, team_id: int) -> str:
    """Generates a filesystem-safe file stem from a team name.

    Whitespace runs become one underscore, ASCII letters, digits, ``-`` and
    ``_`` are kept, everything else is dropped. Falls back to ``team_<id>``.
    """
    stem = re.sub(r"\s+", "_", name)
    stem = re.sub(r"[^A-Za-z0-9_\-]", "", stem)
    stem = re.sub(r"_{2,}", "_", stem).strip("_")
    return stem or f"team_{team_id}"


def parse_ids_list(text: str) -> List[int]:
    """Parses ``"1,3-5"`` style team id lists.

    Ranges are inclusive. Ids of ``MAX_TEAMS`` or more are ignored. The
    result is sorted and has no duplicates.

    Raises:
        ValueError: On a non-numeric item or a reversed range.
    """
    ids = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            lo_s, _, hi_s = part.partition("-")
            lo, hi = int(lo_s.strip()), int(hi_s.strip())
            if lo > hi:
                raise ValueError(f"Reversed range '{part}'")
            ids.update(range(lo, min(hi, MAX_TEAMS - 1) + 1))
        else:
            value = int(part)
            if value < MAX_TEAMS:
                ids.add(value)
    return sorted(ids)
