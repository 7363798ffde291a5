import csv
import io
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from loguru import logger

from bb_scrape.core.sanitize import letters_only_trim
from bb_scrape.models.bundle import OutputBundle, Row
from bb_scrape.models.enums import ExportFormat, PageKind
from bb_scrape.models.pages import PLAYERS_NUMBER_COL, page_spec
from bb_scrape.models.team import Team, is_placeholder
from bb_scrape.utils.misc_utils import sanitize_team_filename


def _without_number_hash(row: Row) -> Row:
    if len(row) > PLAYERS_NUMBER_COL and row[PLAYERS_NUMBER_COL].startswith("#"):
        row = list(row)
        row[PLAYERS_NUMBER_COL] = row[PLAYERS_NUMBER_COL][1:]
    return row


def to_export_string(
    bundle: OutputBundle,
    fmt: ExportFormat = ExportFormat.CSV,
    include_headers: bool = False,
    strip_number_hash: bool = False,
) -> str:
    """Renders a bundle as delimited text with ``\\n`` line endings."""
    buf = io.StringIO()
    writer = csv.writer(
        buf, delimiter=fmt.delimiter, quoting=csv.QUOTE_MINIMAL, lineterminator="\n"
    )
    if include_headers and bundle.headers:
        writer.writerow(bundle.headers)
    for row in bundle.rows:
        writer.writerow(_without_number_hash(row) if strip_number_hash else row)
    return buf.getvalue()


def write_export_single(
    path: Path,
    bundle: OutputBundle,
    fmt: ExportFormat = ExportFormat.CSV,
    include_headers: bool = False,
    strip_number_hash: bool = False,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        to_export_string(bundle, fmt, include_headers, strip_number_hash),
        encoding="utf-8",
    )
    logger.success(f"Exported {len(bundle.rows)} rows to {path}")
    return path


def filter_rows_for_selection(
    kind: PageKind,
    rows: Sequence[Row],
    selected_ids: Optional[Sequence[int]],
    teams: Sequence[Team],
    roster_teams: Optional[Dict[int, str]] = None,
) -> List[Row]:
    """Rows where any of the page's team columns names a selected team.

    Pages print trimmed team names ("Orcs" for "Orcs & Goblins"), so a
    selected id matches its directory name, the trimmed form of it, and the
    name its roster page printed (``roster_teams``). No selection, or a
    selection covering every known team, keeps all rows.
    """
    if selected_ids is None:
        return list(rows)
    selected = set(selected_ids)
    if teams and all(t.team_id in selected for t in teams):
        return list(rows)
    names = set()
    for t in teams:
        if t.team_id not in selected:
            continue
        names.add(t.name)
        if not is_placeholder(t):
            names.add(letters_only_trim(t.name))
    for team_id, name in (roster_teams or {}).items():
        if team_id in selected:
            names.add(name)
    names.discard("")
    columns = page_spec(kind).team_columns
    return [
        row
        for row in rows
        if any(col < len(row) and row[col] in names for col in columns)
    ]


def resolve_team_filename(name: str, team_id: int, used: Dict[str, int]) -> str:
    """File stem for ``name``; a stem already handed out gets `` (2)``, `` (3)``..."""
    stem = sanitize_team_filename(name, team_id)
    count = used.get(stem, 0) + 1
    used[stem] = count
    return stem if count == 1 else f"{stem} ({count})"


def write_export_per_team(
    out_dir: Path,
    kind: PageKind,
    bundle: OutputBundle,
    teams: Sequence[Team],
    fmt: ExportFormat = ExportFormat.CSV,
    include_headers: bool = False,
    strip_number_hash: bool = False,
) -> List[Path]:
    """Writes one file per team named in the rows, in first-appearance order.

    A game or injury row lands in the file of every team it names.
    """
    spec = page_spec(kind)
    if not spec.per_team_applicable:
        raise ValueError(f"Per-team export does not apply to {spec.title}")

    groups: Dict[str, List[Row]] = {}
    for row in bundle.rows:
        for col in spec.team_columns:
            if col >= len(row) or not row[col]:
                continue
            group = groups.setdefault(row[col], [])
            if not group or group[-1] is not row:
                group.append(row)

    ids_by_name = {t.name: t.team_id for t in teams}
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    used: Dict[str, int] = {}
    paths: List[Path] = []
    for position, (name, rows) in enumerate(groups.items()):
        stem = resolve_team_filename(name, ids_by_name.get(name, position), used)
        path = out_dir / f"{stem}.{fmt.ext}"
        path.write_text(
            to_export_string(
                OutputBundle(headers=bundle.headers, rows=rows),
                fmt,
                include_headers,
                strip_number_hash,
            ),
            encoding="utf-8",
        )
        paths.append(path)
    logger.success(f"Exported {spec.title} for {len(paths)} teams to {out_dir}")
    return paths
