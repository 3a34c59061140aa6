from __future__ import annotations

import csv
import json
import math
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .cards import Card, sanitize_grid
from .curve import ChartPoint
from .live import ProgressSnapshot


def ensure_parent(path: Path, *, mkdirs: bool) -> None:
    parent = path.parent
    if not parent.exists() and mkdirs:
        parent.mkdir(parents=True, exist_ok=True)


def _refuse_overwrite(path: Path, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(f"Refusing to overwrite existing file without --force: {path}")


def write_json(path: Path, data: object, *, mkdirs: bool, overwrite: bool) -> None:
    _refuse_overwrite(path, overwrite)
    ensure_parent(path, mkdirs=mkdirs)
    text = json.dumps(data, ensure_ascii=True, sort_keys=True, indent=2)
    path.write_text(text + "\n", encoding="utf-8")


def read_cards_json(path: Path) -> List[Card]:
    """Read cards as a list of 3x9 grids or a {"cards": [...]} document."""
    data: Any = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("cards")
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of card grids")
    return [sanitize_grid(grid) for grid in data]


def build_run_meta(*, app_version: str, params_hash: str) -> Dict[str, object]:
    return {
        "app_version": app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": sys.version.split()[0],
        "platform": platform.system().lower(),
        "params_hash": params_hash,
    }


def _needed_or_none(value: float) -> int | None:
    return None if math.isinf(value) else int(value)


def snapshot_to_dict(snapshot: ProgressSnapshot) -> Dict[str, object]:
    return {
        "needed_for_line": _needed_or_none(snapshot.needed_for_line),
        "needed_for_bingo": _needed_or_none(snapshot.needed_for_bingo),
        "line_outs": sorted(snapshot.line_outs),
        "bingo_outs": sorted(snapshot.bingo_outs),
        "prob_hit_line_out": snapshot.prob_hit_line_out,
        "prob_hit_bingo_out": snapshot.prob_hit_bingo_out,
        "prob_user_wins_line_next_draw": snapshot.prob_user_wins_line_next_draw,
        "prob_user_wins_bingo_next_draw": snapshot.prob_user_wins_bingo_next_draw,
    }


def chart_to_rows(points: Sequence[ChartPoint]) -> List[Dict[str, object]]:
    return [
        {
            "draw_index": p.draw_index,
            "line_probability": p.line_probability,
            "bingo_probability": p.bingo_probability,
        }
        for p in points
    ]


def emit_snapshot_json(
    path: Path,
    *,
    snapshot: ProgressSnapshot,
    drawn: Sequence[int],
    total_cards: int,
    run_meta: Dict[str, object],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    data = {
        "run_meta": run_meta,
        "drawn": list(drawn),
        "total_cards": total_cards,
        "snapshot": snapshot_to_dict(snapshot),
    }
    write_json(path, data, mkdirs=mkdirs, overwrite=overwrite)


def emit_chart_json(
    path: Path,
    *,
    points: Sequence[ChartPoint],
    total_cards: int,
    run_meta: Dict[str, object],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    data = {"run_meta": run_meta, "total_cards": total_cards, "points": chart_to_rows(points)}
    write_json(path, data, mkdirs=mkdirs, overwrite=overwrite)


def emit_chart_csv(
    path: Path,
    *,
    points: Sequence[ChartPoint],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    _refuse_overwrite(path, overwrite)
    ensure_parent(path, mkdirs=mkdirs)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["draw_index", "line_probability", "bingo_probability"])
        for p in points:
            writer.writerow([p.draw_index, repr(p.line_probability), repr(p.bingo_probability)])
