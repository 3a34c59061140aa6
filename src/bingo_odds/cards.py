"""Card layout for 90-ball bingo and helpers over its numbered cells."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from .combinatorics import TOTAL_BALLS

ROWS = 3
COLUMNS = 9
ROWS_PER_CARD = ROWS
NUMBERS_PER_LINE = 5
NUMBERS_PER_CARD = 15

Cell = Optional[int]
Row = List[Cell]
Card = List[Row]


def row_numbers(row: Sequence[Cell]) -> List[int]:
    return [x for x in row if x is not None]


def card_numbers(card: Sequence[Sequence[Cell]]) -> List[int]:
    return [x for row in card for x in row if x is not None]


def _sanitize_cell(value: Any) -> Cell:
    # bool is an int subclass; treat it as garbage, not as 0/1
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        return None
    if 1 <= value <= TOTAL_BALLS:
        return value
    return None


def sanitize_grid(grid: Any) -> Card:
    """Normalize a raw 3x9 grid: out-of-range cells (0 included) become None.

    Only the shape is checked. Column ranges and the 15-number count are the
    producer's responsibility.
    """
    if not isinstance(grid, list) or len(grid) != ROWS:
        raise ValueError(f"Card grid must have {ROWS} rows")
    card: Card = []
    for idx, row in enumerate(grid):
        if not isinstance(row, list) or len(row) != COLUMNS:
            raise ValueError(f"Card row {idx} must have {COLUMNS} cells")
        card.append([_sanitize_cell(v) for v in row])
    return card
