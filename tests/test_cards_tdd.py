from __future__ import annotations

import pytest

from bingo_odds.cards import card_numbers, row_numbers, sanitize_grid


def test_numbers_skip_empty_cells():
    row = [3, None, 21, None, 45, None, 62, None, 84]
    assert row_numbers(row) == [3, 21, 45, 62, 84]
    assert card_numbers([row, [None] * 9, [7] + [None] * 8]) == [3, 21, 45, 62, 84, 7]


def test_sanitize_replaces_zero_and_out_of_range_cells():
    grid = [
        [3, 0, 21, 0, 45, 0, 62, 0, 84],
        [None, 12, 91, 34, 47, -4, "x", 75, 88],
        [7, True, 28, 39, 0.5, 56, 68, None, None],
    ]
    card = sanitize_grid(grid)
    assert card[0] == [3, None, 21, None, 45, None, 62, None, 84]
    assert card[1] == [None, 12, None, 34, 47, None, None, 75, 88]
    assert card[2] == [7, None, 28, 39, None, 56, 68, None, None]


@pytest.mark.parametrize(
    "grid",
    [
        None,
        [],
        [[None] * 9, [None] * 9],
        [[None] * 9, [None] * 9, [None] * 8],
        [[None] * 9, [None] * 9, "row"],
    ],
)
def test_sanitize_rejects_bad_shape(grid):
    with pytest.raises(ValueError):
        sanitize_grid(grid)


def test_sanitize_keeps_whole_number_floats():
    grid = [
        [3.0, None, 21, None, 45.0, None, 62, None, 84],
        [None, 12, None, 34.5, 47, None, None, 75, 90.0],
        [7, None, 28, 39, None, 56, 68, None, 91.0],
    ]
    card = sanitize_grid(grid)
    assert card[0][0] == 3 and isinstance(card[0][0], int)
    assert card[0][4] == 45
    assert card[1][3] is None
    assert card[1][8] == 90
    assert card[2][8] is None
