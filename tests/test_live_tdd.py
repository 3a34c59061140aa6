from __future__ import annotations

import math

import pytest
from hypothesis import given, strategies as st

from bingo_odds.cards import card_numbers
from bingo_odds.hypergeometric import hypergeometric
from bingo_odds.live import (
    BINGO,
    LINE,
    GameContext,
    ProgressSnapshot,
    calculate_live_probabilities,
    expected_ready_opponents,
    prob_opponent_wins_next_draw,
)

CARD = [
    [3, None, 21, None, 45, None, 62, None, 84],
    [None, 12, None, 34, 47, None, None, 75, 88],
    [7, None, 28, 39, None, 56, 68, None, None],
]

OTHER_CARD = [
    [1, 15, None, 30, None, 50, None, 70, None],
    [None, 16, 22, None, 41, 52, None, None, 80],
    [9, None, 25, 33, None, None, 64, 77, None],
]


def fillers(count, *cards):
    used = {x for card in cards for x in card_numbers(card)}
    return [x for x in range(1, 91) if x not in used][:count]


def test_game_context_derived_fields():
    ctx = GameContext(user_cards=2, total_cards=100, drawn_count=30)
    assert ctx.opponent_cards == 98
    assert ctx.remaining_balls == 60
    assert GameContext(user_cards=5, total_cards=3, drawn_count=0).opponent_cards == 0


def test_one_away_line_scenario():
    drawn = [3, 21, 45, 62] + fillers(36, CARD)
    assert len(set(drawn)) == 40
    snap = calculate_live_probabilities([CARD], drawn, total_cards=100)

    assert snap.needed_for_line == 1
    assert snap.line_outs == frozenset({84})
    assert snap.prob_hit_line_out == pytest.approx(1 / 50)
    assert 0.0 < snap.prob_user_wins_line_next_draw < snap.prob_hit_line_out

    assert snap.needed_for_bingo == 11
    assert snap.bingo_outs == frozenset()
    assert snap.prob_hit_bingo_out == 0.0
    assert snap.prob_user_wins_bingo_next_draw == 0.0


def test_one_away_line_matches_opponent_model():
    drawn = [3, 21, 45, 62] + fillers(36, CARD)
    snap = calculate_live_probabilities([CARD], drawn, total_cards=100)

    expected_ready = hypergeometric(90, 5, 40, 4) * 99 * 3
    p_opp = 1 - (1 - 1 / 50) ** expected_ready
    assert snap.prob_user_wins_line_next_draw == pytest.approx((1 / 50) * (1 - p_opp))


def test_no_opponents_means_win_equals_hit():
    drawn = [3, 21, 45, 62] + fillers(36, CARD)
    snap = calculate_live_probabilities([CARD], drawn)
    assert snap.prob_user_wins_line_next_draw == snap.prob_hit_line_out


def test_more_opponents_lower_the_win_probability():
    drawn = [3, 21, 45, 62] + fillers(36, CARD)
    few = calculate_live_probabilities([CARD], drawn, total_cards=10)
    many = calculate_live_probabilities([CARD], drawn, total_cards=1000)
    assert many.prob_user_wins_line_next_draw < few.prob_user_wins_line_next_draw
    assert many.prob_hit_line_out == few.prob_hit_line_out


def test_outs_from_several_cards_are_merged():
    drawn = [3, 21, 45, 62, 1, 15, 30, 50] + fillers(10, CARD, OTHER_CARD)
    snap = calculate_live_probabilities([CARD, OTHER_CARD], drawn, total_cards=2)
    assert snap.needed_for_line == 1
    assert snap.line_outs == frozenset({84, 70})
    assert snap.prob_hit_line_out == pytest.approx(2 / 72)


def test_shared_out_counted_once():
    # two rows waiting on the same number contribute one out
    twin = [
        [3, None, 21, None, 45, None, 62, None, 84],
        [2, 11, None, None, 40, None, 60, None, 84],
        [None, None, None, None, None, None, None, None, None],
    ]
    drawn = [3, 21, 45, 62, 2, 11, 40, 60]
    snap = calculate_live_probabilities([twin], drawn)
    assert snap.line_outs == frozenset({84})
    assert snap.prob_hit_line_out == pytest.approx(1 / 82)


def test_one_away_bingo_scenario():
    numbers = card_numbers(CARD)
    drawn = [x for x in numbers if x != 68]
    snap = calculate_live_probabilities([CARD], drawn, total_cards=1)

    assert snap.needed_for_bingo == 1
    assert snap.bingo_outs == frozenset({68})
    assert snap.prob_hit_bingo_out == pytest.approx(1 / 76)
    assert snap.prob_user_wins_bingo_next_draw == snap.prob_hit_bingo_out
    # two rows are already complete
    assert snap.needed_for_line == 0
    assert snap.line_outs == frozenset()
    assert snap.prob_hit_line_out == 0.0


def test_two_away_reports_no_outs_or_odds():
    drawn = [3, 21, 45] + fillers(20, CARD)
    snap = calculate_live_probabilities([CARD], drawn, total_cards=50)
    assert snap.needed_for_line == 2
    assert snap.line_outs == frozenset()
    assert snap.prob_hit_line_out == 0.0
    assert snap.prob_user_wins_line_next_draw == 0.0


def test_rows_without_five_numbers_are_skipped():
    partial = [
        [3, None, 21, None, 45, None, 62, None, None],
        [None, 12, None, 34, 47, None, None, 75, 88],
        [7, None, 28, 39, None, 56, 68, None, None],
    ]
    drawn = [3, 21, 45, 62]
    snap = calculate_live_probabilities([partial], drawn)
    # the fully drawn 4-number row is not a line
    assert snap.needed_for_line == 5
    assert snap.line_outs == frozenset()


def test_no_qualifying_rows_keeps_ceiling():
    empty_rows = [[None] * 9 for _ in range(3)]
    snap = calculate_live_probabilities([empty_rows], [1, 2, 3])
    assert snap.needed_for_line == 5
    assert snap.needed_for_bingo == 15


@given(drawn=st.sets(st.integers(min_value=1, max_value=90)), total=st.integers(min_value=0, max_value=500))
def test_no_cards_returns_default(drawn, total):
    assert calculate_live_probabilities([], drawn, total_cards=total) == ProgressSnapshot()


@given(total=st.integers(min_value=0, max_value=500))
def test_all_balls_drawn_returns_default(total):
    snap = calculate_live_probabilities([CARD, OTHER_CARD], range(1, 91), total_cards=total)
    assert snap == ProgressSnapshot()
    assert math.isinf(snap.needed_for_line)
    assert math.isinf(snap.needed_for_bingo)


@given(
    drawn=st.sets(st.integers(min_value=1, max_value=90), max_size=89),
    total=st.integers(min_value=0, max_value=2000),
)
def test_idempotent_and_bounded(drawn, total):
    first = calculate_live_probabilities([CARD, OTHER_CARD], drawn, total_cards=total)
    second = calculate_live_probabilities([CARD, OTHER_CARD], list(drawn), total_cards=total)
    assert first == second
    for p in (
        first.prob_hit_line_out,
        first.prob_hit_bingo_out,
        first.prob_user_wins_line_next_draw,
        first.prob_user_wins_bingo_next_draw,
    ):
        assert 0.0 <= p <= 1.0
    assert first.prob_user_wins_line_next_draw <= first.prob_hit_line_out
    assert first.line_outs.isdisjoint(drawn)
    assert first.bingo_outs.isdisjoint(drawn)


def test_expected_ready_opponents_scales_rows_for_lines():
    line = expected_ready_opponents(LINE, 40, 10)
    assert line == pytest.approx(hypergeometric(90, 5, 40, 4) * 10 * 3)
    bingo = expected_ready_opponents(BINGO, 70, 10)
    assert bingo == pytest.approx(hypergeometric(90, 15, 70, 14) * 10)
    assert expected_ready_opponents(LINE, 40, 0) == 0.0
    with pytest.raises(ValueError):
        expected_ready_opponents("corner", 40, 10)


def test_prob_opponent_wins_next_draw_bounds():
    assert prob_opponent_wins_next_draw(0.0, 50) == 0.0
    assert prob_opponent_wins_next_draw(3.0, 0) == 0.0
    assert prob_opponent_wins_next_draw(1.0, 50) == pytest.approx(1 / 50)
    assert prob_opponent_wins_next_draw(1e6, 1) == 1.0
    assert 0.0 < prob_opponent_wins_next_draw(5.0, 40) < 1.0
