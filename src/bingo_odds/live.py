"""Live, state-dependent win odds for a game in progress.

Every call is a pure function of (cards, drawn numbers, cards in play). The
caller owns the drawn history and recomputes on each change.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Sequence, Set, Tuple

from .cards import (
    NUMBERS_PER_CARD,
    NUMBERS_PER_LINE,
    ROWS_PER_CARD,
    Cell,
    card_numbers,
    row_numbers,
)
from .combinatorics import TOTAL_BALLS
from .hypergeometric import hypergeometric

logger = logging.getLogger(__name__)

LINE = "line"
BINGO = "bingo"


@dataclass(frozen=True)
class GameContext:
    user_cards: int
    total_cards: int
    drawn_count: int

    @property
    def opponent_cards(self) -> int:
        return max(0, self.total_cards - self.user_cards)

    @property
    def remaining_balls(self) -> int:
        return TOTAL_BALLS - self.drawn_count


@dataclass(frozen=True)
class ProgressSnapshot:
    """Per-scope progress of the user's cards; `inf` needed means no data."""

    needed_for_line: float = math.inf
    needed_for_bingo: float = math.inf
    line_outs: FrozenSet[int] = field(default_factory=frozenset)
    bingo_outs: FrozenSet[int] = field(default_factory=frozenset)
    prob_hit_line_out: float = 0.0
    prob_hit_bingo_out: float = 0.0
    prob_user_wins_line_next_draw: float = 0.0
    prob_user_wins_bingo_next_draw: float = 0.0


def _clamp(p: float) -> float:
    return max(0.0, min(1.0, p))


def expected_ready_opponents(scope: str, drawn_count: int, opponent_cards: int) -> float:
    """Expected number of opponent lines/cards exactly one ball away."""
    if scope == LINE:
        p_one_away = hypergeometric(TOTAL_BALLS, NUMBERS_PER_LINE, drawn_count, NUMBERS_PER_LINE - 1)
        # any of the card's rows can be the one-away row
        return p_one_away * opponent_cards * ROWS_PER_CARD
    if scope == BINGO:
        p_one_away = hypergeometric(TOTAL_BALLS, NUMBERS_PER_CARD, drawn_count, NUMBERS_PER_CARD - 1)
        return p_one_away * opponent_cards
    raise ValueError(f"Unknown scope: {scope}")


def prob_opponent_wins_next_draw(expected_ready: float, remaining_balls: int) -> float:
    """P(at least one ready opponent completes on the next ball).

    Each ready opponent's missing number is treated as an independent uniform
    pick among the remaining balls; shared missing numbers are not modelled.
    """
    if remaining_balls <= 0 or expected_ready <= 0:
        return 0.0
    return _clamp(1.0 - (1.0 - 1.0 / remaining_balls) ** expected_ready)


def _min_needed(cards: Sequence[Sequence[Sequence[Cell]]], drawn: Set[int]) -> Tuple[int, int]:
    needed_line = NUMBERS_PER_LINE
    needed_bingo = NUMBERS_PER_CARD
    for card in cards:
        hits = sum(1 for x in card_numbers(card) if x in drawn)
        needed_bingo = min(needed_bingo, NUMBERS_PER_CARD - hits)
        for row in card:
            nums = row_numbers(row)
            if len(nums) != NUMBERS_PER_LINE:
                continue
            row_hits = sum(1 for x in nums if x in drawn)
            needed_line = min(needed_line, NUMBERS_PER_LINE - row_hits)
    return needed_line, needed_bingo


def _collect_outs(
    cards: Sequence[Sequence[Sequence[Cell]]],
    drawn: Set[int],
    needed_line: int,
    needed_bingo: int,
) -> Tuple[Set[int], Set[int]]:
    line_outs: Set[int] = set()
    bingo_outs: Set[int] = set()
    for card in cards:
        if 0 < needed_bingo <= NUMBERS_PER_CARD:
            nums = card_numbers(card)
            missing = [x for x in nums if x not in drawn]
            if NUMBERS_PER_CARD - (len(nums) - len(missing)) == needed_bingo:
                bingo_outs.update(missing)
        if not 0 < needed_line <= NUMBERS_PER_LINE:
            continue
        for row in card:
            nums = row_numbers(row)
            if len(nums) != NUMBERS_PER_LINE:
                continue
            missing = [x for x in nums if x not in drawn]
            if len(missing) == needed_line:
                line_outs.update(missing)
    return line_outs, bingo_outs


def _next_draw(outs: Set[int], scope: str, context: GameContext) -> Tuple[float, float]:
    remaining = context.remaining_balls
    prob_hit = _clamp(len(outs) / remaining)
    expected = expected_ready_opponents(scope, context.drawn_count, context.opponent_cards)
    prob_opp = prob_opponent_wins_next_draw(expected, remaining)
    return prob_hit, _clamp(prob_hit * (1.0 - prob_opp))


def calculate_live_probabilities(
    cards: Sequence[Sequence[Sequence[Cell]]],
    drawn: Iterable[int],
    total_cards: Optional[int] = None,
) -> ProgressSnapshot:
    """Progress snapshot of the user's cards against the drawn numbers.

    `total_cards` counts every card in play, the user's included; when
    omitted the user is assumed to play alone. Odds for the next ball are
    only estimated when the closest line/card is exactly one number away.
    """
    drawn_set = set(drawn)
    context = GameContext(
        user_cards=len(cards),
        total_cards=len(cards) if total_cards is None else total_cards,
        drawn_count=len(drawn_set),
    )
    if context.user_cards == 0 or context.remaining_balls <= 0:
        return ProgressSnapshot()

    needed_line, needed_bingo = _min_needed(cards, drawn_set)
    line_outs, bingo_outs = _collect_outs(cards, drawn_set, needed_line, needed_bingo)

    hit_line = win_line = hit_bingo = win_bingo = 0.0
    if needed_line == 1:
        hit_line, win_line = _next_draw(line_outs, LINE, context)
    else:
        line_outs = set()
    if needed_bingo == 1:
        hit_bingo, win_bingo = _next_draw(bingo_outs, BINGO, context)
    else:
        bingo_outs = set()

    logger.debug(
        "live odds: drawn=%d needed line=%d bingo=%d opponents=%d",
        context.drawn_count,
        needed_line,
        needed_bingo,
        context.opponent_cards,
    )
    return ProgressSnapshot(
        needed_for_line=needed_line,
        needed_for_bingo=needed_bingo,
        line_outs=frozenset(line_outs),
        bingo_outs=frozenset(bingo_outs),
        prob_hit_line_out=hit_line,
        prob_hit_bingo_out=hit_bingo,
        prob_user_wins_line_next_draw=win_line,
        prob_user_wins_bingo_next_draw=win_bingo,
    )
