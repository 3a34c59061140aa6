from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from .cards import NUMBERS_PER_CARD, NUMBERS_PER_LINE
from .combinatorics import TOTAL_BALLS, combinations


@dataclass(frozen=True)
class ChartPoint:
    draw_index: int
    line_probability: float
    bingo_probability: float


def single_card_probability(balls_drawn: int, needed: int) -> float:
    """P(all `needed` numbers of one card are among the first `balls_drawn`)."""
    if balls_drawn < needed:
        return 0.0
    total_outcomes = combinations(TOTAL_BALLS, balls_drawn)
    if total_outcomes == 0:
        return 0.0
    return combinations(TOTAL_BALLS - needed, balls_drawn - needed) / total_outcomes


def aggregate_probability(p: float, total_cards: int) -> float:
    """P(at least one of `total_cards` independent cards has won)."""
    if total_cards < 0:
        raise ValueError("total_cards must be >= 0")
    if total_cards == 0 or p <= 0.0:
        return 0.0
    if p >= 1.0:
        return 1.0
    # 1 - (1 - p)**N; log1p keeps tiny p (early bingo draws) from rounding to 0
    q = -math.expm1(total_cards * math.log1p(-p))
    # never below a single card's probability
    return min(1.0, max(q, p))


def generate_chart_data(total_cards: int = 1) -> List[ChartPoint]:
    """Theoretical line/bingo curve for draws 1..90 over `total_cards` cards.

    Cards are modelled as independent random subsets of the 90 balls, which
    is the usual idealization for "chance somebody has won" charts; a fixed
    pool of physical cards is correlated and is not modelled exactly.
    """
    points: List[ChartPoint] = []
    for k in range(1, TOTAL_BALLS + 1):
        p_line = single_card_probability(k, NUMBERS_PER_LINE)
        p_bingo = single_card_probability(k, NUMBERS_PER_CARD)
        points.append(
            ChartPoint(
                draw_index=k,
                line_probability=aggregate_probability(p_line, total_cards),
                bingo_probability=aggregate_probability(p_bingo, total_cards),
            )
        )
    return points
