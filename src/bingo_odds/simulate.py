"""Monte Carlo estimate of the single-card line/bingo curve.

Shuffles the 90 balls and records the draw on which a fixed line (5 numbers)
and a fixed card (15 numbers) complete. By symmetry any fixed subsets give
the same distribution, so the first 5 and first 15 balls are used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from .cards import NUMBERS_PER_CARD, NUMBERS_PER_LINE
from .combinatorics import TOTAL_BALLS
from .curve import ChartPoint
from .rng import create_ball_source, derive_batch_seed

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    points: List[ChartPoint]
    trials: int
    engine: str
    seed: int


def _completion_draw(position: List[int], needed: int) -> int:
    # position[ball] is the 1-based draw index of that ball
    return max(position[ball] for ball in range(1, needed + 1))


def _cumulative(counts: List[int], trials: int) -> List[float]:
    out: List[float] = []
    running = 0
    for k in range(1, TOTAL_BALLS + 1):
        running += counts[k]
        out.append(running / trials)
    return out


def simulate_curve(
    trials: int,
    *,
    seed: int = 0,
    engine: str = "py_random",
    batch_size: int = 1000,
) -> SimulationResult:
    if trials < 1:
        raise ValueError("trials must be >= 1")
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")

    line_counts = [0] * (TOTAL_BALLS + 1)
    bingo_counts = [0] * (TOTAL_BALLS + 1)
    done = 0
    batch = 0
    while done < trials:
        source = create_ball_source(engine, derive_batch_seed(seed, batch, "simulate_curve"))
        size = min(batch_size, trials - done)
        for _ in range(size):
            order = source.draw_order(TOTAL_BALLS)
            position = [0] * (TOTAL_BALLS + 1)
            for idx, ball in enumerate(order, start=1):
                position[ball] = idx
            line_counts[_completion_draw(position, NUMBERS_PER_LINE)] += 1
            bingo_counts[_completion_draw(position, NUMBERS_PER_CARD)] += 1
        done += size
        batch += 1
        logger.debug("simulated batch %d (%d/%d trials)", batch, done, trials)

    line = _cumulative(line_counts, trials)
    bingo = _cumulative(bingo_counts, trials)
    points = [
        ChartPoint(draw_index=k, line_probability=line[k - 1], bingo_probability=bingo[k - 1])
        for k in range(1, TOTAL_BALLS + 1)
    ]
    return SimulationResult(points=points, trials=trials, engine=engine, seed=seed)
