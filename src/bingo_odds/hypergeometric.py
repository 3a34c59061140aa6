from __future__ import annotations

import math

from .combinatorics import log_combinations


def hypergeometric(
    population: int,
    successes_in_population: int,
    sample_size: int,
    successes_in_sample: int,
) -> float:
    """P(X = x) for X ~ Hypergeometric(N, K, n).

    Impossible argument combinations return 0.0 instead of raising. The
    population is limited to the 90-ball log-factorial table; a larger one
    is a possible draw, not an impossible one, so it raises ValueError.
    """
    N, K, n, x = population, successes_in_population, sample_size, successes_in_sample
    if n < 0 or x < 0 or n > N or x > K or (n - x) > (N - K):
        return 0.0
    log_p = log_combinations(K, x) + log_combinations(N - K, n - x) - log_combinations(N, n)
    return math.exp(log_p)
