from __future__ import annotations

import itertools
import math
from typing import Tuple

TOTAL_BALLS = 90


def combinations(n: int, k: int) -> int:
    """C(n, k) via the multiplicative running product.

    Every partial product is itself a binomial coefficient, so integer floor
    division stays exact.
    """
    if k < 0 or k > n:
        return 0
    if k == 0 or k == n:
        return 1
    k = min(k, n - k)
    res = 1
    for i in range(1, k + 1):
        res = res * (n - i + 1) // i
    return res


LOG_FACTORIALS: Tuple[float, ...] = tuple(
    itertools.accumulate((math.log(i) for i in range(1, TOTAL_BALLS + 1)), initial=0.0)
)


def log_factorial(n: int) -> float:
    if n < 0 or n > TOTAL_BALLS:
        raise ValueError(f"log_factorial is tabulated for 0..{TOTAL_BALLS}, got {n}")
    return LOG_FACTORIALS[n]


def log_combinations(n: int, k: int) -> float:
    """ln C(n, k); -inf stands for log(0) when k is outside [0, n]."""
    if k < 0 or k > n:
        return -math.inf
    return log_factorial(n) - log_factorial(k) - log_factorial(n - k)
