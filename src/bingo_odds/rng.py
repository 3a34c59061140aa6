from __future__ import annotations

import hashlib
import random
from typing import List

try:  # optional dependency
    import numpy as _np  # type: ignore
except ImportError:  # pragma: no cover - optional
    _np = None


class BallSource:
    """Seeded source of random draw orders."""

    engine = ""

    def draw_order(self, total: int) -> List[int]:
        raise NotImplementedError


class PyRandomBallSource(BallSource):
    engine = "py_random"

    def __init__(self, seed: int):
        self._rng = random.Random(seed)

    def draw_order(self, total: int) -> List[int]:
        balls = list(range(1, total + 1))
        self._rng.shuffle(balls)
        return balls


class NumpyPCG64BallSource(BallSource):  # pragma: no cover - covered when numpy present
    engine = "numpy_pcg64"

    def __init__(self, seed: int):
        if _np is None:
            raise RuntimeError("numpy is not installed; install bingo-odds[pcg]")
        self._rng = _np.random.Generator(_np.random.PCG64(seed))

    def draw_order(self, total: int) -> List[int]:
        return [int(x) for x in self._rng.permutation(total) + 1]


def create_ball_source(engine: str, seed: int) -> BallSource:
    engine = (engine or "py_random").strip().lower()
    if engine == "py_random":
        return PyRandomBallSource(seed)
    if engine == "numpy_pcg64":
        return NumpyPCG64BallSource(seed)
    raise ValueError(f"Unsupported RNG engine: {engine}")


def derive_batch_seed(base_seed: int, index: int, purpose: str) -> int:
    """63-bit non-negative seed for batch `index`, stable across runs."""
    payload = f"{base_seed}|{index}|{purpose}".encode("utf-8")
    digest = hashlib.sha256(payload).digest()
    return int.from_bytes(digest[:8], byteorder="big") & ((1 << 63) - 1)
