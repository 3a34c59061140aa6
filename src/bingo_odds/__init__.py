"""Win probabilities for 90-ball bingo: theoretical curves and live odds."""

from .curve import ChartPoint, generate_chart_data
from .live import GameContext, ProgressSnapshot, calculate_live_probabilities
from .version import __version__

__all__ = [
    "ChartPoint",
    "GameContext",
    "ProgressSnapshot",
    "calculate_live_probabilities",
    "generate_chart_data",
    "__version__",
]
