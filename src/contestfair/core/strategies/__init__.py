"""Winner selection strategies."""

from .pure_random import PureRandomConfig, PureRandomStrategy, pure_random_selection
from .weighted_random import (
    WeightedRandomConfig,
    WeightedRandomStrategy,
    participant_weight,
    weighted_random_selection,
)
from .priority_based import PriorityBasedStrategy, priority_based_selection
from .time_based import TimeBasedConfig, TimeBasedStrategy, time_based_selection
from .hybrid import HybridConfig, HybridStrategy, hybrid_selection

__all__ = [
    "HybridConfig",
    "HybridStrategy",
    "PriorityBasedStrategy",
    "PureRandomConfig",
    "PureRandomStrategy",
    "TimeBasedConfig",
    "TimeBasedStrategy",
    "WeightedRandomConfig",
    "WeightedRandomStrategy",
    "hybrid_selection",
    "participant_weight",
    "priority_based_selection",
    "pure_random_selection",
    "time_based_selection",
    "weighted_random_selection",
]
