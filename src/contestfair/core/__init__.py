"""Core selection engine components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .engine import (
    FairnessEngine,
    SelectionResult,
    SelectionStrategy,
    StrategyRegistry,
    default_registry,
)
from .errors import (
    EntropyUnavailableError,
    FairnessError,
    InvalidInputError,
    UnknownStrategyError,
)
from .fairness import (
    FairnessReport,
    analyze_time_distribution,
    calculate_fairness_score,
    generate_fairness_report,
)
from .fraud import FraudAssessment, assess_fraud, calculate_fraud_score
from .hashing import (
    compare_hashes_constant_time,
    generate_device_fingerprint,
    generate_identity_hash,
)
from .priority_queue import PriorityQueue
from .random_source import RandomSource, SecureRandomSource, SeededRandomSource
from .strategies import (
    HybridStrategy,
    PriorityBasedStrategy,
    PureRandomStrategy,
    TimeBasedStrategy,
    WeightedRandomStrategy,
    hybrid_selection,
    priority_based_selection,
    pure_random_selection,
    time_based_selection,
    weighted_random_selection,
)

__all__ = [
    "EntropyUnavailableError",
    "FairnessEngine",
    "FairnessError",
    "FairnessReport",
    "FraudAssessment",
    "HybridStrategy",
    "InvalidInputError",
    "PriorityBasedStrategy",
    "PriorityQueue",
    "PureRandomStrategy",
    "RandomSource",
    "SecureRandomSource",
    "SeededRandomSource",
    "SelectionResult",
    "SelectionStrategy",
    "StrategyRegistry",
    "TimeBasedStrategy",
    "UnknownStrategyError",
    "WeightedRandomStrategy",
    "analyze_time_distribution",
    "assess_fraud",
    "calculate_fairness_score",
    "calculate_fraud_score",
    "compare_hashes_constant_time",
    "default_registry",
    "generate_device_fingerprint",
    "generate_fairness_report",
    "generate_identity_hash",
    "hybrid_selection",
    "priority_based_selection",
    "pure_random_selection",
    "time_based_selection",
    "weighted_random_selection",
]
