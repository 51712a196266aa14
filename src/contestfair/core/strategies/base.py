"""Helpers shared by the selection strategies."""

from __future__ import annotations


def clamp_count(count: int, pool_size: int) -> int:
    """Clamp a requested winner count to ``[0, pool_size]``."""
    if count <= 0 or pool_size <= 0:
        return 0
    return min(count, pool_size)
