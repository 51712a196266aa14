"""Random sources used by the selection strategies."""

from __future__ import annotations

import hashlib
import secrets
from typing import Protocol, runtime_checkable

from .errors import EntropyUnavailableError

_LCG_MULTIPLIER = 9301
_LCG_INCREMENT = 49297
_LCG_MODULUS = 233280
_SEED_PREFIX_DIGITS = 16


@runtime_checkable
class RandomSource(Protocol):
    """Source of uniform draws consumed by the strategies."""

    def randbelow(self, bound: int) -> int:
        """Return an integer drawn uniformly from ``[0, bound)``."""

    def random(self) -> float:
        """Return a float drawn uniformly from ``[0.0, 1.0)``."""


class SecureRandomSource:
    """Operating-system entropy backed source (default for live draws)."""

    def __init__(self) -> None:
        self._system = secrets.SystemRandom()

    def randbelow(self, bound: int) -> int:
        if bound <= 0:
            raise ValueError("bound must be positive")
        try:
            return secrets.randbelow(bound)
        except (OSError, NotImplementedError) as exc:
            raise EntropyUnavailableError("system entropy source unavailable") from exc

    def random(self) -> float:
        try:
            return self._system.random()
        except (OSError, NotImplementedError) as exc:
            raise EntropyUnavailableError("system entropy source unavailable") from exc


class SeededRandomSource:
    """Reproducible linear-congruential source derived from a published seed.

    The initial state is the leading hexadecimal prefix of the seed (at most
    sixteen digits). Seeds without a hex prefix are hashed with SHA-256 first
    so every seed string maps to a stable state. Each draw advances the state
    with ``state = (state * 9301 + 49297) % 233280``.

    This trades cryptographic strength for verifiability: anyone holding the
    seed can recompute the same draw.
    """

    def __init__(self, seed: str) -> None:
        if not isinstance(seed, str) or not seed.strip():
            raise ValueError("seed must be a non-empty string")
        self.seed = seed
        self._state = self._initial_state(seed.strip())

    @staticmethod
    def _initial_state(seed: str) -> int:
        prefix = ""
        for char in seed[:_SEED_PREFIX_DIGITS]:
            if char not in "0123456789abcdefABCDEF":
                break
            prefix += char
        if not prefix:
            prefix = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:_SEED_PREFIX_DIGITS]
        return int(prefix, 16)

    def _advance(self) -> float:
        self._state = (self._state * _LCG_MULTIPLIER + _LCG_INCREMENT) % _LCG_MODULUS
        return self._state / _LCG_MODULUS

    def randbelow(self, bound: int) -> int:
        if bound <= 0:
            raise ValueError("bound must be positive")
        return int(self._advance() * bound)

    def random(self) -> float:
        return self._advance()


def resolve_random_source(
    *,
    seed: str | None = None,
    rng: RandomSource | None = None,
) -> RandomSource:
    """Pick the source for a draw: explicit ``rng``, then ``seed``, then OS entropy.

    Blank seeds count as unset.
    """
    if rng is not None:
        return rng
    if seed and seed.strip():
        return SeededRandomSource(seed)
    return SecureRandomSource()


__all__ = [
    "RandomSource",
    "SecureRandomSource",
    "SeededRandomSource",
    "resolve_random_source",
]
