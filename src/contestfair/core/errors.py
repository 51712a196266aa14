"""Exception types raised by the selection core."""

from __future__ import annotations


class FairnessError(Exception):
    """Base class for domain errors raised by the selection core."""


class InvalidInputError(FairnessError, ValueError):
    """Raised when a hashing helper receives a missing or malformed field."""


class UnknownStrategyError(FairnessError, KeyError):
    """Raised when a selection algorithm name is not registered."""

    def __init__(self, algorithm: str, available: list[str] | None = None):
        super().__init__(algorithm)
        self.algorithm = algorithm
        self.available = sorted(available or [])

    def __str__(self) -> str:
        if self.available:
            return (
                f"Unknown selection algorithm {self.algorithm!r} "
                f"(available: {', '.join(self.available)})"
            )
        return f"Unknown selection algorithm {self.algorithm!r}"


class EntropyUnavailableError(RuntimeError):
    """Raised when the operating system cannot supply secure random bytes.

    This is an infrastructure failure rather than a domain error, so it does
    not derive from :class:`FairnessError` and callers should not retry it.
    """


__all__ = [
    "FairnessError",
    "InvalidInputError",
    "UnknownStrategyError",
    "EntropyUnavailableError",
]
