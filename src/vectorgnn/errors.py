from __future__ import annotations

from typing import Optional


class VectorGnnError(ValueError):
    """
    Base class for all errors raised by vectorgnn.

    Every error is a deterministic consequence of bad input and is
    surfaced synchronously to the immediate caller.
    """


class DimensionMismatch(VectorGnnError):
    """
    Shape invariants were violated (vector length, neighbor count vs.
    edge-weight count, candidate dimension).
    """

    def __init__(
        self,
        message: str,
        *,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
        hop: Optional[int] = None,
    ) -> None:
        self.message = message
        self.expected = expected
        self.actual = actual
        self.hop = hop
        super().__init__(self._render())

    def _render(self) -> str:
        text = self.message
        if self.expected is not None or self.actual is not None:
            text = f"{text} (expected {self.expected}, got {self.actual})"
        if self.hop is not None:
            text = f"hop {self.hop}: {text}"
        return text

    def at_hop(self, hop: int) -> "DimensionMismatch":
        """
        Return a copy of this error tagged with a propagation hop index.
        """
        return DimensionMismatch(
            self.message,
            expected=self.expected,
            actual=self.actual,
            hop=hop,
        )


class InvalidConfig(VectorGnnError):
    """Malformed configuration, rejected before any computation starts."""


class InvalidValue(VectorGnnError):
    """Non-finite or out-of-range numeric input."""


class InvalidDimension(VectorGnnError):
    """A vector with no components was offered for compression."""


class EmptyCandidateSet(VectorGnnError):
    """Search was invoked with zero candidates."""
