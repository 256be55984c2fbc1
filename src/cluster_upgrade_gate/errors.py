"""Precondition error type and verdict classification."""

from __future__ import annotations

from enum import StrEnum


class Verdict(StrEnum):
    """How the orchestrator should act on a precondition outcome."""

    ALLOW = "allow"
    WARN = "warn"
    BLOCK = "block"


class PreconditionError(Exception):
    """A failed precondition.

    ``non_blocking_warning`` distinguishes verdicts the orchestrator should
    record and proceed past from those that must halt the update. ``nested``
    holds the underlying error, if any, for diagnostics.
    """

    def __init__(
        self,
        reason: str,
        message: str,
        name: str,
        *,
        non_blocking_warning: bool = False,
        nested: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.name = name
        self.non_blocking_warning = non_blocking_warning
        self.nested = nested

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"PreconditionError(name={self.name!r}, reason={self.reason!r}, "
            f"non_blocking_warning={self.non_blocking_warning!r})"
        )

    @property
    def verdict(self) -> Verdict:
        """WARN for non-blocking warnings, BLOCK otherwise."""
        return Verdict.WARN if self.non_blocking_warning else Verdict.BLOCK


def verdict_of(error: PreconditionError | None) -> Verdict:
    """Map a precondition outcome to its verdict; None means the check passed."""
    if error is None:
        return Verdict.ALLOW
    return error.verdict
