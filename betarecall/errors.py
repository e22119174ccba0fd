from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    INVALID_ARGUMENT = "invalid_argument"
    NUMERICAL_BREAKDOWN = "numerical_breakdown"
    NON_CONVERGENCE = "non_convergence"


class RecallModelError(Exception):
    """Base class; callers branch on `kind`."""

    kind: ErrorKind


class InvalidArgument(RecallModelError, ValueError):
    kind = ErrorKind.INVALID_ARGUMENT


class NumericalBreakdown(RecallModelError, ArithmeticError):
    """An update or conversion produced a non-positive moment or Beta parameter."""

    kind = ErrorKind.NUMERICAL_BREAKDOWN

    def __init__(self, message: str, **diagnostics: Any) -> None:
        self.diagnostics: Dict[str, Any] = diagnostics
        if diagnostics:
            details = ", ".join(
                f"{key}={_format_value(value)}" for key, value in diagnostics.items()
            )
            message = f"{message} ({details})"
        super().__init__(message)


class NonConvergence(RecallModelError, RuntimeError):
    """The percentile solver could not bracket or refine a root."""

    kind = ErrorKind.NON_CONVERGENCE

    def __init__(
        self,
        message: str,
        *,
        low: float,
        high: float,
        iterate: Optional[float] = None,
        iterations: int = 0,
    ) -> None:
        self.low = low
        self.high = high
        self.iterate = iterate
        self.iterations = iterations
        super().__init__(
            f"{message} (bracket=[{low:g}, {high:g}], iterate={iterate}, "
            f"iterations={iterations})"
        )


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


__all__ = [
    "ErrorKind",
    "RecallModelError",
    "InvalidArgument",
    "NumericalBreakdown",
    "NonConvergence",
]
