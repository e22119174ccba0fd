from __future__ import annotations

import dataclasses

from betarecall.errors import InvalidArgument

DEFAULT_ALPHA_BETA = 4.0
DEFAULT_PERCENTILE = 0.5

REBALANCE_SKEW = 2.0
COARSE_BRACKET_WIDTH = 1.0
PRECISE_BRACKET_WIDTH = 6.0
DEFAULT_TOLERANCE = 1e-4
MAX_ITERATIONS = 10000
MAX_BRACKET_SHIFTS = 100

DEFAULT_CACHE_SIZE = 65536


@dataclasses.dataclass(frozen=True)
class SolverSettings:
    rebalance_skew: float = REBALANCE_SKEW
    coarse_bracket_width: float = COARSE_BRACKET_WIDTH
    precise_bracket_width: float = PRECISE_BRACKET_WIDTH
    tolerance: float = DEFAULT_TOLERANCE
    max_iterations: int = MAX_ITERATIONS
    max_bracket_shifts: int = MAX_BRACKET_SHIFTS

    def __post_init__(self) -> None:
        if self.rebalance_skew <= 1.0:
            raise InvalidArgument("rebalance_skew must be > 1.")
        if self.coarse_bracket_width <= 0 or self.precise_bracket_width <= 0:
            raise InvalidArgument("Bracket widths must be > 0.")
        if self.tolerance <= 0:
            raise InvalidArgument("tolerance must be > 0.")
        if self.max_iterations < 1:
            raise InvalidArgument("max_iterations must be >= 1.")
        if self.max_bracket_shifts < 0:
            raise InvalidArgument("max_bracket_shifts must be >= 0.")


DEFAULT_SETTINGS = SolverSettings()


def resolve_settings(settings: SolverSettings | None) -> SolverSettings:
    if settings is None:
        return DEFAULT_SETTINGS
    return settings


__all__ = [
    "DEFAULT_ALPHA_BETA",
    "DEFAULT_PERCENTILE",
    "REBALANCE_SKEW",
    "COARSE_BRACKET_WIDTH",
    "PRECISE_BRACKET_WIDTH",
    "DEFAULT_TOLERANCE",
    "MAX_ITERATIONS",
    "MAX_BRACKET_SHIFTS",
    "DEFAULT_CACHE_SIZE",
    "SolverSettings",
    "DEFAULT_SETTINGS",
    "resolve_settings",
]
