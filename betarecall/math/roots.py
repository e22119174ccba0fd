from __future__ import annotations

import dataclasses
from typing import Callable


@dataclasses.dataclass(frozen=True)
class RootResult:
    root: float
    low: float
    high: float
    iterations: int
    converged: bool


def bisect_root(
    func: Callable[[float], float],
    low: float,
    high: float,
    *,
    tolerance: float,
    max_iterations: int,
) -> RootResult:
    """
    Bisect a sign change of `func` inside `[low, high]`.

    The caller guarantees `func(low)` and `func(high)` differ in sign. Each
    step halves the bracket until it is no wider than `tolerance`. Once the
    bracket endpoints are adjacent floats it stops shrinking, so a tolerance
    below the float spacing around the root runs into `max_iterations` and
    the result comes back with `converged=False`.
    """
    a, b = low, high
    f_a = func(a)
    iterations = 0
    while abs(b - a) > tolerance and iterations < max_iterations:
        iterations += 1
        mid = 0.5 * (a + b)
        f_mid = func(mid)
        if (f_mid > 0) == (f_a > 0):
            a, f_a = mid, f_mid
        else:
            b = mid
    return RootResult(
        root=0.5 * (a + b),
        low=a,
        high=b,
        iterations=iterations,
        converged=abs(b - a) <= tolerance,
    )


__all__ = ["RootResult", "bisect_root"]
