from __future__ import annotations

import math
from typing import Sequence, Tuple

from betarecall.errors import InvalidArgument, NumericalBreakdown
from betarecall.math.gamma import LogGamma, resolve_log_gamma


def log_sum_exp(
    logs: Sequence[float], signs: Sequence[float] = ()
) -> Tuple[float, float]:
    """
    Stable `log(sum(signs * exp(logs)))`.

    `signs` may be shorter than `logs`; missing entries count as 1.0. Since the
    signed sum can be negative, returns `(log(abs(sum)), sign(sum))`. A sum of
    exactly zero gives `(-inf, 0.0)`.
    """
    if len(logs) == 0:
        raise InvalidArgument("log_sum_exp needs at least one term.")
    amax = max(logs)
    if amax == -math.inf:
        return -math.inf, 0.0
    total = 0.0
    for idx, value in enumerate(logs):
        scale = signs[idx] if idx < len(signs) else 1.0
        total += math.exp(value - amax) * scale
    if total == 0.0:
        return -math.inf, 0.0
    sign = math.copysign(1.0, total)
    return math.log(abs(total)) + amax, sign


def subtract_exp(x: float, y: float) -> float:
    """`exp(x) - exp(y)` without overflowing on large arguments."""
    m = max(x, y)
    return math.exp(m) * (math.exp(x - m) - math.exp(y - m))


def log_sub_exp(a: float, b: float) -> float:
    """`log(exp(a) - exp(b))`; requires `a >= b`."""
    magnitude, sign = log_sum_exp((a, b), (1.0, -1.0))
    if sign < 0:
        raise NumericalBreakdown("log_sub_exp of a negative difference", a=a, b=b)
    return magnitude


def mean_var_to_beta(mean: float, variance: float) -> Tuple[float, float]:
    """
    Beta parameters with the given mean and variance.

    See https://en.wikipedia.org/w/index.php?title=Beta_distribution&oldid=774237683#Two_unknown_parameters
    """
    if not 0.0 < mean < 1.0:
        raise NumericalBreakdown("mean outside (0, 1)", mean=mean, variance=variance)
    if not 0.0 < variance < mean * (1.0 - mean):
        raise NumericalBreakdown(
            "variance outside (0, mean * (1 - mean))", mean=mean, variance=variance
        )
    k = mean * (1.0 - mean) / variance - 1.0
    alpha = mean * k
    beta = (1.0 - mean) * k
    valid = alpha > 0.0 and beta > 0.0
    if not (valid and math.isfinite(alpha) and math.isfinite(beta)):
        raise NumericalBreakdown(
            "invalid Beta parameters",
            mean=mean,
            variance=variance,
            alpha=alpha,
            beta=beta,
        )
    return alpha, beta


def log_beta(a: float, b: float, log_gamma: LogGamma | None = None) -> float:
    """`log(Beta(a, b)) = log(Gamma(a) Gamma(b) / Gamma(a + b))`."""
    lg = resolve_log_gamma(log_gamma)
    return lg(a) + lg(b) - lg(a + b)


def log_binom(n: int, k: int, log_gamma: LogGamma | None = None) -> float:
    return -log_beta(1.0 + n - k, 1.0 + k, log_gamma) - math.log(n + 1.0)


__all__ = [
    "log_sum_exp",
    "subtract_exp",
    "log_sub_exp",
    "mean_var_to_beta",
    "log_beta",
    "log_binom",
]
