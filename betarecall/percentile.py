from __future__ import annotations

import math

from betarecall.defaults import DEFAULT_PERCENTILE, SolverSettings, resolve_settings
from betarecall.errors import InvalidArgument, NonConvergence
from betarecall.math.roots import bisect_root
from betarecall.model import Model
from betarecall.predict import log_recall

# exp() overflows past ~709.78
_MAX_LOG_DELTA = 700.0


def model_to_percentile_decay(
    model: Model,
    percentile: float = DEFAULT_PERCENTILE,
    coarse: bool = False,
    tolerance: float | None = None,
    *,
    settings: SolverSettings | None = None,
) -> float:
    """
    Elapsed time at which `predict_recall(model, t, exact=True) == percentile`.

    Works on `lndelta = log(t / model.time)`, where the log-recall is
    monotonically decreasing. A bracket is slid (not widened) until it straddles
    the root; `coarse` returns the mean of the bracket ends, good to about an
    order of magnitude, otherwise the bracket is bisected down to `tolerance`.
    """
    settings = resolve_settings(settings)
    if tolerance is None:
        tolerance = settings.tolerance
    if not 0.0 < percentile < 1.0:
        raise InvalidArgument("percentile must be between 0 and 1, exclusive.")
    if not tolerance > 0.0:
        raise InvalidArgument("tolerance must be > 0.")

    log_percentile = math.log(percentile)

    def f(lndelta: float) -> float:
        return log_recall(model, math.exp(lndelta)) - log_percentile

    width = settings.coarse_bracket_width if coarse else settings.precise_bracket_width
    low, high, f_low, f_high = _bracket(f, width, settings.max_bracket_shifts)
    if coarse:
        return (math.exp(low) + math.exp(high)) / 2.0 * model.time
    if f_low == 0:
        return math.exp(low) * model.time
    if f_high == 0:
        return math.exp(high) * model.time

    result = bisect_root(
        f,
        low,
        high,
        tolerance=tolerance,
        max_iterations=settings.max_iterations,
    )
    if not result.converged:
        raise NonConvergence(
            f"percentile search did not reach tolerance {tolerance:g}",
            low=result.low,
            high=result.high,
            iterate=result.root,
            iterations=result.iterations,
        )
    return math.exp(result.root) * model.time


def half_life(
    model: Model,
    coarse: bool = False,
    tolerance: float | None = None,
    *,
    settings: SolverSettings | None = None,
) -> float:
    return model_to_percentile_decay(
        model, 0.5, coarse=coarse, tolerance=tolerance, settings=settings
    )


def _bracket(
    f, width: float, max_shifts: int
) -> tuple[float, float, float, float]:
    low = -width / 2.0
    high = width / 2.0
    f_low = f(low)
    f_high = f(high)
    shifts = 0
    while f_low > 0 and f_high > 0:
        if shifts >= max_shifts or high + width > _MAX_LOG_DELTA:
            raise NonConvergence("failed to bracket (moving up)", low=low, high=high)
        shifts += 1
        low, f_low = high, f_high
        high += width
        f_high = f(high)
    while f_low < 0 and f_high < 0:
        if shifts >= max_shifts or low - width < -_MAX_LOG_DELTA:
            raise NonConvergence("failed to bracket (moving down)", low=low, high=high)
        shifts += 1
        high, f_high = low, f_low
        low -= width
        f_low = f(low)
    # a root exactly on an end counts as bracketed
    if not (f_low >= 0 and f_high <= 0):
        raise NonConvergence("failed to bracket", low=low, high=high)
    return low, high, f_low, f_high


__all__ = ["model_to_percentile_decay", "half_life"]
