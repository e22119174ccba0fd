from __future__ import annotations

import math

from betarecall.model import Model


def predict_recall(prior: Model, tnow: float, exact: bool = False) -> float:
    """
    Recall probability of `prior` after `tnow` elapsed.

    Returns the log-probability unless `exact`, in which case the probability
    itself, in (0, 1]. Never increases with `tnow`.
    """
    ret = log_recall(prior, tnow / prior.time)
    return math.exp(ret) if exact else ret


def log_recall(model: Model, dt: float) -> float:
    """
    `log(Beta(alpha + dt, beta) / Beta(alpha, beta))`, `dt` in units of `model.time`.
    """
    alpha = model.alpha
    return (
        math.lgamma(alpha + dt)
        - math.lgamma(alpha + model.beta + dt)
        + model.log_gamma_offset
    )


__all__ = ["predict_recall", "log_recall"]
