from __future__ import annotations

import dataclasses
import logging
import math

from betarecall.defaults import SolverSettings, resolve_settings
from betarecall.errors import InvalidArgument, NumericalBreakdown
from betarecall.math.gamma import LogGamma, resolve_log_gamma
from betarecall.math.logspace import (
    log_beta,
    log_binom,
    log_sub_exp,
    log_sum_exp,
    mean_var_to_beta,
    subtract_exp,
)
from betarecall.model import Model
from betarecall.percentile import model_to_percentile_decay


@dataclasses.dataclass(frozen=True)
class QuizOutcome:
    """
    `successes` out of `total` independent trials; `binary` marks a pass/fail quiz.
    """

    successes: int
    total: int
    binary: bool = False

    def __post_init__(self) -> None:
        for name in ("successes", "total"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgument(f"{name} must be an integer, got {value!r}.")
        if self.total < 1:
            raise InvalidArgument("total must be >= 1.")
        if not 0 <= self.successes <= self.total:
            raise InvalidArgument("successes must be between 0 and total.")
        if self.binary and self.total != 1:
            raise InvalidArgument("Binary outcomes have exactly one trial.")

    @classmethod
    def from_result(cls, passed: bool) -> "QuizOutcome":
        return cls(successes=1 if passed else 0, total=1, binary=True)

    @property
    def passed(self) -> bool:
        return self.successes == self.total


def update_recall(
    prior: Model,
    result: bool,
    tnow: float,
    *,
    rebalance: bool = True,
    tback: float | None = None,
    log_gamma: LogGamma | None = None,
    settings: SolverSettings | None = None,
) -> Model:
    """
    Posterior model after a pass/fail quiz `tnow` after the last review.

    The posterior describes recall at `tback` (default: `prior.time`). When it
    comes out lopsided, it is re-anchored near its own halflife unless
    `rebalance` is False.
    """
    return _update(
        prior,
        QuizOutcome.from_result(bool(result)),
        tnow,
        allow_rebalance=rebalance,
        tback=tback,
        log_gamma=resolve_log_gamma(log_gamma),
        settings=resolve_settings(settings),
    )


def update_recall_binomial(
    prior: Model,
    successes: int,
    total: int,
    tnow: float,
    *,
    rebalance: bool = True,
    tback: float | None = None,
    log_gamma: LogGamma | None = None,
    settings: SolverSettings | None = None,
) -> Model:
    """
    Posterior model after `successes` out of `total` independent trials at `tnow`.
    """
    return _update(
        prior,
        QuizOutcome(successes, total),
        tnow,
        allow_rebalance=rebalance,
        tback=tback,
        log_gamma=resolve_log_gamma(log_gamma),
        settings=resolve_settings(settings),
    )


def rebalance(
    prior: Model,
    outcome: QuizOutcome,
    tnow: float,
    proposed: Model,
    *,
    log_gamma: LogGamma | None = None,
    settings: SolverSettings | None = None,
) -> Model:
    """
    Re-run the update anchored at the rough halflife of `proposed` if its
    `alpha` and `beta` are too far apart, otherwise return it unchanged.
    """
    settings = resolve_settings(settings)
    skew = settings.rebalance_skew
    if proposed.alpha > skew * proposed.beta or proposed.beta > skew * proposed.alpha:
        rough_halflife = model_to_percentile_decay(
            proposed, 0.5, coarse=True, settings=settings
        )
        logging.debug(
            "Rebalancing %s to rough halflife %.6g.", proposed, rough_halflife
        )
        return _update(
            prior,
            outcome,
            tnow,
            allow_rebalance=False,
            tback=rough_halflife,
            log_gamma=resolve_log_gamma(log_gamma),
            settings=settings,
        )
    return proposed


def _update(
    prior: Model,
    outcome: QuizOutcome,
    tnow: float,
    *,
    allow_rebalance: bool,
    tback: float | None,
    log_gamma: LogGamma,
    settings: SolverSettings,
) -> Model:
    if not tnow > 0:
        raise InvalidArgument(f"tnow must be > 0, got {tnow}.")
    if tback is None:
        tback = prior.time
    elif not tback > 0:
        raise InvalidArgument(f"tback must be > 0, got {tback}.")

    if outcome.binary:
        proposed = _update_bernoulli(prior, outcome.passed, tnow, tback, log_gamma)
    else:
        proposed = _update_binomial(prior, outcome, tnow, tback, log_gamma)
    if not allow_rebalance:
        return proposed
    return rebalance(
        prior, outcome, tnow, proposed, log_gamma=log_gamma, settings=settings
    )


def _update_bernoulli(
    prior: Model, passed: bool, tnow: float, tback: float, log_gamma: LogGamma
) -> Model:
    alpha, beta, t = prior.alpha, prior.beta, prior.time
    dt = tnow / t
    et = tnow / tback

    if passed:
        if tback == t:
            # conjugate at the prior's own time
            return Model(alpha + dt, beta, t)
        fixed = log_gamma(alpha + dt + beta) - log_gamma(alpha + dt)
        first = alpha + dt / et * (1.0 + et)
        second = alpha + dt / et * (2.0 + et)
        log_mean = fixed + log_gamma(first) - log_gamma(first + beta)
        log_m2 = fixed + log_gamma(second) - log_gamma(second + beta)
        mean = math.exp(log_mean)
        variance = subtract_exp(log_m2, 2.0 * log_mean)
    else:
        log_denominator = log_sub_exp(
            log_beta(alpha, beta, log_gamma), log_beta(alpha + dt, beta, log_gamma)
        )
        mean = subtract_exp(
            log_beta(alpha + dt / et, beta, log_gamma) - log_denominator,
            log_beta(alpha + dt / et * (et + 1.0), beta, log_gamma) - log_denominator,
        )
        m2 = subtract_exp(
            log_beta(alpha + 2.0 * dt / et, beta, log_gamma) - log_denominator,
            log_beta(alpha + dt / et * (et + 2.0), beta, log_gamma) - log_denominator,
        )
        if not m2 > 0:
            raise NumericalBreakdown(
                "invalid second moment", **_diagnostics(prior, tnow, tback, m2=m2)
            )
        variance = m2 - mean * mean

    if not mean > 0:
        raise NumericalBreakdown(
            "invalid mean", **_diagnostics(prior, tnow, tback, mean=mean)
        )
    if not variance > 0:
        raise NumericalBreakdown(
            "invalid variance",
            **_diagnostics(prior, tnow, tback, mean=mean, variance=variance),
        )
    new_alpha, new_beta = mean_var_to_beta(mean, variance)
    return Model(new_alpha, new_beta, tback)


def _update_binomial(
    prior: Model, outcome: QuizOutcome, tnow: float, tback: float, log_gamma: LogGamma
) -> Model:
    alpha, beta, t = prior.alpha, prior.beta, prior.time
    successes = outcome.successes
    failures = outcome.total - successes
    dt = tnow / t
    et = tback / tnow

    binomlns = [log_binom(failures, i, log_gamma) for i in range(failures + 1)]
    signs = [(-1.0) ** i for i in range(failures + 1)]
    logs = []
    for m, label in enumerate(("denominator", "mean numerator", "m2 numerator")):
        terms = [
            binomlns[i]
            + log_beta(beta, alpha + dt * (successes + i) + m * dt * et, log_gamma)
            for i in range(failures + 1)
        ]
        magnitude, sign = log_sum_exp(terms, signs)
        if not sign > 0:
            raise NumericalBreakdown(
                f"non-positive {label}",
                **_diagnostics(
                    prior, tnow, tback, successes=successes, total=outcome.total
                ),
            )
        logs.append(magnitude)
    log_denominator, log_mean_num, log_m2_num = logs

    mean = math.exp(log_mean_num - log_denominator)
    m2 = math.exp(log_m2_num - log_denominator)
    mean_sq = math.exp(2.0 * (log_mean_num - log_denominator))
    variance = m2 - mean_sq

    if not mean > 0:
        raise NumericalBreakdown(
            "invalid mean", **_diagnostics(prior, tnow, tback, mean=mean)
        )
    if not m2 > 0:
        raise NumericalBreakdown(
            "invalid second moment", **_diagnostics(prior, tnow, tback, m2=m2)
        )
    if not variance > 0:
        raise NumericalBreakdown(
            "invalid variance",
            **_diagnostics(
                prior,
                tnow,
                tback,
                successes=successes,
                total=outcome.total,
                mean=mean,
                m2=m2,
                variance=variance,
            ),
        )
    new_alpha, new_beta = mean_var_to_beta(mean, variance)
    return Model(new_alpha, new_beta, tback)


def _diagnostics(prior: Model, tnow: float, tback: float, **extra) -> dict:
    return {
        "alpha": prior.alpha,
        "beta": prior.beta,
        "time": prior.time,
        "tnow": tnow,
        "tback": tback,
        **extra,
    }


__all__ = [
    "QuizOutcome",
    "update_recall",
    "update_recall_binomial",
    "rebalance",
]
