from __future__ import annotations

import dataclasses
import math
from typing import Sequence, Tuple

from betarecall.defaults import DEFAULT_ALPHA_BETA
from betarecall.errors import InvalidArgument


@dataclasses.dataclass(frozen=True)
class Model:
    """
    Memory state of one fact.

    Recall probability at elapsed `time` (caller-defined units) is
    Beta(`alpha`, `beta`) distributed. Models never change; updates return new
    ones. Callers persist `as_tuple()` together with their own timestamp.
    """

    alpha: float
    beta: float
    time: float
    log_gamma_offset: float = dataclasses.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for name in ("alpha", "beta", "time"):
            value = float(getattr(self, name))
            if not (math.isfinite(value) and value > 0):
                raise InvalidArgument(
                    f"Model {name} must be finite and > 0, got {value}."
                )
            object.__setattr__(self, name, value)
        # lgamma(alpha + beta) - lgamma(alpha), shared by every prediction
        object.__setattr__(
            self,
            "log_gamma_offset",
            math.lgamma(self.alpha + self.beta) - math.lgamma(self.alpha),
        )

    @classmethod
    def from_time(cls, time: float) -> "Model":
        """`alpha = beta = 4` at `time`."""
        return cls(DEFAULT_ALPHA_BETA, DEFAULT_ALPHA_BETA, time)

    @classmethod
    def with_shape(cls, time: float, alpha_beta: float) -> "Model":
        """`alpha = beta = alpha_beta` at `time`."""
        return cls(alpha_beta, alpha_beta, time)

    @classmethod
    def explicit(cls, time: float, alpha: float, beta: float) -> "Model":
        return cls(alpha, beta, time)

    @classmethod
    def from_tuple(cls, values: Sequence[float]) -> "Model":
        if len(values) != 3:
            raise InvalidArgument("Model tuples are (alpha, beta, time).")
        alpha, beta, time = values
        return cls(alpha, beta, time)

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.alpha, self.beta, self.time

    def to_dict(self) -> dict[str, float]:
        return {"alpha": self.alpha, "beta": self.beta, "time": self.time}


__all__ = ["Model"]
