from betarecall.defaults import DEFAULT_SETTINGS, SolverSettings
from betarecall.errors import (
    ErrorKind,
    InvalidArgument,
    NonConvergence,
    NumericalBreakdown,
    RecallModelError,
)
from betarecall.math.gamma import LogGammaCache, default_log_gamma
from betarecall.model import Model
from betarecall.percentile import half_life, model_to_percentile_decay
from betarecall.predict import predict_recall
from betarecall.update import (
    QuizOutcome,
    rebalance,
    update_recall,
    update_recall_binomial,
)

__all__ = [
    "Model",
    "QuizOutcome",
    "predict_recall",
    "update_recall",
    "update_recall_binomial",
    "rebalance",
    "model_to_percentile_decay",
    "half_life",
    "LogGammaCache",
    "default_log_gamma",
    "SolverSettings",
    "DEFAULT_SETTINGS",
    "ErrorKind",
    "RecallModelError",
    "InvalidArgument",
    "NumericalBreakdown",
    "NonConvergence",
]
