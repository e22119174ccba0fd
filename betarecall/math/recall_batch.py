from __future__ import annotations

from typing import Sequence

import numpy as np
import torch

from betarecall.model import Model


def predict_recall_batch(
    alpha: torch.Tensor,
    beta: torch.Tensor,
    time: torch.Tensor,
    tnow: torch.Tensor,
    exact: bool = False,
) -> torch.Tensor:
    dt = tnow / time
    ret = (
        torch.lgamma(alpha + dt)
        - torch.lgamma(alpha + beta + dt)
        + torch.lgamma(alpha + beta)
        - torch.lgamma(alpha)
    )
    return torch.exp(ret) if exact else ret


def models_to_tensors(
    models: Sequence[Model],
    *,
    device: torch.device | str | None = None,
    dtype: torch.dtype = torch.float64,
) -> tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    params = np.asarray([m.as_tuple() for m in models], dtype=np.float64)
    params = params.reshape(-1, 3)
    stacked = as_tensor(params, device=device, dtype=dtype)
    return stacked[:, 0], stacked[:, 1], stacked[:, 2]


def as_tensor(
    values,
    *,
    device: torch.device | str | None = None,
    dtype: torch.dtype = torch.float64,
) -> torch.Tensor:
    array = np.asarray(values, dtype=np.float64)
    return torch.as_tensor(array, device=device).to(dtype=dtype)


__all__ = ["predict_recall_batch", "models_to_tensors", "as_tensor"]
