from __future__ import annotations

import dataclasses
import json
from pathlib import Path

from betarecall.defaults import SolverSettings

_INT_FIELDS = {"max_iterations", "max_bracket_shifts"}


def load_solver_settings(path: str | Path) -> SolverSettings:
    """
    Load solver overrides from a JSON object; missing keys keep their defaults.
    """
    path = Path(path)
    data = _read_json(path)
    known = {f.name for f in dataclasses.fields(SolverSettings)}
    unknown = sorted(set(data).difference(known))
    if unknown:
        raise ValueError(f"{path} has unknown solver settings: {unknown}")
    values = {}
    for key, raw in data.items():
        try:
            value = float(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{path} has a non-numeric value for '{key}'.") from exc
        if key in _INT_FIELDS:
            if not value.is_integer():
                raise ValueError(f"{path} needs a whole number for '{key}'.")
            value = int(value)
        values[key] = value
    return SolverSettings(**values)


def _read_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object.")
    return data


__all__ = ["load_solver_settings"]
