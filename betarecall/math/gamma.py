from __future__ import annotations

import math
import threading
from collections import OrderedDict
from typing import Callable, Optional

from betarecall.defaults import DEFAULT_CACHE_SIZE

LogGamma = Callable[[float], float]


class LogGammaCache:
    """
    Memoized `math.lgamma`, safe to share between threads.

    The lock only guards the dictionary; `lgamma` itself is evaluated outside
    it, so a miss never holds up lookups of other keys. Two threads missing
    the same key both compute it and store the same value. With a `maxsize`,
    the least recently used keys are evicted; `maxsize=None` never evicts and
    `maxsize=0` disables memoization.
    """

    def __init__(self, maxsize: Optional[int] = DEFAULT_CACHE_SIZE) -> None:
        if maxsize is not None and maxsize < 0:
            raise ValueError("maxsize must be >= 0 or None.")
        self.maxsize = maxsize
        self.hits = 0
        self.misses = 0
        self._values: OrderedDict[float, float] = OrderedDict()
        self._lock = threading.Lock()

    def __call__(self, x: float) -> float:
        key = float(x)
        with self._lock:
            value = self._values.get(key)
            if value is not None:
                self._values.move_to_end(key)
                self.hits += 1
                return value
            self.misses += 1
        value = math.lgamma(key)
        if self.maxsize == 0:
            return value
        with self._lock:
            self._values[key] = value
            self._values.move_to_end(key)
            if self.maxsize is not None:
                while len(self._values) > self.maxsize:
                    self._values.popitem(last=False)
        return value

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def __contains__(self, x: float) -> bool:
        with self._lock:
            return float(x) in self._values

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self.hits = 0
            self.misses = 0


_DEFAULT_CACHE = LogGammaCache()


def default_log_gamma() -> LogGammaCache:
    return _DEFAULT_CACHE


def resolve_log_gamma(log_gamma: LogGamma | None) -> LogGamma:
    if log_gamma is None:
        return _DEFAULT_CACHE
    return log_gamma


__all__ = ["LogGamma", "LogGammaCache", "default_log_gamma", "resolve_log_gamma"]
