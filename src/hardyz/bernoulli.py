"""
Bernoulli numbers for the Euler–Maclaurin correction terms.

Floating-point values come from the binomial recurrence
    B_m = -1/(m+1) · Σ_{k=0}^{m-1} C(m+1, k) B_k,    B_0 = 1,
which fixes the "first" convention B_1 = -1/2. Each B_m needs every earlier
entry, so the sequence is grown strictly in ascending order and memoized in a
`BernoulliCache`, one per floating-point width, shared process-wide.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Tuple

import numpy as np

from .logging_config import get_logger
from .numeric import DTypeLike, resolve_dtype

__all__ = ["binomial", "BernoulliCache", "bernoulli_cache", "bernoulli"]

log = get_logger(__name__)


def binomial(n: int, k: int, dtype: DTypeLike = np.float64):
    """
    C(n, k) as a float of `dtype`, via the running product ∏ (n-i+1)/i.

    Out-of-range selections (k < 0 or k > n) give 0 rather than raising.
    """
    dt = resolve_dtype(dtype)
    if k < 0 or k > n:
        return dt.type(0)
    if k == 0 or k == n:
        return dt.type(1)
    k = min(k, n - k)
    res = dt.type(1)
    for i in range(1, k + 1):
        res = res * dt.type(n - i + 1) / dt.type(i)
    return res


def _check_index(n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise ValueError(f"Bernoulli index must be an int, got {n!r}")
    if n < 0:
        raise ValueError(f"Bernoulli index must be >= 0, got {n}")


class BernoulliCache:
    """
    Append-only memo of B_0..B_K in one floating-point width.

    Lookups of resident indices are lock-free. Growth runs under `_lock`, and
    each entry is appended only once fully computed, so concurrent readers
    never see a partial or out-of-order sequence.
    """

    def __init__(self, dtype: DTypeLike = np.float64) -> None:
        self.dtype = resolve_dtype(dtype)
        self._values: List = [self.dtype.type(1)]
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._values)

    def values(self) -> Tuple:
        """Snapshot of the resident entries."""
        return tuple(self._values)

    def get(self, n: int):
        _check_index(n)
        values = self._values
        if n < len(values):
            return values[n]
        with self._lock:
            self._extend(n)
        return values[n]

    def _extend(self, n: int) -> None:
        # caller holds the lock; another thread may already have grown past n
        values = self._values
        start = len(values)
        one = self.dtype.type(1)
        for m in range(start, n + 1):
            s = self.dtype.type(0)
            for k in range(m):
                s += binomial(m + 1, k, self.dtype) * values[k]
            values.append(-one / self.dtype.type(m + 1) * s)
        if n >= start:
            log.debug(f"Bernoulli cache ({self.dtype.name}) grown {start} -> {len(values)}")


_CACHES: Dict[np.dtype, BernoulliCache] = {}
_CACHES_LOCK = threading.Lock()


def bernoulli_cache(dtype: DTypeLike = np.float64) -> BernoulliCache:
    """The process-wide cache for `dtype`, created on first use."""
    dt = resolve_dtype(dtype)
    cache = _CACHES.get(dt)
    if cache is None:
        with _CACHES_LOCK:
            cache = _CACHES.setdefault(dt, BernoulliCache(dt))
    return cache


def bernoulli(n: int, dtype: DTypeLike = np.float64):
    """B_n from the shared cache for `dtype`."""
    return bernoulli_cache(dtype).get(n)

