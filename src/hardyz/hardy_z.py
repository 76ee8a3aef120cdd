"""
Hardy Z-function on the critical line.

    Z(t) = e^{iθ(t)} ζ(1/2 + it),   real for real t.

Three algorithms, selected by `Method`:

- EULER_MACLAURIN: truncated Dirichlet series for ζ(s) with the integral,
  half-term, B_2 and B_4 corrections, rotated by e^{iθ}. O(|t|) terms.
- RIEMANN_SIEGEL: main sum 2 Σ_{n≤N} cos(θ(t) − t ln n)/√n with
  N = ⌊√(t/2π)⌋, no remainder terms. O(√t) terms.
- ODLYZKO_SCHONHAGE: the Riemann–Siegel main sum over a whole block of
  samples, sharing 1/√n and ln n (and the phase at the block start) across
  every point; each sample only pays a phase shift −δ ln n per term.

Conventions
-----------
- |t| < 1e-9 gives Z = -1/2 for every method.
- Riemann–Siegel with N ≤ 1 gives 0.
- The float width is fixed per `HardyZ` instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

from .bernoulli import bernoulli_cache
from .numeric import SINGULAR_EPS, DTypeLike, critical_point, pi_of, polar, resolve_dtype
from .theta import theta
from .types import Block, Method

__all__ = ["HardyZ", "compute", "compute_block"]

MethodLike = Union[Method, str]


@dataclass(frozen=True)
class _BaseTerms:
    """
    Per-block scratch for the Odlyzko–Schönhage path: ln n and
    (1/√n)·e^{−i·start_t·ln n} for n = 1..N. Read-only once built.
    """

    log_n: np.ndarray
    terms: np.ndarray

    @classmethod
    def at(cls, start_t, N: int, dtype: np.dtype) -> "_BaseTerms":
        n = np.arange(1, N + 1, dtype=dtype)
        log_n = np.log(n)
        terms = polar(1 / np.sqrt(n), -start_t * log_n, dtype)
        log_n.setflags(write=False)
        terms.setflags(write=False)
        return cls(log_n, terms)

    def shifted_sum(self, delta, dtype: np.dtype):
        """Σ_n term_n · e^{−i·δ·ln n}."""
        return np.sum(self.terms * polar(1, -delta * self.log_n, dtype))


class HardyZ:
    """Hardy Z evaluator for one floating-point width."""

    def __init__(self, dtype: DTypeLike = np.float64) -> None:
        self.dtype = resolve_dtype(dtype)
        self._pi = pi_of(self.dtype)
        self._bernoulli = bernoulli_cache(self.dtype)

    def __repr__(self) -> str:
        return f"HardyZ(dtype={self.dtype.name})"

    # ------------------------------ public API ------------------------------

    def compute(self, t, method: MethodLike = Method.EULER_MACLAURIN):
        """Z(t) with the chosen algorithm."""
        method = Method.parse(method)
        t = self.dtype.type(t)
        if abs(t) < SINGULAR_EPS:
            return self.dtype.type(-0.5)

        if method is Method.EULER_MACLAURIN:
            return self._compute_em(t)
        if method is Method.RIEMANN_SIEGEL:
            return self._compute_rs(t)
        if method is Method.ODLYZKO_SCHONHAGE:
            return self._compute_os(Block(t, 0.0, 1))[0]
        raise ValueError(f"Unhandled method: {method!r}")

    def compute_block(
        self,
        start_t,
        length,
        points: int,
        method: MethodLike = Method.EULER_MACLAURIN,
    ) -> np.ndarray:
        """
        Z at t_k = start_t + k·length/(points-1), k = 0..points-1, in order.

        Only ODLYZKO_SCHONHAGE shares work between samples; the other
        methods evaluate every sample independently.
        """
        method = Method.parse(method)
        block = Block(start_t, length, points)
        if method is Method.ODLYZKO_SCHONHAGE:
            return self._compute_os(block)
        out = np.empty(block.points, dtype=self.dtype)
        for k, t in enumerate(block.samples(self.dtype)):
            out[k] = self.compute(t, method)
        return out

    # ---------------------------- Euler–Maclaurin ----------------------------

    def _zeta_em(self, s, N: int):
        """ζ(s) by Euler–Maclaurin summation cut at N, with B_2 and B_4 terms."""
        if N <= 1:
            return np.zeros((), dtype=s.dtype)[()]

        n = np.arange(1, N, dtype=self.dtype)
        head = np.sum(np.power(n, -s))

        N_f = self.dtype.type(N)
        N_pow_minus_s = np.power(N_f, -s)
        inv_N = 1 / N_f

        term_integral = N_f * N_pow_minus_s / (s - 1)
        term_half = N_pow_minus_s / 2

        # B_{2k}/(2k)! · f^{(2k-1)}(N) for f(x) = x^{-s}; the series is subtracted
        B2 = self._bernoulli.get(2)
        B4 = self._bernoulli.get(4)
        term_b2 = (B2 / 2) * (-s) * (N_pow_minus_s * inv_N)
        term_b4 = (B4 / 24) * (-s) * (-s - 1) * (-s - 2) * (N_pow_minus_s * inv_N ** 3)

        return head + term_integral + term_half - term_b2 - term_b4

    def _compute_em(self, t):
        N = max(int(abs(t)) + 5, 15)
        zeta = self._zeta_em(critical_point(t, self.dtype), N)
        rot = polar(1, theta(t, self.dtype), self.dtype)
        return self.dtype.type((rot * zeta).real)

    # ----------------------------- Riemann–Siegel -----------------------------

    def _truncation(self, t) -> int:
        return int(np.floor(np.sqrt(abs(t) / (2 * self._pi))))

    def _compute_rs(self, t):
        N = self._truncation(t)
        if N <= 1:
            return self.dtype.type(0)
        n = np.arange(1, N + 1, dtype=self.dtype)
        th = theta(t, self.dtype)
        total = np.sum(np.cos(th - t * np.log(n)) / np.sqrt(n))
        return self.dtype.type(2 * total)

    # --------------------------- Odlyzko–Schönhage ---------------------------

    def _compute_os(self, block: Block) -> np.ndarray:
        start = self.dtype.type(block.start_t)
        N = max(self._truncation(start), 1)
        base = _BaseTerms.at(start, N, self.dtype)

        deltas = block.offsets(self.dtype)
        ts = start + deltas
        thetas = theta(ts, self.dtype)

        out = np.empty(block.points, dtype=self.dtype)
        for k, delta in enumerate(deltas):
            if abs(ts[k]) < SINGULAR_EPS:
                out[k] = -0.5
                continue
            rot = polar(1, thetas[k], self.dtype)
            out[k] = 2 * (rot * base.shifted_sum(delta, self.dtype)).real
        return out


_DEFAULT = HardyZ(np.float64)


def compute(t, method: MethodLike = Method.EULER_MACLAURIN) -> float:
    """Z(t) in double precision."""
    return _DEFAULT.compute(t, method)


def compute_block(start_t, length, points: int,
                  method: MethodLike = Method.EULER_MACLAURIN) -> np.ndarray:
    """Z over an evenly spaced block, in double precision."""
    return _DEFAULT.compute_block(start_t, length, points, method)
