from __future__ import annotations

import numpy as np

from .numeric import SINGULAR_EPS, DTypeLike, pi_of, resolve_dtype

__all__ = ["theta"]


def theta(t, dtype: DTypeLike = np.float64):
    r"""
    Riemann–Siegel theta function from its Stirling expansion:

        θ(t) ≈ (t/2) ln(t/2π) − t/2 − π/8 + 1/(48t) + 7/(5760 t³)

    Accurate for moderate-to-large |t|. θ is odd, so negative t gives
    −θ(|t|); |t| < 1e-9 returns 0. Accepts a scalar or an array and
    returns the same shape in `dtype`.
    """
    dt = resolve_dtype(dtype)
    pi = pi_of(dt)
    t = np.asarray(t, dtype=dt)
    a = np.abs(t)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        half = a / 2
        val = (half * np.log(a / (2 * pi)) - half - pi / 8
               + 1 / (48 * a) + 7 / (5760 * a ** 3))
    out = np.where(a < SINGULAR_EPS, dt.type(0), np.sign(t) * val)
    return dt.type(out) if out.ndim == 0 else out.astype(dt, copy=False)
