"""
Floating-point width plumbing shared by every evaluator.

A single numpy dtype (float32, float64 or longdouble) is chosen per
instantiation and threaded through theta, the Bernoulli cache and the
Hardy Z sums. Complex intermediates use the matching complex dtype.
"""

from __future__ import annotations

from typing import Union

import numpy as np

__all__ = [
    "SINGULAR_EPS",
    "SUPPORTED_DTYPES",
    "DTypeLike",
    "resolve_dtype",
    "complex_dtype",
    "pi_of",
    "critical_point",
    "polar",
]

DTypeLike = Union[str, type, np.dtype]

# |t| below this is treated as the origin (theta = 0, Z = -1/2).
SINGULAR_EPS = 1e-9

SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.float64), np.dtype(np.longdouble))

_COMPLEX = {
    np.dtype(np.float32): np.dtype(np.complex64),
    np.dtype(np.float64): np.dtype(np.complex128),
    np.dtype(np.longdouble): np.dtype(np.clongdouble),
}


def resolve_dtype(dtype: DTypeLike = np.float64) -> np.dtype:
    """Normalize `dtype` and reject anything that is not a supported real float."""
    try:
        dt = np.dtype(dtype)
    except TypeError as e:
        raise ValueError(f"Unknown floating-point type: {dtype!r}") from e
    if dt not in SUPPORTED_DTYPES:
        names = ", ".join(d.name for d in SUPPORTED_DTYPES)
        raise ValueError(f"Unsupported dtype {dt.name!r}; expected one of: {names}")
    return dt


def complex_dtype(dtype: DTypeLike) -> np.dtype:
    return _COMPLEX[resolve_dtype(dtype)]


def pi_of(dtype: DTypeLike):
    """π at the full width of `dtype` (4·atan(1), so longdouble keeps its extra bits)."""
    dt = resolve_dtype(dtype)
    return dt.type(4) * np.arctan(dt.type(1))


def critical_point(t, dtype: DTypeLike = np.float64):
    """s = 1/2 + i·t in the complex dtype matching `dtype`."""
    s = np.zeros((), dtype=complex_dtype(dtype))
    s.real = 0.5
    s.imag = t
    return s[()]


def polar(r, phi, dtype: DTypeLike = np.float64):
    """r·e^{i·phi}, elementwise for arrays; a complex scalar for scalar input."""
    dt = resolve_dtype(dtype)
    phi = np.asarray(phi, dtype=dt)
    out = np.empty(phi.shape, dtype=complex_dtype(dt))
    out.real = r * np.cos(phi)
    out.imag = r * np.sin(phi)
    return out[()] if out.ndim == 0 else out
