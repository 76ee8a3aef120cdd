from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

Bracket = Tuple[float, float]
Sample = Tuple[float, float]
Edges = Tuple[Optional[Sample], Optional[Sample]]


class Method(Enum):
    """Hardy Z algorithms. Each member is a separate algorithm, not a tuning knob."""

    EULER_MACLAURIN = "euler-maclaurin"
    RIEMANN_SIEGEL = "riemann-siegel"
    ODLYZKO_SCHONHAGE = "odlyzko-schonhage"

    @classmethod
    def parse(cls, value: Union["Method", str]) -> "Method":
        """Accept a member, its value, its name, or a short alias (em/rs/os)."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-")
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError as e:
            raise ValueError(f"Unknown method: {value!r}") from e


_ALIASES = {
    "em": "euler-maclaurin",
    "eulermaclaurin": "euler-maclaurin",
    "rs": "riemann-siegel",
    "riemannsiegel": "riemann-siegel",
    "os": "odlyzko-schonhage",
    "odlyzkoschonhage": "odlyzko-schonhage",
}


@dataclass(frozen=True)
class Block:
    """Evenly spaced samples t_k = start_t + k·step, k = 0..points-1."""

    start_t: float
    length: float
    points: int

    def __post_init__(self) -> None:
        if (isinstance(self.points, bool) or not isinstance(self.points, (int, np.integer))
                or self.points <= 0):
            raise ValueError(f"points must be a positive int, got {self.points!r}")

    @property
    def step(self) -> float:
        return self.length / (self.points - 1) if self.points > 1 else 0.0

    def offsets(self, dtype=np.float64) -> np.ndarray:
        """δ_k = k·step in `dtype`; all zeros for a single point."""
        dt = np.dtype(dtype)
        if self.points == 1:
            return np.zeros(1, dtype=dt)
        step = dt.type(self.length) / dt.type(self.points - 1)
        return np.arange(self.points, dtype=dt) * step

    def samples(self, dtype=np.float64) -> np.ndarray:
        dt = np.dtype(dtype)
        return dt.type(self.start_t) + self.offsets(dt)


@dataclass(frozen=True)
class ScanJob:
    """One chunk of a zero scan; plain fields so it pickles into worker processes."""

    index: int
    start_t: float
    length: float
    points: int
    method: str
    dtype: str

    @property
    def block(self) -> Block:
        return Block(self.start_t, self.length, self.points)
