"""
Engine configuration: float width, algorithm and zero-scan dials.

The scan samples each chunk at `points_per_unit` points per unit of t, so
the spacing must stay below the smallest gap between neighbouring zeros in
the range (about 2π / ln(t/2π) on average) or sign changes are missed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .hardy_z import HardyZ
from .numeric import resolve_dtype
from .types import Method


@dataclass
class EngineConfig:
    dtype: str = "float64"
    method: Union[Method, str] = Method.EULER_MACLAURIN
    chunk_length: float = 10.0
    points_per_unit: int = 10
    refine_tol: float = 1e-9
    max_iter: int = 100
    max_workers: Optional[int] = 1

    def __post_init__(self):
        self.dtype = resolve_dtype(self.dtype).name
        self.method = Method.parse(self.method)
        if self.chunk_length <= 0:
            raise ValueError(f"chunk_length must be positive, got {self.chunk_length}")
        if self.points_per_unit < 1:
            raise ValueError(f"points_per_unit must be >= 1, got {self.points_per_unit}")
        if self.refine_tol <= 0:
            raise ValueError(f"refine_tol must be positive, got {self.refine_tol}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1 or None, got {self.max_workers}")

    def points_for(self, length: float) -> int:
        """Samples covering `length` units of t, both endpoints included."""
        return max(int(round(length * self.points_per_unit)), 1) + 1

    @property
    def points_per_chunk(self) -> int:
        return self.points_for(self.chunk_length)

    def evaluator(self) -> HardyZ:
        return HardyZ(np.dtype(self.dtype))

    @classmethod
    def quick(cls) -> "EngineConfig":
        return cls(method=Method.RIEMANN_SIEGEL, chunk_length=25.0,
                   points_per_unit=5, refine_tol=1e-6)

    @classmethod
    def default(cls) -> "EngineConfig":
        return cls()

    @classmethod
    def high_precision(cls) -> "EngineConfig":
        return cls(dtype="longdouble", chunk_length=5.0, points_per_unit=20,
                   refine_tol=1e-12, max_iter=200)
