from __future__ import annotations
from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class GaussianKernel:
    """
    Value-object holding a normalized square Gaussian weight matrix.

    The weights array is made read-only on construction; build a new
    kernel instead of editing one.
    """
    sigma: float
    weights: np.ndarray  # Shape (k, k), dtype float64, sums to 1.

    def __post_init__(self):
        self.weights.setflags(write=False)

    @property
    def size(self) -> int:
        return self.weights.shape[0]

    @property
    def center(self) -> int:
        # Offset of the middle cell; off by half a pixel when size is even.
        return self.size // 2
