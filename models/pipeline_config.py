# models/pipeline_config.py
from __future__ import annotations
import math
import os
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from dotenv import load_dotenv

from models.errors import InvalidParameter

# Load environment variables
load_dotenv()


@dataclass
class PipelineConfig:
    """
    Tunables for one softening run.

    threshold : luminance cutoff on the 8-bit scale, 0-255
    sigma     : Gaussian standard deviation, > 0
    """
    threshold: int = 150
    sigma: float = 1.0
    output_dir: Path = Path("saved")
    load_timeout: int = 5

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        return cls(
            threshold=_env("BG_THRESHOLD", "150", int),
            sigma=_env("BLUR_SIGMA", "1", float),
            output_dir=Path(os.getenv("OUTPUT_DIR_PATH", "saved")),
            load_timeout=_env("IMAGE_LOAD_TIMEOUT", "5", int),
        )

    def validate(self) -> "PipelineConfig":
        validate_threshold(self.threshold)
        validate_sigma(self.sigma)
        return self


def _env(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise InvalidParameter(f"{name} must be {cast.__name__}, got {raw!r}") from None


def validate_threshold(threshold) -> int:
    if isinstance(threshold, bool) or not isinstance(threshold, (int, np.integer)):
        raise InvalidParameter(f"threshold must be an integer, got {threshold!r}")
    if not 0 <= threshold <= 255:
        raise InvalidParameter(f"threshold must be within 0-255, got {threshold}")
    return int(threshold)


def validate_sigma(sigma) -> float:
    try:
        sigma = float(sigma)
    except (TypeError, ValueError):
        raise InvalidParameter(f"sigma must be a number, got {sigma!r}") from None
    if not math.isfinite(sigma) or sigma <= 0:
        raise InvalidParameter(f"sigma must be a finite number > 0, got {sigma}")
    return sigma
