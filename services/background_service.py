# services/background_service.py
from typing import Tuple
import logging
import numpy as np

from models.image import Image
from models.pipeline_config import validate_threshold

logger = logging.getLogger(__name__)


class BackgroundService:
    """
    Business‑level helper for white‑background removal.

    • Classifies every pixel by the plain average of R, G and B.
    • Pixels brighter than the threshold become fully transparent.
    • Returns a **new** Image object; the input is never touched.
    """

    TRANSPARENT: Tuple[int, int, int, int] = (0, 0, 0, 0)
    _DEFAULT_THRESHOLD: int = 150

    @staticmethod
    def luminance(pixels: np.ndarray) -> np.ndarray:
        """
        Args
        ----
        pixels : np.ndarray  (H, W, 4)  uint8  RGBA order

        Returns
        -------
        gray : np.ndarray  (H, W)  uint8, unweighted mean of R, G, B

        The mean is taken on 16-bit widened samples and shifted back down,
        which rounds slightly up: (151, 151, 150) gives 151.
        """
        rgb16 = pixels[:, :, :3].astype(np.uint32) * 0x101
        return ((rgb16.sum(axis=2) // 3) >> 8).astype(np.uint8)

    def background_mask(self, img: Image, threshold: int = _DEFAULT_THRESHOLD) -> np.ndarray:
        """True where the pixel counts as background."""
        threshold = validate_threshold(threshold)
        return self.luminance(img.pixels) > threshold

    def remove_background(self, img: Image, threshold: int = _DEFAULT_THRESHOLD) -> Image:
        mask = self.background_mask(img, threshold)

        out = img.pixels.copy()
        out[mask] = self.TRANSPARENT

        logger.debug(f"Removed {int(mask.sum())}/{mask.size} background pixels (threshold={threshold})")
        return Image(pixels=out, path=img.path)
