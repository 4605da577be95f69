# services/blur_service.py
import logging
import math
import numpy as np

from models.image import Image
from models.gaussian_kernel import GaussianKernel
from models.pipeline_config import validate_sigma

logger = logging.getLogger(__name__)

# 8-bit samples are widened to 16 bit for accumulation (0xff -> 0xffff).
_WIDEN = 0x101


def gaussian(x, sigma: float):
    return np.exp(-(x * x) / (2 * sigma * sigma)) / (math.sqrt(2 * math.pi) * sigma)


class BlurService:
    """
    Gaussian blur over RGBA images.

    Boundary policy: kernel taps that fall outside the image are skipped and
    the remaining weights are *not* renormalized, so pixels near the border
    come out darker (and more transparent) than the interior.
    """

    @staticmethod
    def build_kernel(sigma: float) -> GaussianKernel:
        """
        Args:
            sigma (float): Standard deviation, must be finite and > 0.

        Returns:
            GaussianKernel: side k = int(6·sigma + 1), weights summing to 1.
        """
        sigma = validate_sigma(sigma)
        size = int(6 * sigma + 1)
        center = size // 2

        offsets = np.arange(size, dtype=np.float64) - center
        dx, dy = np.meshgrid(offsets, offsets)
        weights = gaussian(np.sqrt(dx * dx + dy * dy), sigma)
        weights /= weights.sum()

        return GaussianKernel(sigma=sigma, weights=weights)

    @staticmethod
    def _widen(pixels: np.ndarray) -> np.ndarray:
        return pixels.astype(np.float64) * _WIDEN

    @staticmethod
    def _narrow(acc: np.ndarray) -> np.ndarray:
        # Truncates toward zero, same as an integer cast. A flat interior can
        # land one below its source value (white blurs to 254) when the
        # normalized weights sum to a hair under 1.
        return np.clip(np.floor(acc / _WIDEN), 0, 255).astype(np.uint8)

    @staticmethod
    def accumulate_pixel(pixels: np.ndarray, kernel: GaussianKernel, x: int, y: int) -> np.ndarray:
        """
        Weighted sum for a single destination pixel, at 16-bit scale.

        Reads only from `pixels` (H, W, 4) and `kernel`; returns a float64
        vector of four channel sums.
        """
        h, w = pixels.shape[:2]
        weights = kernel.weights
        acc = np.zeros(pixels.shape[2], dtype=np.float64)

        for ky in range(kernel.size):
            src_y = y + ky - kernel.center
            if not 0 <= src_y < h:
                continue
            for kx in range(kernel.size):
                src_x = x + kx - kernel.center
                if not 0 <= src_x < w:
                    continue
                acc += pixels[src_y, src_x].astype(np.float64) * _WIDEN * weights[ky, kx]
        return acc

    def blur_pixel(self, img: Image, kernel: GaussianKernel, x: int, y: int) -> np.ndarray:
        """Output RGBA value of one pixel, uint8."""
        return self._narrow(self.accumulate_pixel(img.pixels, kernel, x, y))

    def blur(self, img: Image, kernel: GaussianKernel) -> Image:
        """
        Convolve every channel of `img` with `kernel`.

        accumulate_pixel is the per-pixel definition of this sum. blur adds
        the same taps in the same order, but each tap for all destination
        pixels at once through shifted slices, so both give bit-identical
        results.
        """
        src = self._widen(img.pixels)
        h, w = src.shape[:2]
        acc = np.zeros_like(src)

        for ky in range(kernel.size):
            oy = ky - kernel.center
            # destination rows whose source row y + oy is in range
            y0, y1 = max(0, -oy), min(h, h - oy)
            if y0 >= y1:
                continue
            for kx in range(kernel.size):
                ox = kx - kernel.center
                x0, x1 = max(0, -ox), min(w, w - ox)
                if x0 >= x1:
                    continue
                acc[y0:y1, x0:x1] += src[y0 + oy:y1 + oy, x0 + ox:x1 + ox] * kernel.weights[ky, kx]

        logger.debug(f"Blurred {w}x{h} image with {kernel.size}x{kernel.size} kernel (sigma={kernel.sigma})")
        return Image(pixels=self._narrow(acc), path=img.path)

    def apply_gaussian_blur(self, img: Image, sigma: float) -> Image:
        return self.blur(img, self.build_kernel(sigma))
