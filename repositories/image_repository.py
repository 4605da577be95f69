from pathlib import Path
from typing import Union
import logging
import signal
import numpy as np
import cv2
from PIL import Image as PILImage
from models.image import Image

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Handles file I/O for Image entities.

    Decoding goes through OpenCV, encoding through Pillow. Pixels are
    always handed out as RGBA uint8.
    """

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    @staticmethod
    def _to_rgba(arr: np.ndarray) -> np.ndarray:
        """
        Convert whatever cv2.imread(IMREAD_UNCHANGED) returned into RGBA uint8.
        """
        if arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        elif arr.dtype != np.uint8:
            raise ValueError(f"Unsupported sample type: {arr.dtype}")

        if arr.ndim == 2:
            return cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
        channels = arr.shape[2]
        if channels == 1:
            return cv2.cvtColor(arr[:, :, 0], cv2.COLOR_GRAY2RGBA)
        if channels == 3:
            return cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA)
        if channels == 4:
            return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        raise ValueError(f"Unsupported channel count: {channels}")

    @staticmethod
    def load(path: Union[str, Path], timeout: int = 5) -> Image:
        path = Path(path)

        # ─── timeout wrapper (5 s default) ────────────────────────────────
        def _handler(signum, frame):
            raise TimeoutError(f"cv2.imread timed-out after {timeout}s: {path}")

        signal.signal(signal.SIGALRM, _handler)
        signal.alarm(timeout)
        try:
            arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        finally:
            signal.alarm(0)  # always disarm
        # ──────────────────────────────────────────────────────────────────

        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")

        pixels = np.ascontiguousarray(ImageRepository._to_rgba(arr))
        logger.debug(f"Loaded {path}: {pixels.shape[1]}x{pixels.shape[0]}")
        return Image(pixels=pixels, path=path)

    @staticmethod
    def save(image: Image) -> None:
        # PNG regardless of extension: lossless and keeps alpha.
        PILImage.fromarray(image.pixels).save(image.path, format="PNG")
        logger.debug(f"Saved {image.path}")

    @staticmethod
    def next_output_path(file_name: Union[str, Path], output_dir: Union[str, Path] = "saved") -> Path:
        """
        Return output_dir/<base>N<ext> for the smallest N >= 1 that is unused.

        "result.png" becomes saved/result1.png, then saved/result2.png, ...
        An absolute name stays inside output_dir: "/tmp/x.png" gives
        saved/tmp/x1.png.
        """
        output_dir = Path(output_dir)

        file_name = Path(file_name)
        if file_name.is_absolute():
            file_name = file_name.relative_to(file_name.anchor)
        ext = file_name.suffix
        base = str(file_name)[: len(str(file_name)) - len(ext)]

        file_num = 1
        while True:
            candidate = output_dir / f"{base}{file_num}{ext}"
            if not candidate.exists():
                candidate.parent.mkdir(parents=True, exist_ok=True)
                return candidate
            file_num += 1
