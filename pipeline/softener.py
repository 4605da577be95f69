# pipeline/softener.py
from typing import Iterable, List, Optional
import logging

from models.image import Image
from models.pipeline_config import PipelineConfig, validate_sigma, validate_threshold
from services.background_service import BackgroundService
from services.blur_service import BlurService

logger = logging.getLogger(__name__)


def _resolve(threshold: Optional[int], sigma: Optional[float]):
    """Fill unset parameters from the environment, then validate both."""
    if threshold is None or sigma is None:
        defaults = PipelineConfig.from_env()
        threshold = defaults.threshold if threshold is None else threshold
        sigma = defaults.sigma if sigma is None else sigma
    return validate_threshold(threshold), validate_sigma(sigma)


def soften(
    img: Image,
    *,
    threshold: Optional[int]              = None,
    sigma: Optional[float]                = None,
    background_service: BackgroundService = BackgroundService(),
    blur_service: BlurService             = BlurService(),
) -> Image:
    """
    Strip the white background from *img*, then Gaussian-blur the result.

    threshold / sigma default to BG_THRESHOLD / BLUR_SIGMA from the
    environment. Both are checked before any pixel work, so a bad sigma
    never leaves a half-processed image behind.
    Returns a new Image; *img* is left as it was.
    """
    threshold, sigma = _resolve(threshold, sigma)
    kernel = blur_service.build_kernel(sigma)

    # 1. near-white → transparent
    stripped = background_service.remove_background(img, threshold)

    # 2. blur every channel, alpha included
    return blur_service.blur(stripped, kernel)


def soften_gallery(
    gallery: Iterable[Image],
    *,
    threshold: Optional[int]              = None,
    sigma: Optional[float]                = None,
    background_service: BackgroundService = BackgroundService(),
    blur_service: BlurService             = BlurService(),
) -> List[Image]:
    """
    Apply soften() to every Image in *gallery* with one shared parameter set.
    """
    threshold, sigma = _resolve(threshold, sigma)

    softened = []
    for i, img in enumerate(gallery, 1):
        logger.info(f"Softening image {i}: {img.path or '<in-memory>'}")
        softened.append(soften(
            img,
            threshold=threshold,
            sigma=sigma,
            background_service=background_service,
            blur_service=blur_service,
        ))
    return softened
