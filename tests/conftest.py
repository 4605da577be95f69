import numpy as np
import pytest

from models.image import Image
from services.background_service import BackgroundService
from services.blur_service import BlurService
from services.image_service import ImageService


def solid(width, height, rgba):
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :] = rgba
    return Image(pixels=pixels)


@pytest.fixture
def background_service():
    return BackgroundService()


@pytest.fixture
def blur_service():
    return BlurService()


@pytest.fixture
def image_service():
    return ImageService(load_timeout=5)


@pytest.fixture
def random_image():
    rng = np.random.default_rng(1234)
    return Image(pixels=rng.integers(0, 256, size=(9, 11, 4), dtype=np.uint8))


@pytest.fixture
def portrait():
    """Dark 'subject' square on a white backdrop, fully opaque."""
    img = solid(12, 10, (255, 255, 255, 255))
    img.pixels[3:7, 4:9] = (40, 60, 80, 255)
    return img
