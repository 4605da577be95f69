import math

import numpy as np
import pytest

from models.errors import InvalidParameter
from models.image import Image
from services.blur_service import gaussian
from tests.conftest import solid


@pytest.mark.parametrize("sigma", [0.2, 0.5, 1, 1.3, 2, 3.7])
def test_kernel_is_normalized_and_non_negative(blur_service, sigma):
    kernel = blur_service.build_kernel(sigma)

    assert (kernel.weights >= 0).all()
    assert abs(kernel.weights.sum() - 1.0) < 1e-9


@pytest.mark.parametrize("sigma, size", [(1, 7), (0.5, 4), (2, 13), (1.3, 8), (0.1, 1)])
def test_kernel_size(blur_service, sigma, size):
    kernel = blur_service.build_kernel(sigma)

    assert kernel.weights.shape == (size, size)
    assert kernel.center == size // 2


def test_odd_kernel_is_symmetric_and_peaks_in_the_middle(blur_service):
    w = blur_service.build_kernel(1).weights

    assert np.array_equal(w, w.T)
    assert np.array_equal(w, w[::-1, ::-1])
    assert w.argmax() == 3 * 7 + 3


def test_even_kernel_is_off_centre(blur_service):
    w = blur_service.build_kernel(0.5).weights

    # offsets -2..1: the heaviest cell sits at (2, 2), the -2 row is the lightest
    assert np.unravel_index(w.argmax(), w.shape) == (2, 2)
    assert w[0, 2] < w[3, 2]


def test_kernel_matches_gaussian_formula(blur_service):
    sigma = 1.0
    kernel = blur_service.build_kernel(sigma)
    raw = np.array([[gaussian(math.hypot(x, y), sigma) for x in range(-3, 4)] for y in range(-3, 4)])

    np.testing.assert_allclose(kernel.weights, raw / raw.sum(), rtol=1e-12)


def test_kernel_is_deterministic_and_read_only(blur_service):
    a = blur_service.build_kernel(1.7)
    b = blur_service.build_kernel(1.7)

    assert a.weights.tobytes() == b.weights.tobytes()
    with pytest.raises(ValueError):
        a.weights[0, 0] = 1.0


@pytest.mark.parametrize("sigma", [0, -1, float("nan"), float("inf"), "abc", None])
def test_invalid_sigma_is_rejected(blur_service, sigma):
    with pytest.raises(InvalidParameter):
        blur_service.build_kernel(sigma)


def test_blur_matches_per_pixel_accumulation(blur_service, random_image):
    kernel = blur_service.build_kernel(1)
    blurred = blur_service.blur(random_image, kernel)

    for y in range(random_image.height):
        for x in range(random_image.width):
            expected = blur_service.blur_pixel(random_image, kernel, x, y)
            assert np.array_equal(blurred.pixels[y, x], expected), (x, y)


def test_blur_with_even_kernel_matches_per_pixel_accumulation(blur_service, random_image):
    kernel = blur_service.build_kernel(0.5)
    blurred = blur_service.blur(random_image, kernel)

    for y, x in [(0, 0), (4, 5), (8, 10), (0, 10), (8, 0)]:
        assert np.array_equal(blurred.pixels[y, x], blur_service.blur_pixel(random_image, kernel, x, y))


def test_blur_preserves_dimensions_and_leaves_input_alone(blur_service, random_image):
    before = random_image.pixels.copy()
    blurred = blur_service.apply_gaussian_blur(random_image, 1)

    assert blurred.pixels.shape == random_image.pixels.shape
    assert blurred.pixels.dtype == np.uint8
    assert np.array_equal(random_image.pixels, before)


def test_flat_image_interior_kept_border_darkened(blur_service):
    img = solid(20, 20, (200, 100, 50, 255))
    out = blur_service.apply_gaussian_blur(img, 1).pixels

    # pixels at least 3 away from every edge see the full 7x7 kernel
    interior = out[3:-3, 3:-3]
    # truncating narrowing: at most one below the source, never above
    diff = np.array([200, 100, 50, 255]) - interior.astype(int)
    assert ((diff >= 0) & (diff <= 1)).all()

    corner = out[0, 0]
    edge = out[0, 10]
    assert (corner < edge).all()
    assert (edge < interior[0, 0]).all()


def test_zero_image_stays_zero(blur_service):
    img = solid(5, 4, (0, 0, 0, 0))
    assert not blur_service.apply_gaussian_blur(img, 2).pixels.any()


def test_single_pixel_keeps_only_centre_weight(blur_service):
    img = solid(1, 1, (0, 0, 0, 255))
    kernel = blur_service.build_kernel(1)
    out = blur_service.blur(img, kernel).pixels[0, 0]

    expected_alpha = math.floor(255 * 0x101 * kernel.weights[3, 3] / 0x101)
    assert out[3] == expected_alpha
    assert 0 < out[3] < 255
    assert out[:3].tolist() == [0, 0, 0]


def test_tiny_sigma_is_identity(blur_service, random_image):
    # k = 1: a single weight of exactly 1.0
    out = blur_service.apply_gaussian_blur(random_image, 0.1)
    assert np.array_equal(out.pixels, random_image.pixels)


def test_blur_carries_path(blur_service, tmp_path):
    img = Image(pixels=np.zeros((2, 2, 4), dtype=np.uint8), path=tmp_path / "a.png")
    assert blur_service.apply_gaussian_blur(img, 1).path == img.path


def test_white_interior_never_rounds_up(blur_service):
    out = blur_service.apply_gaussian_blur(solid(20, 20, (255, 255, 255, 255)), 1).pixels

    # integer-cast narrowing, so a kernel summing just under 1 gives 254
    assert set(np.unique(out[3:-3, 3:-3]).tolist()) <= {254, 255}
