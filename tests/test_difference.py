import pytest
from PIL import Image

from chromalens.errors import InvalidImageError
from chromalens.processing.buffer import PixelBuffer
from chromalens.processing.difference import (
    MATCH_RGBA,
    accuracy_heatmap,
    difference_map,
    render_heatmap,
)
from chromalens.processing.values import grayscale


def _four_color(size=40):
    img = Image.new("RGB", (size, size), (230, 40, 40))
    half = size // 2
    img.paste((40, 200, 60), (half, 0, size, half))
    img.paste((30, 60, 220), (0, half, half, size))
    img.paste((240, 230, 90), (half, half, size, size))
    return PixelBuffer.from_image(img)


def _gray(value, width=4, height=4):
    return PixelBuffer.solid(width, height, (value, value, value, 255))


def test_identical_images_have_no_mismatches():
    gray = grayscale(_four_color())

    diff = difference_map(gray, gray, 30)

    assert diff.mismatch_count == 0
    assert diff.match_ratio == 1.0
    assert set(diff.intensity) == {0}


def test_accuracy_heatmap_of_identical_images_matches_everywhere():
    buf = _four_color(120)

    diff = accuracy_heatmap(buf, buf, 30)

    assert (diff.width, diff.height) == (120, 120)
    assert diff.mismatch_count == 0


def test_difference_at_sensitivity_is_a_match():
    diff = difference_map(_gray(100), _gray(130), 30)

    assert diff.mismatch_count == 0


def test_difference_above_sensitivity_is_weighted():
    diff = difference_map(_gray(100), _gray(131), 30)

    assert diff.mismatch_count == 16
    assert diff.is_mismatch(3, 3)
    assert diff.intensity[0] == 62


def test_intensity_saturates_at_255():
    diff = difference_map(_gray(0), _gray(255), 5)

    assert set(diff.intensity) == {255}


def test_comparison_is_symmetric():
    a = grayscale(_four_color())
    b = grayscale(PixelBuffer.solid(40, 40, (120, 120, 120, 255)))

    assert difference_map(a, b, 30).mismatch == difference_map(b, a, 30).mismatch


def test_mismatched_dimensions_are_rejected():
    with pytest.raises(InvalidImageError):
        difference_map(_gray(10, 4, 4), _gray(10, 5, 4), 30)


def test_negative_sensitivity_is_rejected():
    with pytest.raises(ValueError):
        difference_map(_gray(10), _gray(10), -1)


def test_zero_sensitivity_is_accepted():
    diff = difference_map(_gray(10), _gray(11), 0)

    assert diff.mismatch_count == 16


def test_render_heatmap_palette():
    ref = PixelBuffer(2, 1, bytes((0, 0, 0, 255, 100, 100, 100, 255)))
    art = PixelBuffer(2, 1, bytes((255, 255, 255, 255, 100, 100, 100, 255)))

    out = render_heatmap(difference_map(ref, art, 30))

    assert out.pixel(0, 0) == (255, 0, 0, 180)
    assert out.pixel(1, 0) == MATCH_RGBA
