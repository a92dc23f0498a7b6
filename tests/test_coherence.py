import time

from PIL import Image

from chromalens.processing.buffer import PixelBuffer
from chromalens.processing.coherence import (
    EdgeBits,
    agreement_score,
    cap_pair,
    coherence,
    coherence_display_maps,
)


def _square(size=100):
    img = Image.new("RGB", (size, size), (0, 0, 0))
    img.paste((255, 255, 255), (30, 30, 70, 70))
    return PixelBuffer.from_image(img)


def test_image_against_itself_is_fully_coherent():
    buf = _square()

    result = coherence(buf, buf)

    assert [entry.score for entry in result.per_scale] == [100, 100, 100]
    assert result.average == 100


def test_default_scales_are_ordered_and_labelled():
    result = coherence(_square(), _square())

    assert [entry.scale_factor for entry in result.per_scale] == [0.5, 0.3, 0.15]
    assert result.per_scale[0].label == "Large (50%)"


def test_blank_images_score_perfect_agreement():
    blank = PixelBuffer.solid(60, 60, (40, 40, 40, 255))

    result = coherence(blank, blank)

    assert result.average == 100


def test_edges_against_blank_score_zero():
    blank = PixelBuffer.solid(100, 100, (0, 0, 0, 255))

    result = coherence(_square(), blank)

    assert result.per_scale[0].score == 0


def test_scale_that_collapses_to_nothing_scores_100():
    tiny = PixelBuffer.solid(4, 4, (255, 255, 255, 255))

    result = coherence(tiny, tiny, scales=(("tiny", 0.15),))

    assert result.per_scale[0].score == 100
    assert result.average == 100


def test_agreement_counts_only_edge_present_pixels():
    ref = EdgeBits(2, 2, bytes((1, 1, 0, 0)))
    art = EdgeBits(2, 2, bytes((1, 0, 0, 0)))

    assert agreement_score(ref, art) == 50


def test_agreement_crops_to_common_area():
    ref = EdgeBits(3, 1, bytes((1, 1, 1)))
    art = EdgeBits(2, 1, bytes((1, 0)))

    assert agreement_score(ref, art) == 50


def test_agreement_crops_rows_not_flat_prefix():
    ref = EdgeBits(3, 2, bytes((0, 0, 1, 1, 0, 0)))
    art = EdgeBits(2, 2, bytes((0, 0, 1, 0)))

    # Column 2 of the reference is outside the common area.
    assert agreement_score(ref, art) == 100


def test_display_maps_fit_reference_bounds():
    ref_map, art_map = coherence_display_maps(
        PixelBuffer.solid(1000, 700), PixelBuffer.solid(1000, 700)
    )

    assert ref_map.size == (500, 350)
    assert art_map.size == (500, 350)


def test_cap_pair_shrinks_both_images_by_one_factor():
    big = PixelBuffer.solid(2000, 1000)
    small = PixelBuffer.solid(1000, 500)

    capped_big, capped_small = cap_pair(big, small, 1000, 1000)

    assert capped_big.size == (1000, 500)
    assert capped_small.size == (500, 250)


def test_cap_pair_leaves_small_pairs_alone():
    a, b = _square(), _square(40)

    assert cap_pair(a, b, 1000, 1000) == (a, b)


def test_camera_sized_pair_finishes_quickly():
    buf = PixelBuffer.solid(4000, 3000, (120, 80, 40, 255))

    started = time.perf_counter()
    result = coherence(buf, buf)
    elapsed = time.perf_counter() - started

    assert result.average == 100
    assert elapsed < 20
