import pytest
from PIL import Image

from chromalens.processing.buffer import PixelBuffer
from chromalens.processing.pipeline import (
    AnalysisSession,
    GenerationCounter,
    analyze_pair,
    prepare_pair,
)


def _scene(offset=0):
    img = Image.new("RGB", (120, 90), (30, 60, 160))
    img.paste((240, 200, 40), (20 + offset, 20, 70 + offset, 60))
    return PixelBuffer.from_image(img)


def test_generation_counter_only_accepts_latest_token():
    counter = GenerationCounter()

    first = counter.begin()
    second = counter.begin()

    assert second > first
    assert not counter.is_current(first)
    assert counter.is_current(second)


def test_prepare_pair_bounds_working_copies():
    big = PixelBuffer.solid(1200, 800)

    pair = prepare_pair(big, _scene())

    assert pair.reference.size == (600, 400)
    assert pair.artwork.size == (120, 90)
    assert pair.reference_native is big


def test_analyze_pair_of_identical_images():
    scene = _scene()

    report = analyze_pair(scene, scene)

    assert report.accuracy.mismatch_count == 0
    assert report.coherence.average == 100
    assert report.reference == report.artwork
    assert len(report.reference.palette) == 2
    assert report.reference.entropy.rows == 8


def test_analyze_pair_reports_values_and_notan():
    report = analyze_pair(_scene(), _scene(), threshold=100)

    values = report.reference.values
    # blue field luma 62, yellow block luma 194
    assert (values.low, values.high) == (62, 194)
    assert values.low < values.mean < values.high
    assert report.reference.notan_threshold == 100
    # only the 50x40 yellow block clears the threshold
    assert report.reference.notan_white_ratio == pytest.approx(50 * 40 / (120 * 90))


def test_analyze_pair_is_order_independent():
    a, b = _scene(), _scene(offset=30)

    forward = analyze_pair(a, b)
    backward = analyze_pair(b, a)

    assert forward.reference == backward.artwork
    assert forward.artwork == backward.reference
    assert forward.accuracy.mismatch == backward.accuracy.mismatch
    assert forward.coherence.average == backward.coherence.average


def test_session_commits_current_results():
    session = AnalysisSession(_scene(), _scene(offset=10))

    ref_notan, art_notan = session.run("notan", threshold=128)

    assert session.result("notan") == (ref_notan, art_notan)
    assert set(ref_notan.pixels[0::4]) <= {0, 255}


def test_session_discards_superseded_work():
    session = AnalysisSession(_scene(), _scene())

    stale = session.begin("accuracy")
    result = session.compute("accuracy", session.pair, sensitivity=30)
    session.begin("accuracy")

    assert session.commit(stale, "accuracy", result) is False
    assert session.result("accuracy") is None


def test_new_images_invalidate_in_flight_runs():
    session = AnalysisSession(_scene(), _scene())
    token = session.begin("entropy")
    pair = session.pair
    result = session.compute("entropy", pair, grid=4)

    session.update_images(_scene(offset=20), _scene())

    assert session.commit(token, "entropy", result) is False
    assert session.pair is not pair


def test_other_tools_do_not_invalidate_in_flight_work():
    session = AnalysisSession(_scene(), _scene(offset=10))
    token = session.begin("coherence")
    result = session.compute("coherence", session.pair)

    session.run("notan", threshold=100)

    assert session.commit(token, "coherence", result) is True
    assert session.result("coherence") == result
    assert session.result("notan") is not None


def test_new_images_invalidate_every_tool():
    session = AnalysisSession(_scene(), _scene())
    tokens = {tool: session.begin(tool) for tool in ("notan", "palette")}

    session.update_images(_scene(offset=5), _scene())

    for tool, token in tokens.items():
        assert session.commit(token, tool, object()) is False


def test_session_clamps_parameters():
    session = AnalysisSession(_scene(), _scene())

    ref_grid, _ = session.run("entropy", grid=99)
    diff = session.run("accuracy", sensitivity=1)

    assert ref_grid.rows == 20
    assert diff.sensitivity == 5


def test_unknown_tool_raises():
    session = AnalysisSession(_scene(), _scene())

    with pytest.raises(ValueError):
        session.run("squiggle")
