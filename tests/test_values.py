from PIL import Image

from chromalens.processing.buffer import PixelBuffer
from chromalens.processing.values import grayscale, notan, threshold, value_summary, white_ratio


def _split_black_white(width=100, height=100):
    img = Image.new("RGB", (width, height), (255, 255, 255))
    img.paste((0, 0, 0), (0, 0, width // 2, height))
    return PixelBuffer.from_image(img)


def test_grayscale_writes_luma_to_every_channel():
    pixels = bytes((200, 30, 90, 255, 12, 250, 7, 128, 0, 0, 0, 0, 255, 255, 255, 255))
    buf = PixelBuffer(2, 2, pixels)

    gray = grayscale(buf)

    for offset in range(0, len(pixels), 4):
        r, g, b, a = gray.pixels[offset:offset + 4]
        source = pixels[offset:offset + 4]
        expected = 0.299 * source[0] + 0.587 * source[1] + 0.114 * source[2]
        assert r == g == b
        assert abs(r - round(expected)) <= 1
        assert a == source[3]


def test_grayscale_does_not_modify_its_input():
    buf = PixelBuffer.solid(3, 3, (10, 200, 30, 255))

    grayscale(buf)

    assert buf.pixel(1, 1) == (10, 200, 30, 255)


def test_threshold_outputs_only_black_or_white():
    pixels = bytearray()
    for value in range(256):
        pixels += bytes((value, value, value, 255))
    buf = PixelBuffer(16, 16, bytes(pixels))

    out = threshold(buf, 77)

    channels = {out.pixels[i] for i in range(len(out.pixels)) if i % 4 != 3}
    assert channels <= {0, 255}


def test_mid_gray_at_threshold_is_white():
    buf = PixelBuffer.solid(100, 100, (128, 128, 128, 255))

    white = notan(buf, 128)
    black = notan(buf, 129)

    assert set(white.pixels[0::4]) == {255}
    assert set(black.pixels[0::4]) == {0}


def test_split_image_survives_grayscale_and_threshold():
    buf = _split_black_white()

    out = threshold(grayscale(buf), 128)

    for y in (0, 50, 99):
        for x in range(100):
            expected = 0 if x < 50 else 255
            assert out.pixel(x, y) == (expected, expected, expected, 255)


def test_threshold_splits_the_ramp_at_the_cutoff_and_keeps_alpha():
    pixels = bytearray()
    for value in range(256):
        pixels += bytes((value, value, value, value // 2))
    buf = PixelBuffer(16, 16, bytes(pixels))

    out = threshold(buf, 77)

    for value in range(256):
        x, y = value % 16, value // 16
        expected = 255 if value >= 77 else 0
        assert out.pixel(x, y) == (expected, expected, expected, value // 2)


def test_value_summary_of_split_image():
    summary = value_summary(grayscale(_split_black_white()))

    assert (summary.low, summary.high) == (0, 255)
    assert summary.mean == 127.5


def test_white_ratio_counts_white_pixels():
    out = notan(_split_black_white(width=40, height=10), 128)

    assert white_ratio(out) == 0.5
