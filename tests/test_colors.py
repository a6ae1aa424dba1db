import numpy as np
import pytest

from fractals import ColorMapper, ColorScheme, parse_hex_color


@pytest.mark.parametrize("value, expected", [
    ("#ff0000", (255, 0, 0)),
    ("#00FF7f", (0, 255, 127)),
    ("0000ff", (0, 0, 255)),
])
def test_parse_hex_color(value, expected):
    assert parse_hex_color(value) == expected


@pytest.mark.parametrize("value", ["", "#fff", "#gg0000", "#12345678", "red", None])
def test_parse_hex_color_rejects_malformed(value):
    assert parse_hex_color(value) is None


@pytest.mark.parametrize("scheme", list(ColorScheme))
def test_bounded_points_are_black(scheme):
    mapper = ColorMapper(scheme=scheme, primary="#abcdef", secondary="#123456")
    assert mapper.color_of(100, 100) == (0, 0, 0)
    assert mapper.color_of(0, 0) == (0, 0, 0)


def test_custom_start_is_primary_color():
    mapper = ColorMapper(scheme=ColorScheme.CUSTOM, primary="#ff0000", secondary="#0000ff")
    assert mapper.color_of(0, 100) == (255, 0, 0)


def test_custom_start_is_primary_without_enhancement():
    mapper = ColorMapper(scheme=ColorScheme.CUSTOM, primary="#3a7bd5", secondary="#00d2ff",
                         brightness=1.0, contrast=1.0)
    assert mapper.color_of(0, 50) == (0x3A, 0x7B, 0xD5)


def test_custom_uses_square_root_warp():
    mapper = ColorMapper(scheme=ColorScheme.CUSTOM, primary="#000000", secondary="#c8c8c8",
                         brightness=1.0, contrast=1.0)
    # t = 0.25 -> sqrt -> 0.5 of the way to 200
    assert mapper.color_of(25, 100) == (100, 100, 100)


def test_custom_brightness_and_contrast():
    mapper = ColorMapper(scheme=ColorScheme.CUSTOM, primary="#404040", secondary="#404040")
    # 64 * 2.0 = 128 -> (128 - 128) * 1.5 + 128 = 128
    assert mapper.color_of(0, 100) == (128, 128, 128)
    darker = ColorMapper(scheme=ColorScheme.CUSTOM, primary="#200000", secondary="#200000")
    # 32 * 2 = 64 -> (64 - 128) * 1.5 + 128 = 32; 0 -> -64 clamps to 0
    assert darker.color_of(0, 100) == (32, 0, 0)


def test_custom_malformed_hex_falls_back_to_grayscale():
    mapper = ColorMapper(scheme=ColorScheme.CUSTOM, primary="#zzzzzz", secondary="#0000ff")
    # raw t without warp: 25 / 100 * 255
    assert mapper.color_of(25, 100) == (63, 63, 63)
    assert mapper.painted_color() == (255, 255, 255)


def test_grayscale_ramp():
    mapper = ColorMapper(scheme=ColorScheme.GRAYSCALE)
    assert mapper.color_of(0, 10) == (0, 0, 0)
    assert mapper.color_of(5, 10) == (127, 127, 127)


def test_rainbow_hues():
    mapper = ColorMapper(scheme=ColorScheme.RAINBOW)
    assert mapper.color_of(0, 6) == (255, 0, 0)
    assert mapper.color_of(2, 6) == (0, 255, 0)
    assert mapper.color_of(4, 6) == (0, 0, 255)


def test_colormap_scheme_uses_matplotlib():
    mapper = ColorMapper(scheme=ColorScheme.COLORMAP, colormap="gray")
    assert mapper.color_of(0, 10) == (0, 0, 0)
    assert mapper.painted_color() == (255, 255, 255)


def test_colorize_matches_color_of():
    mapper = ColorMapper(scheme=ColorScheme.CUSTOM)
    iterations = np.array([[0, 3, 17], [50, 99, 100]])
    rgb = mapper.colorize(iterations, 100)
    assert rgb.shape == (2, 3, 3)
    assert rgb.dtype == np.uint8
    for (row, col), n in np.ndenumerate(iterations):
        assert tuple(rgb[row, col]) == mapper.color_of(int(n), 100)


def test_scheme_parse():
    assert ColorScheme.parse(" Custom ") is ColorScheme.CUSTOM
    with pytest.raises(ValueError):
        ColorScheme.parse("sepia")


def test_mapper_accepts_scheme_name():
    named = ColorMapper(scheme="custom")
    assert named.scheme is ColorScheme.CUSTOM
    assert named.color_of(0, 100) == ColorMapper(scheme=ColorScheme.CUSTOM).color_of(0, 100) == (255, 0, 0)
    with pytest.raises(ValueError):
        ColorMapper(scheme="sepia")
