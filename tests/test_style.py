from unittest import mock

import pytest

from chatlog import style
from chatlog.style import NAMED_COLORS, UNIX_PALETTE, WINDOWS_PALETTE, Color, color_hex, color_name


def test_color_hex_unix_pins_medium_sea_green():
    with mock.patch.object(style, "IS_WINDOWS", False):
        assert color_hex(NAMED_COLORS["mediumseagreen"]) == "#3cb371"


def test_color_hex_unix_has_no_zero_padding():
    with mock.patch.object(style, "IS_WINDOWS", False):
        assert color_hex(Color(0, 0, 0)) == "#0"


@pytest.mark.parametrize("name", sorted(NAMED_COLORS))
def test_color_hex_unix_round_trips(name):
    color = NAMED_COLORS[name]
    with mock.patch.object(style, "IS_WINDOWS", False):
        text = color_hex(color)
    assert text.startswith("#")
    assert Color.from_hex(int(text[1:], 16)) == color


def test_color_hex_windows_uses_name():
    with mock.patch.object(style, "IS_WINDOWS", True):
        assert color_hex(NAMED_COLORS["springgreen"]) == "springgreen"
        assert color_hex(Color(1, 2, 3)) == ""


@pytest.mark.parametrize("name", sorted(NAMED_COLORS))
def test_color_name_round_trips(name):
    assert NAMED_COLORS[color_name(NAMED_COLORS[name])] == NAMED_COLORS[name]


def test_color_name_unknown_is_empty():
    assert color_name(Color(1, 2, 3)) == ""


def test_color_hex_and_from_hex_round_trip():
    color = Color(135, 175, 146)
    assert Color.from_hex(color.hex()) == color


@pytest.mark.parametrize("channels", [(256, 0, 0), (0, -1, 0), (0, 0, 300)])
def test_color_rejects_out_of_range_channels(channels):
    with pytest.raises(ValueError):
        Color(*channels)


@pytest.mark.parametrize("value", [-1, 0x1000000])
def test_from_hex_rejects_out_of_range(value):
    with pytest.raises(ValueError):
        Color.from_hex(value)


def test_palettes_differ_in_glyphs_and_colors():
    assert UNIX_PALETTE.check_mark == "\u2705"
    assert WINDOWS_PALETTE.check_mark == "[green::]\u25CF[-::]"
    assert UNIX_PALETTE.progress_bar_cell == "▉"
    with mock.patch.object(style, "IS_WINDOWS", False):
        assert color_hex(UNIX_PALETTE.progress_bar) == "#ff8c00"
    with mock.patch.object(style, "IS_WINDOWS", True):
        assert color_hex(WINDOWS_PALETTE.menu_bg) == "springgreen"


def test_palette_colors_are_named_where_source_uses_names():
    assert color_name(UNIX_PALETTE.menu_bg) == "mediumseagreen"
    assert color_name(WINDOWS_PALETTE.menu_bg) == "springgreen"
    assert color_name(UNIX_PALETTE.progress_bar) == "darkorange"


def test_active_palette_matches_platform_flag():
    expected = "springgreen" if style.IS_WINDOWS else "#3cb371"
    assert color_hex(style.PALETTE.menu_bg) == expected