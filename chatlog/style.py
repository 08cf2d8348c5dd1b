"""Terminal colour palette used by the text user interface."""

from __future__ import annotations

import sys
from dataclasses import dataclass

IS_WINDOWS = sys.platform == "win32"


@dataclass(frozen=True)
class Color:
    """A 24-bit RGB colour."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"colour channel out of range: {channel}")

    @classmethod
    def from_hex(cls, value: int) -> Color:
        """Build a colour from a 0xRRGGBB integer."""
        if not 0 <= value <= 0xFFFFFF:
            raise ValueError(f"colour value out of range: {value:#x}")
        return cls((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)

    def hex(self) -> int:
        """Return the colour as a 0xRRGGBB integer."""
        return (self.r << 16) | (self.g << 8) | self.b


NAMED_COLORS: dict[str, Color] = {
    "black": Color.from_hex(0x000000),
    "maroon": Color.from_hex(0x800000),
    "green": Color.from_hex(0x008000),
    "olive": Color.from_hex(0x808000),
    "navy": Color.from_hex(0x000080),
    "purple": Color.from_hex(0x800080),
    "teal": Color.from_hex(0x008080),
    "silver": Color.from_hex(0xC0C0C0),
    "gray": Color.from_hex(0x808080),
    "red": Color.from_hex(0xFF0000),
    "lime": Color.from_hex(0x00FF00),
    "yellow": Color.from_hex(0xFFFF00),
    "blue": Color.from_hex(0x0000FF),
    "fuchsia": Color.from_hex(0xFF00FF),
    "aqua": Color.from_hex(0x00FFFF),
    "white": Color.from_hex(0xFFFFFF),
    "darkorange": Color.from_hex(0xFF8C00),
    "darkred": Color.from_hex(0x8B0000),
    "dimgray": Color.from_hex(0x696969),
    "floralwhite": Color.from_hex(0xFFFAF0),
    "lightslategray": Color.from_hex(0x778899),
    "mediumseagreen": Color.from_hex(0x3CB371),
    "orange": Color.from_hex(0xFFA500),
    "springgreen": Color.from_hex(0x00FF7F),
    "whitesmoke": Color.from_hex(0xF5F5F5),
}

_BLACK = NAMED_COLORS["black"]
_WHITE = NAMED_COLORS["white"]

# Background and foreground shared by plain widgets.
PRIMITIVE_BACKGROUND = _BLACK
PRIMARY_TEXT = _WHITE


def color_name(color: Color) -> str:
    """Return the name of ``color``, or '' if it has none."""
    for name, named in NAMED_COLORS.items():
        if named == color:
            return name
    return ""


def color_hex(color: Color) -> str:
    """Return ``color`` as markup for text views.

    On Windows consoles the colour name is used instead of a hex code.
    """
    if IS_WINDOWS:
        return color_name(color)
    return f"#{color.hex():x}"


@dataclass(frozen=True)
class Palette:
    """Colours and glyphs of the user interface."""

    check_mark: str
    cross_mark: str
    progress_bar_cell: str
    info_bar_item_fg: Color
    fg: Color
    bg: Color
    border: Color
    help_header_fg: Color
    menu_bg: Color
    page_header_bg: Color
    page_header_fg: Color
    running_status_fg: Color
    paused_status_fg: Color
    dialog_bg: Color
    dialog_border: Color
    dialog_fg: Color
    dialog_sub_box_border: Color
    error_dialog_bg: Color
    error_dialog_button_bg: Color
    terminal_fg: Color
    terminal_bg: Color
    terminal_border: Color
    table_header_bg: Color
    table_header_fg: Color
    progress_bg: Color
    progress_bar: Color
    progress_bar_empty: Color
    progress_bar_ok: Color
    progress_bar_warn: Color
    progress_bar_crit: Color
    # (background, foreground)
    drop_down_unselected: tuple[Color, Color]
    drop_down_selected: tuple[Color, Color]
    input_field_bg: Color
    button_bg: Color


UNIX_PALETTE = Palette(
    check_mark="\u2705",
    cross_mark="\u274C",
    progress_bar_cell="▉",
    info_bar_item_fg=NAMED_COLORS["silver"],
    fg=NAMED_COLORS["floralwhite"],
    bg=PRIMITIVE_BACKGROUND,
    border=Color(135, 175, 146),
    help_header_fg=Color(135, 175, 146),
    menu_bg=NAMED_COLORS["mediumseagreen"],
    page_header_bg=NAMED_COLORS["mediumseagreen"],
    page_header_fg=NAMED_COLORS["floralwhite"],
    running_status_fg=Color(95, 215, 0),
    paused_status_fg=Color(255, 175, 0),
    dialog_bg=Color(38, 38, 38),
    dialog_border=NAMED_COLORS["mediumseagreen"],
    dialog_fg=NAMED_COLORS["floralwhite"],
    dialog_sub_box_border=NAMED_COLORS["dimgray"],
    error_dialog_bg=Color(215, 0, 0),
    error_dialog_button_bg=NAMED_COLORS["darkred"],
    terminal_fg=NAMED_COLORS["floralwhite"],
    terminal_bg=Color(5, 5, 5),
    terminal_border=NAMED_COLORS["dimgray"],
    table_header_bg=NAMED_COLORS["mediumseagreen"],
    table_header_fg=NAMED_COLORS["floralwhite"],
    progress_bg=NAMED_COLORS["dimgray"],
    progress_bar=NAMED_COLORS["darkorange"],
    progress_bar_empty=_WHITE,
    progress_bar_ok=NAMED_COLORS["green"],
    progress_bar_warn=NAMED_COLORS["orange"],
    progress_bar_crit=NAMED_COLORS["red"],
    drop_down_unselected=(NAMED_COLORS["whitesmoke"], _BLACK),
    drop_down_selected=(NAMED_COLORS["lightslategray"], _WHITE),
    input_field_bg=NAMED_COLORS["gray"],
    button_bg=NAMED_COLORS["mediumseagreen"],
)

WINDOWS_PALETTE = Palette(
    check_mark="[green::]\u25CF[-::]",
    cross_mark="[red::]\u25CF[-::]",
    progress_bar_cell="\u2593",
    info_bar_item_fg=NAMED_COLORS["gray"],
    fg=PRIMARY_TEXT,
    bg=PRIMITIVE_BACKGROUND,
    border=NAMED_COLORS["springgreen"],
    help_header_fg=NAMED_COLORS["springgreen"],
    menu_bg=NAMED_COLORS["springgreen"],
    page_header_bg=NAMED_COLORS["springgreen"],
    page_header_fg=PRIMARY_TEXT,
    running_status_fg=NAMED_COLORS["lime"],
    paused_status_fg=NAMED_COLORS["yellow"],
    dialog_bg=PRIMITIVE_BACKGROUND,
    dialog_border=NAMED_COLORS["springgreen"],
    dialog_fg=PRIMARY_TEXT,
    dialog_sub_box_border=NAMED_COLORS["gray"],
    error_dialog_bg=NAMED_COLORS["red"],
    error_dialog_button_bg=NAMED_COLORS["springgreen"],
    terminal_fg=PRIMARY_TEXT,
    terminal_bg=PRIMITIVE_BACKGROUND,
    terminal_border=PRIMITIVE_BACKGROUND,
    table_header_bg=NAMED_COLORS["springgreen"],
    table_header_fg=PRIMARY_TEXT,
    progress_bg=PRIMARY_TEXT,
    progress_bar=NAMED_COLORS["fuchsia"],
    progress_bar_empty=_WHITE,
    progress_bar_ok=NAMED_COLORS["lime"],
    progress_bar_warn=NAMED_COLORS["yellow"],
    progress_bar_crit=NAMED_COLORS["red"],
    drop_down_unselected=(NAMED_COLORS["gray"], _WHITE),
    drop_down_selected=(NAMED_COLORS["purple"], PRIMARY_TEXT),
    input_field_bg=NAMED_COLORS["gray"],
    button_bg=NAMED_COLORS["springgreen"],
)

PALETTE = WINDOWS_PALETTE if IS_WINDOWS else UNIX_PALETTE