from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


@dataclass(frozen=True)
class ColorPalette:
    name: str
    bg: str
    fg: str


COLOR_PALETTES: dict[str, ColorPalette] = {
    p.name: p
    for p in (
        ColorPalette("Green/White", "#008000", "#ffffff"),
        ColorPalette("Red/White", "#cc0000", "#ffffff"),
        ColorPalette("Yellow/Black", "#ffd500", "#000000"),
        ColorPalette("Blue/White", "#0057d9", "#ffffff"),
        ColorPalette("Black/White", "#000000", "#ffffff"),
        ColorPalette("White/Black", "#ffffff", "#000000"),
        ColorPalette("Orange/Black", "#ff7a00", "#000000"),
        ColorPalette("Gray/Black", "#808080", "#000000"),
    )
}

DEFAULT_PALETTE = "Green/White"
DEFAULT_FONT_FAMILY = "Calibri, Arial, Helvetica, sans-serif"

ALLOWED_POINT_SIZES: tuple[int, ...] = (28, 24, 22, 20, 18, 16, 14, 12)
DEFAULT_LINE_PT = 22
NEW_LINE_PT = 18

MIN_LINES = 1
MAX_LINES = 6
MIN_DIMENSION_IN = 0.1


class CornerStyle(StrEnum):
    SQUARED = "squared"
    ROUNDED = "rounded"


@dataclass(frozen=True)
class TextLine:
    text: str
    font_size_pt: float = DEFAULT_LINE_PT


@dataclass(frozen=True)
class LabelTemplate:
    """A nameplate as configured in the designer."""

    height_inches: float = 1.5
    width_inches: float = 5.0
    color_palette: str = DEFAULT_PALETTE
    corner_style: CornerStyle = CornerStyle.SQUARED
    font_family: str = DEFAULT_FONT_FAMILY
    lines: tuple[TextLine, ...] = field(
        default_factory=lambda: (TextLine(""),)
    )
    quantity: int = 1
    preview_png: bytes | None = None

    @property
    def palette(self) -> ColorPalette:
        return COLOR_PALETTES[self.color_palette]

    @property
    def visible_lines(self) -> tuple[TextLine, ...]:
        """Lines with non-blank text, trimmed, each keeping its own size."""

        return tuple(
            TextLine(line.text.strip(), line.font_size_pt)
            for line in self.lines
            if line.text.strip()
        )

    @property
    def size_name(self) -> str:
        return f'{self.height_inches:.2f}" x {self.width_inches:.2f}"'


@dataclass(frozen=True)
class Contact:
    name: str
    email: str


@dataclass(frozen=True)
class Submission:
    reference_id: str
    contact: Contact
    templates: tuple[LabelTemplate, ...]
