from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PlateRect:
    x: float
    y: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2.0


@dataclass(frozen=True)
class PlacedLine:
    """A single text line after fitting; ``center_y`` grows downward."""

    text: str
    font_size_px: float
    center_x: float
    center_y: float


@dataclass(frozen=True)
class RenderedPlate:
    rect: PlateRect
    radius: float
    background: str
    foreground: str
    font_family: str
    lines: tuple[PlacedLine, ...]

    @property
    def font_sizes(self) -> tuple[float, ...]:
        return tuple(line.font_size_px for line in self.lines)


@dataclass(frozen=True)
class CanvasGeometry:
    """Preview surface in CSS pixels with the plate centred inside it."""

    width: float
    height: float
    plate: PlateRect
    scale: float


@dataclass(frozen=True)
class SummaryItem:
    """One table row of the summary document."""

    size_top: str
    size_bottom: str
    font_label: str
    qty: int
    preview_image: bytes | None = None


@dataclass(frozen=True)
class SummaryHeader:
    title: str
    reference_id: str
    created_at: datetime | str | None

    @property
    def timestamp(self) -> str:
        if isinstance(self.created_at, datetime):
            return self.created_at.strftime("%Y-%m-%d %H:%M:%S")
        return str(self.created_at or "")
