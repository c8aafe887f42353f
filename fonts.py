# pyright: reportMissingTypeStubs=false

"""Font family resolution for nameplate rendering.

The designer describes fonts with CSS-style fallback chains such as
``"Calibri, Arial, Helvetica, sans-serif"``.  ReportLab needs a single
registered font name, so each chain is resolved left to right: a family
with a TrueType file in ``fonts/`` wins, then the built-in PDF fonts that
stand in for common families, then Helvetica.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont as ReportLabTTFont

logger = logging.getLogger(__name__)

FONTS_DIR = Path(__file__).resolve().parent / "fonts"

FALLBACK_FONT = "Helvetica"


def _font_key(name: str) -> str:
    return " ".join(name.strip().strip("\"'").lower().split())


# Families that map onto the base-14 PDF fonts.
BUILTIN_ALIASES: dict[str, str] = {
    "helvetica": "Helvetica",
    "arial": "Helvetica",
    "calibri": "Helvetica",
    "verdana": "Helvetica",
    "tahoma": "Helvetica",
    "sans-serif": "Helvetica",
    "system-ui": "Helvetica",
    "times": "Times-Roman",
    "times new roman": "Times-Roman",
    "georgia": "Times-Roman",
    "serif": "Times-Roman",
    "courier": "Courier",
    "courier new": "Courier",
    "monospace": "Courier",
}


@dataclass(frozen=True)
class FontSettings:
    """Resolved font name/size pair registered with ReportLab."""

    font_name: str
    size: float


class FontRegistry:
    def __init__(self, fonts_dir: Path = FONTS_DIR) -> None:
        self.fonts_dir = fonts_dir
        self._resolved: dict[str, str] = {}

    def resolve(self, family_chain: str) -> str:
        """Return the registered ReportLab font name for ``family_chain``."""

        key = _font_key(family_chain or "")
        cached = self._resolved.get(key)
        if cached:
            return cached

        families = [_font_key(f) for f in (family_chain or "").split(",")]
        font_name = None
        for family in filter(None, families):
            font_name = self._local_font(family) or BUILTIN_ALIASES.get(family)
            if font_name:
                break

        if font_name is None:
            logger.warning(
                "No font available for '%s'; using %s", family_chain, FALLBACK_FONT
            )
            font_name = FALLBACK_FONT

        self._resolved[key] = font_name
        return font_name

    def _local_font(self, family: str) -> str | None:
        destination = self.fonts_dir / f"{family.replace(' ', '_')}.ttf"
        if not destination.exists():
            return None

        font_name = "".join(part.capitalize() for part in family.split())
        if font_name not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(ReportLabTTFont(font_name, str(destination)))
            logger.debug("Registered %s from %s", font_name, destination)
        return font_name


_REGISTRY = FontRegistry()


def resolve_font_name(family_chain: str) -> str:
    return _REGISTRY.resolve(family_chain)


def primary_family(family_chain: str) -> str:
    """Return the first family of a fallback chain for display."""

    for family in (family_chain or "").split(","):
        family = family.strip().strip("\"'")
        if family:
            return family
    return FALLBACK_FONT


__all__ = [
    "FontRegistry",
    "FontSettings",
    "primary_family",
    "resolve_font_name",
]
