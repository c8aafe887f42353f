"""Parse designer payloads into domain objects."""

from __future__ import annotations

import base64
import binascii
import math
import re
from typing import Any, Mapping, Sequence

from domain_types import (
    ALLOWED_POINT_SIZES,
    COLOR_PALETTES,
    DEFAULT_FONT_FAMILY,
    DEFAULT_LINE_PT,
    DEFAULT_PALETTE,
    MAX_LINES,
    MIN_DIMENSION_IN,
    MIN_LINES,
    Contact,
    CornerStyle,
    LabelTemplate,
    Submission,
    TextLine,
)
from fonts import primary_family
from label_types import SummaryItem

__all__ = [
    "ValidationError",
    "data_url_to_bytes",
    "parse_submission",
    "parse_template",
    "parse_templates",
    "template_to_payload",
    "template_to_summary_item",
]

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATA_URL_RE = re.compile(r"^data:image/(png|jpeg);base64,(.+)$", re.IGNORECASE | re.DOTALL)


class ValidationError(ValueError):
    """Raised when a payload cannot be turned into domain objects."""


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def _as_float(value: Any, field_name: str, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be a number, got {value!r}.") from exc
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a number, got {value!r}.")
    return number


def data_url_to_bytes(data_url: Any) -> bytes | None:
    """Decode a ``data:image/png;base64,...`` URL; other values give ``None``."""

    if not isinstance(data_url, str):
        return None
    match = DATA_URL_RE.match(data_url.strip())
    if not match:
        return None
    try:
        return base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError):
        return None


def _parse_line(raw: Any, index: int) -> TextLine:
    if isinstance(raw, str):
        return TextLine(raw, DEFAULT_LINE_PT)
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Line {index + 1} must be an object.")

    text = raw.get("text") or ""
    if not isinstance(text, str):
        raise ValidationError(f"Line {index + 1} text must be a string.")

    size = _as_float(
        _first(raw, "fontSizePt", "pt", "sizePt"),
        f"Line {index + 1} font size",
        DEFAULT_LINE_PT,
    )
    if size not in ALLOWED_POINT_SIZES:
        allowed = ", ".join(str(s) for s in sorted(ALLOWED_POINT_SIZES))
        raise ValidationError(
            f"Line {index + 1} font size {size:g} pt is not one of: {allowed}."
        )
    return TextLine(text, size)


def parse_template(payload: Any) -> LabelTemplate:
    """Build a ``LabelTemplate`` from designer or saved-template keys."""

    if not isinstance(payload, Mapping):
        raise ValidationError("Template must be an object.")

    height = max(
        MIN_DIMENSION_IN,
        _as_float(_first(payload, "heightInches", "height_in", "heightIn"), "heightInches", 1.5),
    )
    width = max(
        MIN_DIMENSION_IN,
        _as_float(_first(payload, "widthInches", "width_in", "widthIn"), "widthInches", 5.0),
    )

    palette = _first(payload, "colorPalette", "colorName", "color") or DEFAULT_PALETTE
    if isinstance(palette, Mapping):
        palette = palette.get("name") or DEFAULT_PALETTE
    if palette not in COLOR_PALETTES:
        available = ", ".join(COLOR_PALETTES)
        raise ValidationError(f"Unknown color palette '{palette}'. Available: {available}")

    corners = str(_first(payload, "cornerStyle", "corners") or CornerStyle.SQUARED).lower()
    try:
        corner_style = CornerStyle(corners)
    except ValueError as exc:
        raise ValidationError(f"Unknown corner style '{corners}'.") from exc

    font_family = _first(payload, "fontFamily", "font") or DEFAULT_FONT_FAMILY
    if not isinstance(font_family, str):
        raise ValidationError("fontFamily must be a string.")

    raw_lines = payload.get("lines")
    if raw_lines is None:
        raw_lines = [{"text": "", "fontSizePt": DEFAULT_LINE_PT}]
    if not isinstance(raw_lines, Sequence) or isinstance(raw_lines, (str, bytes)):
        raise ValidationError("lines must be a list.")
    if not MIN_LINES <= len(raw_lines) <= MAX_LINES:
        raise ValidationError(
            f"A template needs between {MIN_LINES} and {MAX_LINES} lines, got {len(raw_lines)}."
        )
    lines = tuple(_parse_line(raw, idx) for idx, raw in enumerate(raw_lines))

    quantity_value = _as_float(_first(payload, "quantity", "qty"), "quantity", 1)
    quantity = max(1, int(quantity_value))

    return LabelTemplate(
        height_inches=height,
        width_inches=width,
        color_palette=palette,
        corner_style=corner_style,
        font_family=font_family,
        lines=lines,
        quantity=quantity,
        preview_png=data_url_to_bytes(_first(payload, "previewPng", "preview")),
    )


def parse_templates(payload: Any) -> tuple[LabelTemplate, ...]:
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        raise ValidationError("templates must be a list.")
    templates: list[LabelTemplate] = []
    for idx, raw in enumerate(payload):
        try:
            templates.append(parse_template(raw))
        except ValidationError as exc:
            raise ValidationError(f"Template {idx + 1}: {exc}") from exc
    return tuple(templates)


def parse_submission(payload: Any) -> Submission:
    """Validate a submission request before anything is rendered."""

    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object.")

    reference_id = payload.get("referenceId")
    if not isinstance(reference_id, str) or not reference_id.strip():
        raise ValidationError("Reference ID is required.")

    contact_raw = payload.get("contact")
    if not isinstance(contact_raw, Mapping):
        raise ValidationError("Contact name and email are required.")
    name = str(contact_raw.get("name") or "").strip()
    email = str(contact_raw.get("email") or "").strip()
    if not name:
        raise ValidationError("Contact name is required.")
    if not EMAIL_RE.match(email):
        raise ValidationError("A valid contact email is required.")

    raw_templates = _first(payload, "templates", "savedTemplates")
    if raw_templates is None or (isinstance(raw_templates, Sequence) and not raw_templates):
        raise ValidationError("Please save at least one template before submitting.")

    return Submission(
        reference_id=reference_id.strip(),
        contact=Contact(name=name, email=email),
        templates=parse_templates(raw_templates),
    )


def template_to_payload(template: LabelTemplate) -> dict[str, Any]:
    """Serialise a template for the webhook (previews are left out)."""

    return {
        "heightInches": template.height_inches,
        "widthInches": template.width_inches,
        "sizeName": template.size_name,
        "colorPalette": template.color_palette,
        "bg": template.palette.bg,
        "fg": template.palette.fg,
        "cornerStyle": template.corner_style.value,
        "fontFamily": template.font_family,
        "lines": [
            {"text": line.text, "fontSizePt": line.font_size_pt}
            for line in template.lines
        ],
        "quantity": template.quantity,
    }


def template_to_summary_item(
    template: LabelTemplate,
    index: int,
    preview_image: bytes | None = None,
) -> SummaryItem:
    visible = template.visible_lines
    name = visible[0].text if visible else f"Label {index + 1}"
    return SummaryItem(
        size_top=name,
        size_bottom=(
            f"{template.height_inches:.2f} × {template.width_inches:.2f} in"
            f"  ·  {template.color_palette}  ·  {template.corner_style.value.capitalize()}"
        ),
        font_label=primary_family(template.font_family),
        qty=template.quantity,
        preview_image=preview_image if preview_image is not None else template.preview_png,
    )
