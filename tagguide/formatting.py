"""Display formatting for feature table cells."""

from __future__ import annotations

from typing import Any

from tagguide.schemas import FieldKind, FieldShape, PolyField

LINE_BREAK = "<br>"

PHOTO_VIEWER_URL = "https://www.mapillary.com/app/?focus=photo&pKey={photo_id}"
PHOTO_THUMBNAIL_URL = "https://d1cuyjsrcm0gby.cloudfront.net/{photo_id}/thumb-1024.jpg"
PHOTO_THUMBNAIL_STYLE = "min-width:300px;max-width:300px"

KIND_SEPARATORS: dict[FieldKind, str] = {
    FieldKind.text: LINE_BREAK,
    FieldKind.reference: " ",
    FieldKind.photo: LINE_BREAK,
}


def build_photo_link(photo_id: str) -> str:
    href = PHOTO_VIEWER_URL.format(photo_id=photo_id)
    src = PHOTO_THUMBNAIL_URL.format(photo_id=photo_id)
    return f"<a href='{href}'><img style='{PHOTO_THUMBNAIL_STYLE}' src='{src}'></a>"


def format_reference(value: str) -> str:
    return f"![{value}]"


def format_text(value: str) -> str:
    return value.replace("\n", LINE_BREAK)


def format_value(value: str, kind: FieldKind) -> str:
    if kind == FieldKind.text:
        return format_text(value)
    if kind == FieldKind.reference:
        return format_reference(value)
    return build_photo_link(value)


def format_field(value: PolyField | Any, kind: FieldKind, *, field_name: str = "value") -> str:
    """Render a feature field for a table cell.

    Empty values render as an empty string, a single value gets the kind's
    transform and multiple values are transformed one by one and joined with
    the kind's separator. Raw values (``None``, strings, lists) are coerced
    first; any other shape raises ``UnsupportedShapeError``.
    """
    field = PolyField.coerce(value, field_name=field_name, kind=kind)
    if field.shape == FieldShape.empty:
        return ""
    if field.shape == FieldShape.single:
        return format_value(field.values[0], kind)
    return KIND_SEPARATORS[kind].join(format_value(item, kind) for item in field.values)
