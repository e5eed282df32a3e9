from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class GuideError(RuntimeError):
    """Base error for tagging guide loading, rendering and output failures."""


class FieldKind(str, Enum):
    text = "text"
    reference = "reference"
    photo = "photo"


class FieldShape(str, Enum):
    empty = "empty"
    single = "single"
    many = "many"


class UnsupportedShapeError(GuideError):
    def __init__(
        self,
        *,
        field_name: str,
        kind: FieldKind | str,
        value_type: str,
        source: str | None = None,
    ) -> None:
        kind_text = kind.value if isinstance(kind, FieldKind) else str(kind)
        message = f"cannot format field '{field_name}' ({kind_text}): unsupported value shape {value_type}"
        if source:
            message = f"{source}: {message}"
        super().__init__(message)
        self.field_name = field_name
        self.kind = kind_text
        self.value_type = value_type
        self.source = source


class GuideBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class RecordModel(GuideBaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


def _scalar_text(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _numbers_as_text(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class PolyField(GuideBaseModel):
    shape: FieldShape = FieldShape.empty
    values: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "PolyField":
        return cls()

    @classmethod
    def single(cls, value: str) -> "PolyField":
        return cls(shape=FieldShape.single, values=(value,))

    @classmethod
    def many(cls, values: list[str] | tuple[str, ...]) -> "PolyField":
        if not values:
            return cls.empty()
        return cls(shape=FieldShape.many, values=tuple(values))

    @classmethod
    def coerce(cls, value: Any, *, field_name: str, kind: FieldKind) -> "PolyField":
        if isinstance(value, PolyField):
            return value
        if value is None or value == "":
            return cls.empty()

        text = _scalar_text(value)
        if text is not None:
            return cls.single(text)

        if isinstance(value, (list, tuple)):
            items: list[str] = []
            for item in value:
                if item is None:
                    items.append("")
                    continue
                item_text = _scalar_text(item)
                if item_text is None:
                    raise UnsupportedShapeError(
                        field_name=field_name,
                        kind=kind,
                        value_type=f"list of {type(item).__name__}",
                    )
                items.append(item_text)
            return cls.many(items)

        raise UnsupportedShapeError(field_name=field_name, kind=kind, value_type=type(value).__name__)


FEATURE_FIELD_KINDS: dict[str, FieldKind] = {
    "description": FieldKind.text,
    "osm": FieldKind.text,
    "elements": FieldKind.reference,
    "photos": FieldKind.photo,
}


class Feature(RecordModel):
    name: str = Field(alias="feature")
    description: PolyField = Field(default_factory=PolyField.empty)
    osm: PolyField = Field(default_factory=PolyField.empty)
    elements: PolyField = Field(default_factory=PolyField.empty)
    photos: PolyField = Field(default_factory=PolyField.empty, alias="mapillary")

    @field_validator("name", mode="before")
    @classmethod
    def name_numbers_as_text(cls, value: Any) -> Any:
        return _numbers_as_text(value)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("feature name must be non-empty")
        return value

    @field_validator("description", "osm", "elements", "photos", mode="before")
    @classmethod
    def coerce_poly_field(cls, value: Any, info: ValidationInfo) -> PolyField:
        field_name = info.field_name or "value"
        return PolyField.coerce(value, field_name=field_name, kind=FEATURE_FIELD_KINDS[field_name])


class SchemaDocument(RecordModel):
    title: str
    introduction: str | None = None
    features: list[Feature] = Field(default_factory=list)

    @field_validator("title", "introduction", mode="before")
    @classmethod
    def numbers_as_text(cls, value: Any) -> Any:
        return _numbers_as_text(value)

    @field_validator("features", mode="before")
    @classmethod
    def default_missing_features(cls, value: Any) -> Any:
        if value is None:
            return []
        return value


class AppendixDocument(RecordModel):
    title: str
    body: str = ""
