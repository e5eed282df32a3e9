from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tagguide.schemas import AppendixDocument, GuideError, SchemaDocument, UnsupportedShapeError

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATTERN = "*.yml"
DEFAULT_APPENDIX_PATTERN = "*.md"


class LoadError(GuideError):
    def __init__(self, *, path: Path, details: str) -> None:
        super().__init__(f"unable to load '{path.as_posix()}': {details}")
        self.path = path
        self.details = details


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"schema error at {location}: {first['msg']}"
    return f"schema error: {first['msg']}"


def discover_files(directory: Path, pattern: str) -> list[Path]:
    if not directory.exists():
        raise LoadError(path=directory, details="directory does not exist")
    if not directory.is_dir():
        raise LoadError(path=directory, details="not a directory")
    return sorted(
        (path for path in directory.glob(pattern) if path.is_file()),
        key=lambda path: path.name,
    )


def discover_schema_files(directory: Path, pattern: str = DEFAULT_SCHEMA_PATTERN) -> list[Path]:
    return discover_files(directory, pattern)


def discover_appendix_files(directory: Path, pattern: str = DEFAULT_APPENDIX_PATTERN) -> list[Path]:
    return discover_files(directory, pattern)


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(path=path, details=str(exc)) from exc


def parse_schema_payload(payload: Any, *, path: Path) -> SchemaDocument:
    if not isinstance(payload, dict):
        kind = "empty document" if payload is None else f"top-level {type(payload).__name__}"
        raise LoadError(path=path, details=f"expected a mapping, found {kind}")

    data = dict(payload)
    if not data.get("title"):
        data["title"] = path.stem
    features = data.get("features")
    if features is not None and not isinstance(features, list):
        raise LoadError(path=path, details="features must be a list")

    try:
        return SchemaDocument.model_validate(data)
    except UnsupportedShapeError as exc:
        raise UnsupportedShapeError(
            field_name=exc.field_name,
            kind=exc.kind,
            value_type=exc.value_type,
            source=path.as_posix(),
        ) from exc
    except ValidationError as exc:
        raise LoadError(path=path, details=_format_validation_error(exc)) from exc


def load_schema_document(path: Path) -> SchemaDocument:
    text = read_text(path)
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise LoadError(path=path, details=f"YAML parse error: {exc}") from exc
    return parse_schema_payload(payload, path=path)


def load_appendix_document(path: Path) -> AppendixDocument:
    return AppendixDocument(title=path.stem, body=read_text(path))


def load_schema_documents(directory: Path, pattern: str = DEFAULT_SCHEMA_PATTERN) -> list[SchemaDocument]:
    paths = discover_schema_files(directory, pattern)
    logger.info("Found %d schema files in %s", len(paths), directory.as_posix())
    return [load_schema_document(path) for path in paths]


def load_appendix_documents(directory: Path, pattern: str = DEFAULT_APPENDIX_PATTERN) -> list[AppendixDocument]:
    paths = discover_appendix_files(directory, pattern)
    logger.info("Found %d appendix files in %s", len(paths), directory.as_posix())
    return [load_appendix_document(path) for path in paths]
