from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import field_validator

from tagguide.loaders import DEFAULT_APPENDIX_PATTERN, DEFAULT_SCHEMA_PATTERN
from tagguide.rendering import DEFAULT_TITLE
from tagguide.schemas import GuideBaseModel

DEFAULT_SCHEMA_DIR = "schema"
DEFAULT_OUTPUT_PATH = "README.md"

ENV_VARS: dict[str, str] = {
    "schema_dir": "TAGGUIDE_SCHEMA_DIR",
    "output_path": "TAGGUIDE_OUTPUT_PATH",
    "title": "TAGGUIDE_TITLE",
    "schema_pattern": "TAGGUIDE_SCHEMA_PATTERN",
    "appendix_pattern": "TAGGUIDE_APPENDIX_PATTERN",
    "footer_path": "TAGGUIDE_FOOTER_PATH",
}


def _validate_non_empty(value: str) -> str:
    text = value.strip()
    if not text:
        raise ValueError("must be non-empty")
    return text


def _normalize_optional_token(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    return text


def resolve_path(project_root: Path, raw_path: str | Path) -> Path:
    path = Path(raw_path)
    if path.is_absolute():
        return path
    return (project_root / path).resolve()


class GuideConfig(GuideBaseModel):
    schema_dir: str = DEFAULT_SCHEMA_DIR
    output_path: str = DEFAULT_OUTPUT_PATH
    title: str = DEFAULT_TITLE
    schema_pattern: str = DEFAULT_SCHEMA_PATTERN
    appendix_pattern: str = DEFAULT_APPENDIX_PATTERN
    footer_path: str | None = None

    @field_validator("schema_dir", "output_path", "title")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        return _validate_non_empty(value)

    @field_validator("schema_pattern", "appendix_pattern")
    @classmethod
    def validate_pattern(cls, value: str) -> str:
        pattern = _validate_non_empty(value)
        if "/" in pattern or "\\" in pattern:
            raise ValueError("pattern must match file names only, not paths")
        return pattern

    @field_validator("footer_path")
    @classmethod
    def normalize_footer_path(cls, value: str | None) -> str | None:
        return _normalize_optional_token(value)

    def schema_root(self, project_root: Path) -> Path:
        return resolve_path(project_root, self.schema_dir)

    def output_file(self, project_root: Path) -> Path:
        return resolve_path(project_root, self.output_path)

    def footer_file(self, project_root: Path) -> Path | None:
        if self.footer_path is None:
            return None
        return resolve_path(project_root, self.footer_path)


def load_guide_config_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    base_config: GuideConfig | None = None,
) -> GuideConfig:
    env = dict(os.environ if environ is None else environ)
    config = base_config or GuideConfig()
    payload = config.model_dump(mode="python")

    for field_name, env_var in ENV_VARS.items():
        if env_var in env:
            payload[field_name] = env[env_var]

    return GuideConfig.model_validate(payload)
