#!/usr/bin/env python3
"""Generate the tagging guide README from schema and appendix files."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tagguide.config import GuideConfig, load_guide_config_from_env
from tagguide.loaders import load_appendix_documents, load_schema_documents, read_text
from tagguide.rendering import (
    DEFAULT_FOOTER,
    Section,
    TocEntry,
    assemble_document,
    find_duplicate_anchors,
    render_sections,
)
from tagguide.schemas import GuideError

logger = logging.getLogger(__name__)


class OutputWriteError(GuideError):
    def __init__(self, *, path: Path, details: str) -> None:
        super().__init__(f"unable to write guide to '{path.as_posix()}': {details}")
        self.path = path
        self.details = details


@dataclass(frozen=True)
class RenderedGuide:
    markdown: str
    schema_sections: list[Section]
    appendix_sections: list[Section]
    toc: list[TocEntry]
    feature_count: int
    duplicate_anchors: list[str]


def relpath(path: Path, project_root: Path) -> str:
    try:
        return path.relative_to(project_root).as_posix()
    except ValueError:
        return path.as_posix()


def load_footer(config: GuideConfig, project_root: Path) -> str:
    footer_file = config.footer_file(project_root)
    if footer_file is None:
        return DEFAULT_FOOTER
    return read_text(footer_file)


def render_readme(project_root: Path, config: GuideConfig) -> RenderedGuide:
    schema_root = config.schema_root(project_root)
    schema_documents = load_schema_documents(schema_root, config.schema_pattern)
    appendix_documents = load_appendix_documents(schema_root, config.appendix_pattern)
    footer = load_footer(config, project_root)

    schema_sections, appendix_sections, toc = render_sections(schema_documents, appendix_documents)

    duplicate_anchors = find_duplicate_anchors(toc)
    for anchor in duplicate_anchors:
        logger.warning("Section title %r is used more than once; its anchor links are ambiguous", anchor)

    markdown = assemble_document(
        schema_sections,
        appendix_sections,
        toc,
        title=config.title,
        footer=footer,
    )
    return RenderedGuide(
        markdown=markdown,
        schema_sections=schema_sections,
        appendix_sections=appendix_sections,
        toc=toc,
        feature_count=sum(len(document.features) for document in schema_documents),
        duplicate_anchors=duplicate_anchors,
    )


def write_output(output_path: Path, content: str) -> None:
    temp_path = output_path.with_suffix(f"{output_path.suffix}.tmp")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(content, encoding="utf-8")
        temp_path.replace(output_path)
    except OSError as exc:
        temp_path.unlink(missing_ok=True)
        raise OutputWriteError(path=output_path, details=str(exc)) from exc


def summarize(rendered: RenderedGuide) -> dict[str, Any]:
    return {
        "schema_count": len(rendered.schema_sections),
        "appendix_count": len(rendered.appendix_sections),
        "feature_count": rendered.feature_count,
        "duplicate_anchors": rendered.duplicate_anchors,
    }


def build_readme(project_root: Path, config: GuideConfig | None = None) -> dict[str, Any]:
    config = config or GuideConfig()
    project_root = project_root.resolve()
    rendered = render_readme(project_root, config)
    output_path = config.output_file(project_root)
    write_output(output_path, rendered.markdown)
    logger.info("Wrote %d sections to %s", len(rendered.toc), output_path.as_posix())
    return {
        "ok": True,
        "output_path": relpath(output_path, project_root),
        **summarize(rendered),
    }


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--project-root",
        default=Path(__file__).resolve().parents[2],
        type=Path,
        help="Repository root containing the schema directory and README.md.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    project_root = args.project_root.resolve()
    result = build_readme(project_root, load_guide_config_from_env())
    print(json.dumps(result, sort_keys=True))


if __name__ == "__main__":
    main()
