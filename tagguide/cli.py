from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tagguide.config import GuideConfig, load_guide_config_from_env
from tagguide.schemas import GuideError
from tagguide.tools.build_readme import build_readme, render_readme, summarize

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_level: str = "WARNING") -> None:
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Repository root path (default: current directory).",
    )
    parser.add_argument(
        "--schema-dir",
        default=None,
        help="Directory holding schema and appendix files (default: schema).",
    )
    parser.add_argument("--title", default=None, help="Document title line.")
    parser.add_argument(
        "--footer",
        default=None,
        help="Optional file whose contents replace the built-in reference link footer.",
    )
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level for diagnostics on stderr (default: WARNING).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tagging guide utilities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_command = subparsers.add_parser("build", help="Render schema files into the guide document.")
    add_common_arguments(build_command)
    build_command.add_argument(
        "--output",
        default=None,
        help="Output document path (default: README.md).",
    )

    check_command = subparsers.add_parser(
        "check",
        help="Load and render all schema files without writing; fail on duplicate section titles.",
    )
    add_common_arguments(check_command)

    toc_command = subparsers.add_parser("toc", help="Print the ordered table of contents.")
    add_common_arguments(toc_command)

    return parser


def resolve_config(args: argparse.Namespace) -> GuideConfig:
    config = load_guide_config_from_env()
    overrides: dict[str, Any] = {}
    if args.schema_dir is not None:
        overrides["schema_dir"] = args.schema_dir
    if args.title is not None:
        overrides["title"] = args.title
    if args.footer is not None:
        overrides["footer_path"] = args.footer
    if getattr(args, "output", None) is not None:
        overrides["output_path"] = args.output
    if not overrides:
        return config
    return GuideConfig.model_validate({**config.model_dump(mode="python"), **overrides})


def emit(payload: dict[str, Any], *, pretty: bool) -> None:
    if pretty:
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        print(json.dumps(payload, sort_keys=True))


def error_payload(exc: Exception) -> dict[str, Any]:
    return {
        "ok": False,
        "error_type": exc.__class__.__name__,
        "message": str(exc),
    }


def run_build(args: argparse.Namespace) -> int:
    project_root = args.project_root.resolve()
    try:
        result = build_readme(project_root, resolve_config(args))
    except (GuideError, ValidationError) as exc:
        emit(error_payload(exc), pretty=args.pretty)
        return 1
    emit(result, pretty=args.pretty)
    return 0


def run_check(args: argparse.Namespace) -> int:
    project_root = args.project_root.resolve()
    try:
        rendered = render_readme(project_root, resolve_config(args))
    except (GuideError, ValidationError) as exc:
        emit(error_payload(exc), pretty=args.pretty)
        return 1

    ok = not rendered.duplicate_anchors
    emit(
        {
            "ok": ok,
            "anchors": [entry.anchor for entry in rendered.toc],
            **summarize(rendered),
        },
        pretty=args.pretty,
    )
    return 0 if ok else 1


def run_toc(args: argparse.Namespace) -> int:
    project_root = args.project_root.resolve()
    try:
        rendered = render_readme(project_root, resolve_config(args))
    except (GuideError, ValidationError) as exc:
        emit(error_payload(exc), pretty=args.pretty)
        return 1

    emit(
        {
            "ok": True,
            "entries": [{"title": entry.title, "anchor": entry.anchor} for entry in rendered.toc],
        },
        pretty=args.pretty,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "build":
        return run_build(args)
    if args.command == "check":
        return run_check(args)
    if args.command == "toc":
        return run_toc(args)
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
