from __future__ import annotations

import json
from pathlib import Path

import pytest

from tagguide.cli import build_parser, main


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _clear_guide_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for env_var in [
        "TAGGUIDE_SCHEMA_DIR",
        "TAGGUIDE_OUTPUT_PATH",
        "TAGGUIDE_TITLE",
        "TAGGUIDE_SCHEMA_PATTERN",
        "TAGGUIDE_APPENDIX_PATTERN",
        "TAGGUIDE_FOOTER_PATH",
    ]:
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture()
def project_root(tmp_path: Path) -> Path:
    _write(
        tmp_path / "schema" / "tracks.yml",
        "title: Cycle Track\nfeatures:\n  - feature: Cycle Track\n    elements: way\n",
    )
    _write(tmp_path / "schema" / "Notes.md", "Hello\n")
    return tmp_path


def test_build_parser_accepts_build_overrides() -> None:
    args = build_parser().parse_args(
        ["build", "--schema-dir", "docs/schema", "--output", "GUIDE.md", "--title", "Guide", "--pretty"]
    )

    assert args.command == "build"
    assert args.schema_dir == "docs/schema"
    assert args.output == "GUIDE.md"
    assert args.title == "Guide"
    assert args.pretty is True


def test_build_command_writes_guide(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["build", "--project-root", str(project_root), "--title", "Test Guide"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["ok"] is True
    assert payload["schema_count"] == 1
    assert payload["appendix_count"] == 1
    assert (project_root / "README.md").read_text(encoding="utf-8").startswith("# Test Guide\n\n")


def test_build_command_reports_unsupported_shape(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(project_root / "schema" / "zz-broken.yml", "features:\n  - feature: Bad\n    osm: {highway: path}\n")

    exit_code = main(["build", "--project-root", str(project_root)])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload["ok"] is False
    assert payload["error_type"] == "UnsupportedShapeError"
    assert "zz-broken.yml" in payload["message"]
    assert not (project_root / "README.md").exists()


def test_build_command_reports_load_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["build", "--project-root", str(tmp_path)])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload["error_type"] == "LoadError"


def test_check_command_fails_on_duplicate_titles(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(project_root / "schema" / "Cycle Track.md", "Duplicate title.\n")

    exit_code = main(["check", "--project-root", str(project_root)])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload["ok"] is False
    assert payload["duplicate_anchors"] == ["Cycle Track"]
    assert payload["anchors"] == ["Cycle Track", "Cycle Track", "Notes"]
    assert not (project_root / "README.md").exists()


def test_toc_command_lists_entries_in_order(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["toc", "--project-root", str(project_root), "--pretty"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["entries"] == [
        {"title": "Cycle Track", "anchor": "Cycle Track"},
        {"title": "Notes", "anchor": "Notes"},
    ]


def test_env_config_is_used_by_cli(
    project_root: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("TAGGUIDE_OUTPUT_PATH", "out/GUIDE.md")

    exit_code = main(["build", "--project-root", str(project_root)])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["output_path"] == "out/GUIDE.md"
    assert (project_root / "out" / "GUIDE.md").exists()
