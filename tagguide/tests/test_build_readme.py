from __future__ import annotations

from pathlib import Path

import pytest

from tagguide.config import GuideConfig
from tagguide.rendering import DEFAULT_FOOTER
from tagguide.schemas import UnsupportedShapeError
from tagguide.tools import build_readme as build_module
from tagguide.tools.build_readme import OutputWriteError, build_readme, render_readme


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _seed_schema(project_root: Path) -> None:
    schema_root = project_root / "schema"
    _write(
        schema_root / "2-lanes.yml",
        (
            "title: Bike Lanes\n"
            "features:\n"
            "  - feature: Painted Lane\n"
            "    osm: cycleway=lane\n"
            "    elements: way\n"
        ),
    )
    _write(
        schema_root / "1-tracks.yml",
        (
            "title: Cycle Track\n"
            "features:\n"
            "  - feature: Cycle Track\n"
            "    description: Painted buffer\n"
            "    osm: [highway=cycleway, surface=asphalt]\n"
            "    elements: way\n"
            "    mapillary: abc123\n"
            "  - feature: Raised Track\n"
        ),
    )
    _write(schema_root / "Notes.md", "Hello\n")


def test_build_readme_writes_full_document(tmp_path: Path) -> None:
    _seed_schema(tmp_path)

    result = build_readme(tmp_path, GuideConfig())

    assert result == {
        "ok": True,
        "output_path": "README.md",
        "schema_count": 2,
        "appendix_count": 1,
        "feature_count": 3,
        "duplicate_anchors": [],
    }
    readme = (tmp_path / "README.md").read_text(encoding="utf-8")
    assert readme.startswith("# OSM Bike Ottawa Tagging Guide\n\n## Table of Contents\n\n<ul>\n")
    assert readme.index("#Cycle Track") < readme.index("#Bike Lanes") < readme.index("#Notes")
    assert readme.index('<h2 id="Cycle Track">') < readme.index('<h2 id="Bike Lanes">') < readme.index('<h2 id="Notes">')
    assert "|**Painted Lane**||![way]<br>cycleway=lane||" in readme
    assert readme.endswith(DEFAULT_FOOTER)
    assert not (tmp_path / "README.md.tmp").exists()


def test_build_readme_uses_configured_title_and_footer(tmp_path: Path) -> None:
    _seed_schema(tmp_path)
    _write(tmp_path / "footer.md", "\n[way]: /img/way.png\n")

    config = GuideConfig(title="Custom Guide", footer_path="footer.md", output_path="docs/GUIDE.md")
    result = build_readme(tmp_path, config)

    assert result["output_path"] == "docs/GUIDE.md"
    guide = (tmp_path / "docs" / "GUIDE.md").read_text(encoding="utf-8")
    assert guide.startswith("# Custom Guide\n\n")
    assert guide.endswith("Hello\n\n\n[way]: /img/way.png\n")


def test_failed_build_leaves_existing_output_untouched(tmp_path: Path) -> None:
    _seed_schema(tmp_path)
    _write(tmp_path / "README.md", "previous guide\n")
    _write(tmp_path / "schema" / "3-broken.yml", "features:\n  - feature: Bad\n    mapillary: {key: abc}\n")

    with pytest.raises(UnsupportedShapeError, match="3-broken.yml"):
        build_readme(tmp_path, GuideConfig())

    assert (tmp_path / "README.md").read_text(encoding="utf-8") == "previous guide\n"
    assert not (tmp_path / "README.md.tmp").exists()


def test_write_failure_raises_output_write_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _seed_schema(tmp_path)

    def fail_replace(self: Path, target: Path) -> Path:
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", fail_replace)

    with pytest.raises(OutputWriteError, match="disk full"):
        build_module.build_readme(tmp_path, GuideConfig())

    assert not (tmp_path / "README.md").exists()
    assert not (tmp_path / "README.md.tmp").exists()


def test_duplicate_titles_are_reported_not_removed(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    _seed_schema(tmp_path)
    _write(tmp_path / "schema" / "Bike Lanes.md", "Appendix with a clashing title.\n")

    with caplog.at_level("WARNING", logger="tagguide.tools.build_readme"):
        rendered = render_readme(tmp_path, GuideConfig())

    assert rendered.duplicate_anchors == ["Bike Lanes"]
    assert [entry.title for entry in rendered.toc] == ["Cycle Track", "Bike Lanes", "Bike Lanes", "Notes"]
    assert "used more than once" in caplog.text
