"""Unit tests for core/pipeline.py"""

import json
from pathlib import Path

import pytest

from mdsite.core.pipeline import collect, run_build, run_check
from mdsite.errors import InvalidMetadata, MalformedFrontMatter, NotFound


def _output_files(settings) -> list:
    out = Path(settings.output_dir)
    return [p for p in out.rglob("*") if p.is_file()] if out.exists() else []


# --- collect ---

def test_collect_builds_store(content_dir):
    store = collect(content_dir)
    assert len(store) == 2
    assert store.get("blog/streams.md").title == "Streams in Rust"
    assert store.tag_index()["rust"] == frozenset({"blog/streams.md"})


def test_collect_missing_content_dir(tmp_path):
    with pytest.raises(NotFound, match="does not exist"):
        collect(tmp_path / "missing")


def test_collect_fails_fast_on_malformed(content_dir):
    (content_dir / "broken.md").write_text("---\ntitle: Broken\ndate: 2024-07-03\n\nNo closing delimiter.\n")
    with pytest.raises(MalformedFrontMatter, match="broken.md"):
        collect(content_dir)


# --- run_check ---

def test_run_check_writes_nothing(settings, content_dir):
    site = run_check(settings)
    assert [d.path for d in site.documents] == ["blog/streams.md", "about.md"]
    assert _output_files(settings) == []


# --- run_build ---

def test_run_build_writes_site(settings, content_dir):
    result = run_build(settings)
    names = sorted(p.relative_to(settings.output_dir).as_posix() for p in result.written)
    assert names == [
        "about.html", "blog/streams.html", "index.html", "index.json",
        "tags/async.html", "tags/rust.html",
    ]
    manifest = json.loads((content_dir.parent / "public" / "index.json").read_text())
    assert manifest["documents"][0]["flags"] == {"repo_view": True, "comment": True}


def test_run_build_copies_static(settings, content_dir, tmp_path):
    (tmp_path / "static").mkdir()
    (tmp_path / "static" / "style.css").write_text("body {}")
    run_build(settings)
    assert (tmp_path / "public" / "style.css").exists()


def test_run_build_is_deterministic(settings, content_dir):
    """Repeated runs over the same input write byte-identical files."""
    first = {p: p.read_bytes() for p in run_build(settings).written}
    second = {p: p.read_bytes() for p in run_build(settings).written}
    assert first == second


def test_malformed_document_produces_no_output(settings, content_dir):
    """A missing closing delimiter fails the run before any file is written."""
    (content_dir / "blog" / "zz-broken.md").write_text("---\ntitle: Broken\n\nbody\n")
    with pytest.raises(MalformedFrontMatter):
        run_build(settings)
    assert _output_files(settings) == []


def test_invalid_metadata_produces_no_output(settings, content_dir):
    (content_dir / "bad-date.md").write_text("---\ntitle: Bad\ndate: July 4th\n---\nbody\n")
    with pytest.raises(InvalidMetadata, match="bad-date.md"):
        run_build(settings)
    assert _output_files(settings) == []


def test_run_build_reports_markup_warnings(settings, content_dir):
    (content_dir / "notes.md").write_text("---\ntitle: Notes\ndate: 2022-01-01\n---\n```\nunclosed\n")
    result = run_build(settings)
    assert result.warnings == ["notes.md: unclosed code fence opened at line 1"]
    assert any(p.name == "notes.html" for p in result.written)


def test_slug_cannot_escape_output_dir(settings, content_dir, tmp_path):
    """A slug with path components is invalid metadata; nothing is written anywhere."""
    (content_dir / "a.md").write_text("---\ntitle: A\ndate: 2024-07-03\nslug: ../../escaped\n---\nbody\n")
    with pytest.raises(InvalidMetadata, match="slug"):
        run_build(settings)
    assert _output_files(settings) == []
    assert not any(tmp_path.parent.glob("escaped.html"))
    assert not any(tmp_path.glob("escaped.html"))


def test_root_index_document_builds(settings, content_dir):
    """index.md at the content root renders beside, not over, the site index."""
    (content_dir / "index.md").write_text("---\ntitle: Home\ndate: 2024-07-01\n---\nWelcome\n")
    result = run_build(settings)
    out = Path(settings.output_dir)
    assert "Welcome" in (out / "pages" / "index.html").read_text()
    assert "Streams in Rust" in (out / "index.html").read_text()
    assert len(result.written) == len(set(result.written))
