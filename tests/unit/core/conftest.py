"""Shared fixtures for core unit tests"""

import datetime as dt

import pytest

from mdsite.config import Settings
from mdsite.core.metadata import validate_metadata
from mdsite.core.models import Document


SAMPLE_POST = """\
---
title: Streams in Rust
date: 2024-07-04
tags:
  - rust
  - async
extra:
  repo_view: true
  comment: true
---

# Streams

A `Stream` is an async iterator.

```rust
let s = stream::iter(vec![1, 2, 3]);
```
"""

SAMPLE_ABOUT = """\
---
title: About
date: 2023-01-01
---

Hello, I write about **concurrency**.
"""


def _make_doc(path: str, date: str = "2024-07-03", tags: list[str] = None, body: str = "Body.\n", **fields) -> Document:
    """Build a Document directly, bypassing the file parser."""
    raw = {"title": fields.pop("title", path), "date": dt.date.fromisoformat(date), "tags": tags or [], **fields}
    return Document(path=path, metadata=validate_metadata(raw, path), body=body)


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    """Factory fixture: make_doc(path, date, tags, body, **fields) -> Document."""
    return _make_doc


@pytest.fixture(name="settings")
def settings_fixture(tmp_path):
    return Settings(
        site_title="Test Site",
        content_dir=str(tmp_path / "content"),
        output_dir=str(tmp_path / "public"),
        static_dir=str(tmp_path / "static"),
    )


@pytest.fixture(name="content_dir")
def content_dir_fixture(tmp_path):
    """A content tree with one blog post and one root-level page."""
    root = tmp_path / "content"
    (root / "blog").mkdir(parents=True)
    (root / "blog" / "streams.md").write_text(SAMPLE_POST, encoding="utf-8")
    (root / "about.md").write_text(SAMPLE_ABOUT, encoding="utf-8")
    return root
