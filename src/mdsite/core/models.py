"""Document, page, and site models shared by the parse, render, and assemble steps"""

import datetime as dt
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Iterable

from mdsite.core.metadata import Metadata
from mdsite.core.utils.slug import slugify


INDEX_PATH = "index.html"
MANIFEST_PATH = "index.json"
TAG_DIR = "tags"
PAGE_DIR = "pages"       # documents whose natural url is reserved for generated pages move here


@dataclass(frozen=True)
class Document:
    """One content file: validated front-matter plus raw body text, identified by path."""
    path:     str            # POSIX path relative to the content root, e.g. 'blog/stream.md'
    metadata: Metadata
    body:     str

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def date(self) -> dt.date:
        return self.metadata.date

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self.metadata.tags)

    @property
    def flags(self) -> dict[str, Any]:
        """Known flags that are set, plus unknown flags as given."""
        return self.metadata.flags.to_dict()

    @property
    def slug(self) -> str:
        stem = PurePosixPath(self.path).stem
        return self.metadata.slug or slugify(stem, fallback=stem)

    @property
    def category(self) -> str:
        """Top-level directory of the path, or '.' for root-level files."""
        parts = PurePosixPath(self.path).parts
        return parts[0] if len(parts) > 1 else '.'

    @property
    def url(self) -> str:
        """Output page path relative to the site root.

        The site index, the manifest and everything under tags/ belong to
        generated pages, so a document landing there is moved under pages/.
        """
        url = PurePosixPath(self.path).parent / f"{self.slug}.html"
        if str(url) in (INDEX_PATH, MANIFEST_PATH) or url.parts[0] == TAG_DIR:
            url = PAGE_DIR / url
        return str(url)


@dataclass(frozen=True)
class Page:
    """A rendered output file, path relative to the output directory."""
    path:     str
    content:  str
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class Site:
    """Everything one generation run produces; discarded once written."""
    documents: tuple[Document, ...]
    tag_index: dict[str, frozenset[str]]
    pages:     tuple[Page, ...] = ()

    @property
    def warnings(self) -> list[str]:
        return [w for p in self.pages for w in p.warnings]


def tag_url(tag: str, suffix: int = 1) -> str:
    """Output path of the listing page for a tag; suffix > 1 disambiguates equal slugs."""
    slug = slugify(tag, fallback='tag')
    if suffix > 1:
        slug = f"{slug}-{suffix}"
    return f"{TAG_DIR}/{slug}.html"


def tag_urls(tags: Iterable[str]) -> dict[str, str]:
    """Give every tag its own page path.

    Tags are taken in sorted order; the first to claim a slug keeps it and
    later ones get the next free suffix: of 'Rust' and 'rust', 'rust' gets -2.
    """
    urls: dict[str, str] = {}
    taken: set[str] = set()
    for tag in sorted(tags):
        suffix = 1
        while (url := tag_url(tag, suffix)) in taken:
            suffix += 1
        taken.add(url)
        urls[tag] = url
    return urls
