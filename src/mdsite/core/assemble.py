"""Site assembly: canonical ordering, tag index, and the full output page set"""

import json
import logging
from collections import Counter
from typing import TYPE_CHECKING, Any, Iterable

from mdsite.core.models import MANIFEST_PATH, Document, Page, Site, tag_urls
from mdsite.errors import DuplicatePath

if TYPE_CHECKING:
    from mdsite.core.render import Renderer
    from mdsite.core.store import ContentStore


logger = logging.getLogger(__name__)


def order_documents(documents: Iterable[Document]) -> list[Document]:
    """Newest first; equal dates fall back to lexical path order."""
    return sorted(documents, key=lambda d: (-d.date.toordinal(), d.path))


def build_tag_index(documents: Iterable[Document]) -> dict[str, frozenset[str]]:
    """Map each declared tag to the paths of the documents carrying it."""
    index: dict[str, set[str]] = {}
    for doc in documents:
        for tag in doc.tags:
            index.setdefault(tag, set()).add(doc.path)
    return {tag: frozenset(paths) for tag, paths in sorted(index.items())}


def build_manifest(
    site_title: str,
    documents: list[Document],
    tag_index: dict[str, frozenset[str]],
    urls_by_tag: dict[str, str] | None = None,
    ) -> dict[str, Any]:
    """Build the JSON manifest: ordered documents plus tag -> page urls.

    Tag entries follow document order. No timestamps, so repeated runs over
    the same input produce identical output.
    """
    urls = {d.path: d.url for d in documents}
    urls_by_tag = urls_by_tag or tag_urls(tag_index)
    return {
        "site": site_title,
        "documents": [
            {
                "slug": d.slug,
                "path": d.path,
                "url": d.url,
                "title": d.title,
                "date": d.date.isoformat(),
                "tags": list(d.metadata.tags),
                "flags": d.flags,
                "description": d.metadata.description,
            }
            for d in documents
        ],
        "tags": {
            tag: {"url": urls_by_tag[tag], "pages": [urls[d.path] for d in documents if d.path in paths]}
            for tag, paths in tag_index.items()
        },
    }


def _check_unique(pages: list[Page]) -> None:
    """Two pages must never write to the same output path."""
    dupes = [path for path, n in Counter(p.path for p in pages).items() if n > 1]
    if dupes:
        raise DuplicatePath("more than one page renders to this output path", path=dupes[0])


def assemble_site(store: "ContentStore", renderer: "Renderer") -> Site:
    """Render every document, one page per tag, the index page, and the manifest.

    Pure transformation: nothing is written here.
    """
    documents = order_documents(store.all())
    tag_index = store.tag_index()
    urls_by_tag = tag_urls(tag_index)

    pages = [renderer.render_document(d, urls_by_tag) for d in documents]
    for tag, paths in tag_index.items():
        pages.append(renderer.render_tag(tag, [d for d in documents if d.path in paths], urls_by_tag[tag]))
    pages.append(renderer.render_index(documents, tag_index, urls_by_tag))

    manifest = build_manifest(renderer.settings.site_title, documents, tag_index, urls_by_tag)
    content = json.dumps(manifest, indent=2, ensure_ascii=False, default=str)
    pages.append(Page(path=MANIFEST_PATH, content=content))
    _check_unique(pages)

    logger.info(
        "Assembled %d document(s), %d tag(s), %d page(s)", len(documents), len(tag_index), len(pages),
    )
    return Site(documents=tuple(documents), tag_index=tag_index, pages=tuple(pages))
