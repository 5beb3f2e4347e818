"""In-memory content store: documents indexed by path, with a derived tag index"""

from collections.abc import Iterator, Mapping

from mdsite.core.assemble import build_tag_index
from mdsite.core.models import Document
from mdsite.errors import DuplicatePath, NotFound


class DocumentView:
    """Lazy, restartable view over stored documents; every iteration starts over."""

    def __init__(self, docs: Mapping[str, Document]):
        self._docs = docs

    def __iter__(self) -> Iterator[Document]:
        return iter(self._docs.values())

    def __len__(self) -> int:
        return len(self._docs)


class ContentStore:
    """Owns every Document of one generation run."""

    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}
        self._tag_index: dict[str, frozenset[str]] | None = None

    def __len__(self) -> int:
        return len(self._docs)

    def __contains__(self, path: object) -> bool:
        return path in self._docs

    def add(self, document: Document) -> None:
        """Insert a document; its path must not already be present."""
        if document.path in self._docs:
            raise DuplicatePath("document already in store", path=document.path)
        self._docs[document.path] = document
        self._tag_index = None

    def get(self, path: str) -> Document:
        try:
            return self._docs[path]
        except KeyError:
            raise NotFound("no such document", path=path) from None

    def all(self) -> DocumentView:
        return DocumentView(self._docs)

    def tag_index(self) -> dict[str, frozenset[str]]:
        """Tag -> document paths; rebuilt on the first read after any add."""
        if self._tag_index is None:
            self._tag_index = build_tag_index(self.all())
        return dict(self._tag_index)

    def by_tag(self, tag: str) -> list[Document]:
        return [self._docs[p] for p in sorted(self.tag_index().get(tag, ()))]
