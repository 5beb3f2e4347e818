"""Error kinds raised while collecting and assembling a site"""


class SiteError(Exception):
    """Base class for all fatal site generation errors."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)

    def __str__(self) -> str:
        return str(self.args[0])


class MalformedFrontMatter(SiteError, ValueError):
    """Front-matter delimiters are missing or unbalanced, or the block is not a YAML mapping."""


class InvalidMetadata(SiteError, ValueError):
    """Required front-matter fields are missing or ill-typed."""

    def __init__(self, message: str, path: str | None = None, errors: list[str] | None = None):
        self.errors = errors or []
        super().__init__(message, path)


class DuplicatePath(SiteError, ValueError):
    """A document (or output page) with the same path already exists."""


class NotFound(SiteError, KeyError):
    """Lookup of an unknown document path."""
