"""Content file discovery and front-matter splitting"""

import logging
from pathlib import Path
from typing import Any

import yaml

from mdsite.core.metadata import Metadata, validate_metadata
from mdsite.core.models import Document
from mdsite.errors import MalformedFrontMatter, SiteError


logger = logging.getLogger(__name__)

DELIMITER = '---'
CONTENT_EXTENSIONS = {'.md', '.markdown'}


def split_frontmatter(text: str, path: str | None = None) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) for text opening with a '---' delimited YAML block.

    Raises MalformedFrontMatter when either delimiter is missing, or the block
    is not valid YAML or not a mapping.
    """
    lines = text.lstrip('\ufeff').splitlines(keepends=True)
    if not lines or lines[0].strip() != DELIMITER:
        raise MalformedFrontMatter("missing opening '---' front-matter delimiter", path=path)

    end = next((i for i in range(1, len(lines)) if lines[i].strip() == DELIMITER), None)
    if end is None:
        raise MalformedFrontMatter("missing closing '---' front-matter delimiter", path=path)

    try:
        fm = yaml.safe_load(''.join(lines[1:end])) or {}
    except yaml.YAMLError as e:
        raise MalformedFrontMatter(f"invalid YAML front-matter: {e}", path=path) from e
    if not isinstance(fm, dict):
        raise MalformedFrontMatter(
            f"front-matter must be a mapping, got {type(fm).__name__}", path=path,
        )
    return fm, ''.join(lines[end + 1:])


def dump_frontmatter(metadata: Metadata) -> str:
    """Serialize metadata back into a '---' delimited YAML block."""
    header = yaml.safe_dump(
        metadata.to_frontmatter(), default_flow_style=False, allow_unicode=True, sort_keys=False,
    )
    return f"{DELIMITER}\n{header}{DELIMITER}\n"


def parse_text(path: str, text: str) -> Document:
    """Parse raw file content into a Document; performs no rendering."""
    raw, body = split_frontmatter(text, path)
    return Document(path=path, metadata=validate_metadata(raw, path), body=body)


def _is_hidden(path: Path, root: Path) -> bool:
    """True when any component below root starts with '_' or '.' (section files, dotfiles)."""
    return any(part.startswith(('_', '.')) for part in path.relative_to(root).parts)


def discover_files(root: Path) -> list[Path]:
    """Return sorted content files under root, or [root] if it is a single content file."""
    if root.is_file():
        return [root] if root.suffix in CONTENT_EXTENSIONS else []
    return sorted(
        p for p in root.rglob('*')
        if p.is_file() and p.suffix in CONTENT_EXTENSIONS and not _is_hidden(p, root)
    )


def parse_file(file: Path, root: Path | None = None) -> Document:
    """Read and parse a content file; its identity is the path relative to root."""
    if root is None or root == file:
        rel = file.name
    else:
        rel = file.relative_to(root).as_posix()
    logger.debug("Parsing %s", rel)
    try:
        text = file.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise SiteError(f"not valid UTF-8: {e}", path=rel) from e
    return parse_text(rel, text)
