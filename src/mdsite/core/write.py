"""Output writing: static assets and rendered pages under the output directory"""

import logging
import shutil
from pathlib import Path
from typing import Iterable

from mdsite.core.models import Page
from mdsite.errors import SiteError


logger = logging.getLogger(__name__)


def copy_static(static_dir: Path, output_dir: Path) -> list[Path]:
    """Copy static assets verbatim; returns the copied destination files."""
    if not static_dir.is_dir():
        return []
    shutil.copytree(static_dir, output_dir, dirs_exist_ok=True)
    return sorted(output_dir / p.relative_to(static_dir) for p in static_dir.rglob('*') if p.is_file())


def _destinations(pages: list[Page], output_dir: Path) -> list[Path]:
    """Resolve each page under output_dir, refusing any path that leaves it."""
    root = output_dir.resolve()
    dests = []
    for page in pages:
        dest = output_dir / page.path
        if not dest.resolve().is_relative_to(root):
            raise SiteError("page path escapes the output directory", path=page.path)
        dests.append(dest)
    return dests


def write_site(
    pages: Iterable[Page],
    output_dir: Path,
    static_dir: Path | None = None,
    clean: bool = False,
    ) -> list[Path]:
    """Write pages (after static assets, so pages win on collision). Returns written paths, each once."""
    pages = list(pages)
    dests = _destinations(pages, output_dir)

    if clean and output_dir.exists():
        logger.info("Removing previous output %s", output_dir)
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = copy_static(static_dir, output_dir) if static_dir else []
    for page, dest in zip(pages, dests):
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(page.content, encoding='utf-8')
        logger.debug("Wrote %s", dest)
        written.append(dest)
    return list(dict.fromkeys(written))
