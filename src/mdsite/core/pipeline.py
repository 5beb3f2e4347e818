"""Pipeline step functions: collect, assemble, and write orchestration"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from mdsite.config import Settings
from mdsite.core.assemble import assemble_site
from mdsite.core.models import Site
from mdsite.core.parse import discover_files, parse_file
from mdsite.core.render import Renderer
from mdsite.core.store import ContentStore
from mdsite.core.write import write_site
from mdsite.errors import NotFound


logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    site:    Site
    written: list[Path] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        return self.site.warnings


def collect(content_dir: Path) -> ContentStore:
    """Parse every content file under content_dir into a fresh store.

    Fails fast: the first parse, metadata, or duplicate error aborts collection.
    """
    if not content_dir.exists():
        raise NotFound("content directory does not exist", path=str(content_dir))
    store = ContentStore()
    for f in discover_files(content_dir):
        store.add(parse_file(f, content_dir))
    logger.info("Collected %d document(s) from %s", len(store), content_dir)
    return store


def run_check(settings: Settings) -> Site:
    """Collect and assemble without writing anything."""
    store = collect(Path(settings.content_dir))
    return assemble_site(store, Renderer(settings))


def run_build(settings: Settings) -> BuildResult:
    """Collect, assemble, then write. Nothing is written unless assembly succeeds."""
    site = run_check(settings)
    static_dir = Path(settings.static_dir)
    written = write_site(
        site.pages, Path(settings.output_dir),
        static_dir=static_dir if static_dir.is_dir() else None,
        clean=settings.clean,
    )
    logger.info("Wrote %d file(s) to %s", len(written), settings.output_dir)
    return BuildResult(site=site, written=written)
