"""Markup conversion with markdown-it and page wrapping with Jinja2 templates"""

import logging
import re
from pathlib import Path
from typing import Iterable

from jinja2 import (
    ChoiceLoader, Environment, FileSystemLoader, TemplateError, TemplateNotFound,
    select_autoescape,
)
from markdown_it import MarkdownIt

from mdsite.config import Settings
from mdsite.core.models import INDEX_PATH, Document, Page, tag_url
from mdsite.errors import SiteError


logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES = Path(__file__).resolve().parent.parent / "templates"
TAG_TEMPLATE = "tag.html"
INDEX_TEMPLATE = "index.html"

FENCE_RE = re.compile(r'^ {0,3}(`{3,}|~{3,})')


def make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    try:
        return MarkdownIt(preset, options_update={"linkify": False})
    except KeyError as e:
        raise SiteError(f"Unknown markdown preset '{preset}'") from e


def make_environment(templates_dir: str | None = None) -> Environment:
    """Jinja2 environment: user templates first, then the built-in set."""
    loaders = [FileSystemLoader(BUILTIN_TEMPLATES)]
    if templates_dir:
        loaders.insert(0, FileSystemLoader(templates_dir))
    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html", "xml"]),
        keep_trailing_newline=True,
    )
    return env


def _unclosed_fence(body: str) -> int | None:
    """Line number of a code fence that is never closed, else None."""
    open_fence: tuple[str, int, int] | None = None      # (char, length, line)
    for lineno, line in enumerate(body.splitlines(), 1):
        m = FENCE_RE.match(line)
        if not m:
            continue
        fence = m.group(1)
        if open_fence is None:
            open_fence = (fence[0], len(fence), lineno)
        elif fence[0] == open_fence[0] and len(fence) >= open_fence[1] and not line[m.end():].strip():
            open_fence = None
    return open_fence[2] if open_fence else None


def markup_warnings(tokens: list, body: str) -> list[str]:
    """Best-effort checks for markup that renders, but probably not as intended."""
    warnings = []
    if (line := _unclosed_fence(body)) is not None:
        warnings.append(f"unclosed code fence opened at line {line}")
    for tok in tokens:
        if tok.type != 'inline' or not tok.children:
            continue
        line = tok.map[0] + 1 if tok.map else '?'
        for child in tok.children:
            if child.type == 'image' and not child.attrGet('src'):
                warnings.append(f"image with empty source at line {line}")
            elif child.type == 'link_open' and not child.attrGet('href'):
                warnings.append(f"link with empty target at line {line}")
    return warnings


def _root_prefix(url: str, base_url: str = "") -> str:
    """Prefix that leads from a page at url back to the site root."""
    if base_url:
        return base_url.rstrip('/') + '/'
    return '../' * url.count('/')


class Renderer:
    """Renders documents, tag listings, and the site index into Pages."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.md = make_parser(settings.parser_config)
        self.env = make_environment(settings.templates_dir)

    def select_template(self, document: Document) -> str:
        """Front-matter `template`, else the category rule, else the default template."""
        if document.metadata.template:
            return document.metadata.template
        return self.settings.templates_by_category.get(document.category, self.settings.default_template)

    def render_markup(self, body: str, path: str | None = None) -> tuple[str, list[str]]:
        """Convert markdown body to HTML; markup problems are returned as warnings, never raised."""
        env: dict = {}
        tokens = self.md.parse(body, env)
        html = self.md.renderer.render(tokens, self.md.options, env)
        warnings = [f"{path}: {w}" if path else w for w in markup_warnings(tokens, body)]
        for w in warnings:
            logger.warning("%s", w)
        return html, warnings

    def _render(self, template_name: str, url: str, tag_urls: dict[str, str] | None = None, **context) -> str:
        lookup = tag_urls or {}
        try:
            template = self.env.get_template(template_name)
            return template.render(
                site=self.settings,
                root=_root_prefix(url, self.settings.base_url),
                url=url,
                tag_url=lambda tag: lookup.get(tag) or tag_url(tag),
                **context,
            )
        except TemplateNotFound as e:
            raise SiteError(f"Template not found: {e.name}", path=url) from e
        except TemplateError as e:
            raise SiteError(f"Template '{template_name}' failed: {e}", path=url) from e

    def render_document(self, document: Document, tag_urls: dict[str, str] | None = None) -> Page:
        html, warnings = self.render_markup(document.body, document.path)
        content = self._render(
            self.select_template(document), document.url, tag_urls,
            page=document, content=html,
        )
        return Page(path=document.url, content=content, warnings=tuple(warnings))

    def render_tag(self, tag: str, documents: Iterable[Document], url: str | None = None) -> Page:
        url = url or tag_url(tag)
        return Page(path=url, content=self._render(TAG_TEMPLATE, url, tag=tag, documents=list(documents)))

    def render_index(
        self,
        documents: Iterable[Document],
        tag_index: dict[str, frozenset[str]],
        tag_urls: dict[str, str] | None = None,
        ) -> Page:
        tags = {tag: len(paths) for tag, paths in tag_index.items()}
        return Page(
            path=INDEX_PATH,
            content=self._render(INDEX_TEMPLATE, INDEX_PATH, tag_urls, documents=list(documents), tags=tags),
        )
