"""Slug generation for page and tag URLs"""

import re


_STRIP_RE = re.compile(r'[^\w\s-]')
_SEP_RE = re.compile(r'[\s_]+')
_DASH_RE = re.compile(r'-{2,}')


def slugify(text: str, fallback: str = '') -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug.

    Returns `fallback` when nothing URL-safe survives (e.g. '!!!').
    """
    text = _STRIP_RE.sub('', text.lower())
    text = _SEP_RE.sub('-', text)
    return _DASH_RE.sub('-', text).strip('-') or fallback
