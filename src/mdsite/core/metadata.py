"""Front-matter validation: required fields, ISO dates, tag lists, and option flags"""

import datetime as dt
import logging
import re
from typing import Any, Optional

from pydantic import (
    AliasChoices, BaseModel, ConfigDict, Field, StrictBool, ValidationError,
    field_validator, model_validator,
)

from mdsite.errors import InvalidMetadata


logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

# Serialized keys of declared fields left out of front-matter when unset
_OMIT_IF_NONE = {"slug", "description", "template"}
_OMIT_IF_EMPTY = {"tags", "extra"}


class PageFlags(BaseModel):
    """Boolean page options from the `extra` block; unknown keys are kept as-is."""
    model_config = ConfigDict(extra="allow")

    repo_view: Optional[StrictBool] = None     # show a link to the source repository
    comment:   Optional[StrictBool] = None     # show the comment widget

    def to_dict(self) -> dict[str, Any]:
        """Known flags that are set, plus every unknown flag exactly as given."""
        return {
            k: v for k, v in self.model_dump().items()
            if v is not None or k not in type(self).model_fields
        }


class Metadata(BaseModel):
    """Validated front-matter of a single document."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title:       str = Field(..., min_length=1)
    date:        dt.date
    tags:        list[str] = Field(default_factory=list)
    flags:       PageFlags = Field(
        default_factory=PageFlags,
        validation_alias=AliasChoices("extra", "options"),
        serialization_alias="extra",
    )
    slug:        Optional[str] = None
    description: Optional[str] = None
    template:    Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def merge_taxonomies(cls, data: Any) -> Any:
        """Fold `taxonomies: {tags: [...]}` into the top-level tag list."""
        if not isinstance(data, dict) or not isinstance(data.get("taxonomies"), dict):
            return data
        data = dict(data)
        taxonomies = dict(data.pop("taxonomies"))
        extra_tags = taxonomies.pop("tags", None)
        if taxonomies:
            data["taxonomies"] = taxonomies
        if extra_tags is not None:
            own = data.get("tags") or []
            if not isinstance(own, list) or not isinstance(extra_tags, list):
                raise ValueError("tags must be a list of strings")
            data["tags"] = own + extra_tags
        return data

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("date", mode="before")
    @classmethod
    def iso_date(cls, v: Any) -> dt.date:
        """Accept YAML dates/datetimes and 'YYYY-MM-DD' strings only."""
        if isinstance(v, dt.datetime):
            return v.date()
        if isinstance(v, dt.date):
            return v
        if isinstance(v, str) and ISO_DATE_RE.match(v.strip()):
            try:
                return dt.date.fromisoformat(v.strip())
            except ValueError as e:
                raise ValueError(f"not a valid calendar date: {v!r}") from e
        raise ValueError(f"expected an ISO calendar date (YYYY-MM-DD), got {v!r}")

    @field_validator("tags", mode="before")
    @classmethod
    def tag_list(cls, v: Any) -> list[str]:
        """Require a list of non-empty strings; strip and deduplicate, first occurrence wins."""
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError(f"tags must be a list of strings, got {type(v).__name__}")
        tags = []
        for item in v:
            if not isinstance(item, str) or not item.strip():
                raise ValueError(f"tags must be non-empty strings, got {item!r}")
            tags.append(item.strip())
        return list(dict.fromkeys(tags))

    @field_validator("slug")
    @classmethod
    def plain_slug(cls, v: Optional[str]) -> Optional[str]:
        """A slug names one output file; it may not climb or nest directories."""
        if v is None:
            return v
        v = v.strip()
        if not v or v.startswith(".") or "/" in v or "\\" in v:
            raise ValueError(f"slug must be a single file name, got {v!r}")
        return v

    def to_frontmatter(self) -> dict[str, Any]:
        """Plain dict suitable for YAML serialization.

        Unset declared optionals are omitted; unknown keys are kept even when null.
        """
        data = self.model_dump(by_alias=True)
        data["extra"] = self.flags.to_dict()
        return {
            k: v for k, v in data.items()
            if not (k in _OMIT_IF_NONE and v is None) and not (k in _OMIT_IF_EMPTY and not v)
        }


def _format_errors(err: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(p) for p in e['loc']) or '<root>'}: {e['msg']}"
        for e in err.errors()
    ]


def validate_metadata(raw: dict[str, Any], path: str | None = None) -> Metadata:
    """Validate a parsed front-matter mapping, raising InvalidMetadata on any field error."""
    try:
        meta = Metadata.model_validate(raw)
    except ValidationError as e:
        errors = _format_errors(e)
        raise InvalidMetadata("invalid front-matter: " + "; ".join(errors), path=path, errors=errors) from e
    if meta.model_extra:
        logger.debug("%s: keeping unknown front-matter keys %s", path, sorted(meta.model_extra))
    return meta
