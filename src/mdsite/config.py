"""Site configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDSITE_"

# Env values for these fields are YAML snippets, e.g. MDSITE_TEMPLATES_BY_CATEGORY='{talks: talk.html}'
_YAML_ENV_FIELDS = {"templates_by_category"}


class Settings(BaseModel):
    site_title:     str = "mdsite"
    base_url:       str = Field(default="",        description="Absolute site URL; empty for relative links")
    repo_url:       str = Field(default="",        description="Source repository linked from pages with repo_view")
    content_dir:    str = Field(default="content", description="Root directory of the source documents")
    output_dir:     str = Field(default="public",  description="Directory for rendered pages")
    static_dir:     str = Field(default="static",  description="Assets copied verbatim into output_dir")
    templates_dir:  Optional[str] = Field(default=None, description="Templates overriding the built-in set")
    parser_config:  str = Field(default="gfm-like",  description="MarkdownIt parser preset name")
    default_template: str = Field(default="page.html", description="Template for documents with no category rule")
    templates_by_category: dict[str, str] = Field(
        default_factory=lambda: {"blog": "post.html"},
        description="Top-level content directory -> template name",
    )
    clean:          bool = Field(default=False, description="Remove output_dir before writing")
    log_level:      str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None, config_file: Path | None = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides.

    An explicit config_file replaces config.yaml and must exist.
    """
    path = Path(config_file or CONFIG_FILE)
    if config_file and not path.is_file():
        raise ValueError(f"Config file not found: {path}")
    data: dict[str, Any] = {}
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {path.name}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {path.name}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            if name in _YAML_ENV_FIELDS:
                try:
                    val = yaml.safe_load(val)
                except yaml.YAMLError as e:
                    raise ValueError(f"Invalid {ENV_PREFIX}{name.upper()}: {e}") from e
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
