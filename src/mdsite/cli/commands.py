"""CLI command implementations"""

import logging
from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml

from mdsite.config import CONFIG_FILE, Settings, load_config
from mdsite.core.pipeline import collect, run_build, run_check
from mdsite.errors import SiteError


SAMPLE_POST = """\
---
title: Hello, world
date: {date}
tags:
  - meta
extra:
  comment: false
---

First post.
"""


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None, config_file: Path = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides, config_file=config_file)
    except ValueError as e:
        _fail(str(e))


def _configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Configure root logging once per invocation; --verbose forces DEBUG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _echo_warnings(warnings: list[str]) -> None:
    for w in warnings:
        typer.echo(f"  warning: {w}", err=True)


ContentArg = Annotated[Optional[str], typer.Argument(help="Content directory (default: content_dir setting)")]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")]
ConfigOpt = Annotated[Optional[Path], typer.Option("--config", "-c", help=f"Config file to read instead of ./{CONFIG_FILE}")]


def build_cmd(
    content: ContentArg = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    templates: Annotated[Optional[str], typer.Option("--templates-dir", help="Templates overriding the built-in set")] = None,
    clean: Annotated[Optional[bool], typer.Option("--clean/--no-clean", help="Remove the output directory first")] = None,
    config: ConfigOpt = None,
    verbose: VerboseOpt = False,
    ):
    """Run the full pipeline: collect -> assemble -> write."""
    settings = _settings(overrides={
        "content_dir": content, "output_dir": out, "templates_dir": templates, "clean": clean,
    }, config_file=config)
    _configure_logging(settings, verbose)
    try:
        result = run_build(settings)
    except (SiteError, OSError) as e:
        _fail("Build failed, nothing written", e)

    _echo_warnings(result.warnings)
    for doc in result.site.documents:
        typer.echo(f"  {doc.path} -> {doc.url}")
    typer.echo(
        f"Built {len(result.site.documents)} document(s), "
        f"{len(result.site.tag_index)} tag(s); "
        f"wrote {len(result.written)} file(s) to {settings.output_dir}/"
    )


def check_cmd(
    content: ContentArg = None,
    config: ConfigOpt = None,
    verbose: VerboseOpt = False,
    ):
    """Parse, validate, and render everything without writing output."""
    settings = _settings(overrides={"content_dir": content}, config_file=config)
    _configure_logging(settings, verbose)
    try:
        site = run_check(settings)
    except (SiteError, OSError) as e:
        _fail("Check failed", e)

    _echo_warnings(site.warnings)
    typer.echo(f"OK - {len(site.documents)} document(s), {len(site.warnings)} warning(s)")


def tags_cmd(
    content: ContentArg = None,
    config: ConfigOpt = None,
    ):
    """List tags with the number of documents carrying each."""
    settings = _settings(overrides={"content_dir": content}, config_file=config)
    try:
        store = collect(Path(settings.content_dir))
    except (SiteError, OSError) as e:
        _fail("Could not read content", e)

    index = store.tag_index()
    if not index:
        typer.echo("No tags found.")
        raise typer.Exit(1)
    for tag, paths in index.items():
        typer.echo(f"{tag}\t{len(paths)}")


def init_cmd(
    directory: Annotated[Path, typer.Argument(help="Project directory to initialize")] = Path("."),
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing config.yaml")] = False,
    ):
    """Write a starter config.yaml and a sample post."""
    config_path = directory / CONFIG_FILE
    if config_path.exists() and not force:
        _fail(f"{config_path} already exists (use --force to overwrite)")

    settings = Settings()
    directory.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.safe_dump(settings.model_dump(exclude_none=True), sort_keys=False),
        encoding="utf-8",
    )
    post = directory / settings.content_dir / "blog" / "hello-world.md"
    if not post.exists():
        post.parent.mkdir(parents=True, exist_ok=True)
        post.write_text(SAMPLE_POST.format(date=date.today().isoformat()), encoding="utf-8")
    typer.echo(f"Initialized site at: {directory.resolve()}")
