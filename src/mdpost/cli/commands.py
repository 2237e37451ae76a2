"""CLI command implementations"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdpost.config import Settings, load_config
from mdpost.core.exceptions import PostError
from mdpost.core.loader import PostLoader
from mdpost.core.models import Post
from mdpost.core.theme import load_themes
from mdpost.log import configure_logging


ContentRoot = Annotated[Optional[str], typer.Option("--content-root", help="Directory with one folder per post")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def _loader(settings: Settings) -> PostLoader:
    """Load themes and build a PostLoader, exiting on unreadable theme files."""
    try:
        themes = load_themes(settings)
    except (OSError, ValueError) as e:
        _fail("Could not load colour themes", e)
    try:
        return PostLoader(settings, themes)
    except PostError as e:
        _fail(e.message)


def _load_post(slug: str, content_root: Optional[str]) -> Post:
    loader = _loader(_settings(overrides={"content_root": content_root}))
    try:
        return asyncio.run(loader.load_post(slug))
    except PostError as e:
        _fail(e.message)


def list_cmd(content_root: ContentRoot = None):
    """List every post slug with its title, sorted by slug."""
    loader = _loader(_settings(overrides={"content_root": content_root}))
    try:
        posts = asyncio.run(loader.list_posts())
    except PostError as e:
        _fail(e.message)
    except OSError as e:
        _fail("Listing failed", e)
    if not posts:
        typer.echo("No posts found.")
        raise typer.Exit(1)
    for post in sorted(posts, key=lambda p: p.slug):
        title = post.frontmatter.get("title", "")
        typer.echo(f"{post.slug}\t{title}" if title else post.slug)


def show_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug (directory name under the content root)")],
    content_root: ContentRoot = None,
    ):
    """Print a post's front matter, headings, and bundled modules as JSON."""
    post = _load_post(slug, content_root)
    typer.echo(json.dumps({
        "slug": post.slug,
        "frontmatter": post.frontmatter,
        "headings": [h.model_dump() for h in post.headings],
        "modules": {k: m.loader for k, m in post.compiled_body.modules.items()},
        "externals": list(post.compiled_body.externals),
    }, indent=2, default=str))


def headings_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    content_root: ContentRoot = None,
    ):
    """Print the post's table of contents, indented by heading level."""
    post = _load_post(slug, content_root)
    for h in post.headings:
        typer.echo(f"{'  ' * (h.level - 1)}- {h.text} (#{h.id})")


def render_cmd(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write HTML here instead of stdout")] = None,
    content_root: ContentRoot = None,
    ):
    """Compile a post and emit its HTML fragment."""
    post = _load_post(slug, content_root)
    if out is None:
        typer.echo(post.compiled_body.html)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(post.compiled_body.html, encoding="utf-8")
    typer.echo(f"  {slug} -> {out}")
