"""Command-line interface for Folio.

This module defines the CLI commands using the Click framework.

Commands:
- build: Build the site into the destination directory.
- post: Create a new post with a front matter block.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import click
import questionary

from . import __version__
from .content import DRAFTS_DIR, POSTS_DIR
from .errors import FolioError
from .frontmatter import dump_frontmatter, split_frontmatter
from .utils import is_html, is_markdown, normalize_terms, slugify, split_dated_name

NO_CATEGORY = "(none)"
NEW_CATEGORY = "(new category)"


@click.group()
@click.version_option(version=__version__, prog_name="folio")
def cli():
    """Folio blog builder."""


@cli.command()
@click.option(
    "--source",
    "-s",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Site source directory",
)
@click.option(
    "--destination",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (overrides _config.yml destination)",
)
@click.option("--drafts", is_flag=True, help="Include posts from _drafts/")
@click.option(
    "--future/--no-future",
    default=None,
    help="Include posts dated in the future (overrides _config.yml future)",
)
def build(source: Path, destination: Path | None, drafts: bool, future: bool | None):
    """Build the site into the destination directory."""
    from .build import build_site

    source_dir = source.resolve()
    try:
        result = build_site(
            source_dir, include_drafts=drafts, future=future, destination=destination
        )
    except FolioError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        if exc.source_path is not None:
            click.echo(
                click.style(f"  File: {_display_path(exc.source_path, source_dir)}", fg="yellow"),
                err=True,
            )
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    click.echo(
        f"Built {len(result.posts)} posts and {len(result.pages)} pages into {result.output_dir}"
    )


@cli.command()
@click.argument("title", required=False)
@click.option(
    "--category", "-c", default=None, help="Post category (prompted when omitted; \"\" for none)"
)
@click.option("--tag", "-t", "tags", multiple=True, help="Tag (repeatable)")
@click.option(
    "--date",
    "date_",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Publish date (defaults to today)",
)
@click.option("--layout", default="default", show_default=True, help="Layout name")
@click.option("--draft", is_flag=True, help="Create in _drafts/ without a date prefix")
@click.option(
    "--source",
    "-s",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Site source directory",
)
def post(
    title: str | None,
    category: str | None,
    tags: tuple[str, ...],
    date_: datetime | None,
    layout: str,
    draft: bool,
    source: Path,
):
    """Create a new post. Prompts for anything not given."""
    source_dir = source.resolve()
    if not source_dir.is_dir():
        raise click.ClickException(f"Source directory not found: {source_dir}")

    if not title:
        title = _ask(
            questionary.text(
                "Post title:",
                validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
                style=_questionary_style(),
            )
        ).strip()
    if category is None:
        category = _ask_category(source_dir)

    slug = slugify(title)
    if draft:
        target_dir = source_dir / DRAFTS_DIR
        filename = f"{slug}.md"
    else:
        target_dir = source_dir / POSTS_DIR
        filename = f"{(date_ or datetime.now()):%Y-%m-%d}-{slug}.md"
    target_path = target_dir / filename

    if target_path.exists():
        raise click.ClickException(
            f"File already exists: {_display_path(target_path, source_dir)}"
        )
    conflicting = [p for p in _existing_posts(target_dir) if _post_slug(p) == slug]
    if conflicting:
        raise click.ClickException(
            f"A post with slug '{slug}' already exists: {conflicting[0].name}"
        )

    front_matter: dict = {"layout": layout, "title": title}
    if category:
        front_matter["category"] = category
    tag_list = normalize_terms(list(tags))
    if tag_list:
        front_matter["tags"] = tag_list

    target_dir.mkdir(parents=True, exist_ok=True)
    target_path.write_text(dump_frontmatter(front_matter, "\n"), encoding="utf-8")
    click.echo(f"Created {_display_path(target_path, source_dir)}")


def _ask(question):
    answer = question.ask()
    if answer is None:
        raise click.Abort()
    return answer


def _ask_category(source_dir: Path) -> str:
    """Prompt for a category, offering those already used by posts."""
    try:
        existing = _existing_categories(source_dir / POSTS_DIR)
    except FolioError as exc:
        raise click.ClickException(str(exc)) from exc
    if not existing:
        return _ask(
            questionary.text("Category (leave empty for none):", style=_questionary_style())
        ).strip()
    choice = _ask(
        questionary.select(
            "Category:",
            choices=[NO_CATEGORY, *existing, NEW_CATEGORY],
            style=_questionary_style(),
        )
    )
    if choice == NO_CATEGORY:
        return ""
    if choice == NEW_CATEGORY:
        return _ask(
            questionary.text(
                "New category:",
                validate=lambda x: len(x.strip()) > 0 or "Category cannot be empty",
                style=_questionary_style(),
            )
        ).strip()
    return choice


def _existing_posts(folder: Path) -> list[Path]:
    if not folder.is_dir():
        return []
    return sorted(
        p for p in folder.iterdir() if p.is_file() and (is_markdown(p) or is_html(p))
    )


def _existing_categories(folder: Path) -> list[str]:
    """Collect categories used by existing posts, sorted."""
    found: set[str] = set()
    for path in _existing_posts(folder):
        front_matter, _ = split_frontmatter(path.read_text(encoding="utf-8"), path)
        category = front_matter.get("category")
        if category:
            found.add(str(category))
        found.update(normalize_terms(front_matter.get("categories")))
    return sorted(found)


def _post_slug(path: Path) -> str:
    dated = split_dated_name(path.stem)
    return slugify(dated[1] if dated else path.stem)


def _display_path(path: Path, root: Path) -> str:
    try:
        return str(Path(path).resolve().relative_to(root))
    except ValueError:
        return str(path)


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
