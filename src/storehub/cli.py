"""CLI interface for the content hub."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from storehub.augment import PromptKind, split_lines
from storehub.config import HubConfig, Provider, load_config, merge_cli_overrides
from storehub.content.models import (
    ALL_CATEGORIES,
    GuestMessageDraft,
    MemoryCategory,
    MemoryDraft,
    NewsCategory,
    NewsItemDraft,
    TeamMemberDraft,
)
from storehub.content.store import EntityStore
from storehub.errors import HubError
from storehub.hub import ContentHub
from storehub.images import attach_image_file
from storehub.session import SiteSettings

app = typer.Typer(
    name="storehub",
    help="Manage the store's team roster, memories, news and guestbook.",
)

console = Console()


class KindName(StrEnum):
    TEAM = "team"
    MEMORIES = "memories"
    NEWS = "news"
    GUESTBOOK = "guestbook"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from storehub import __version__

        console.print(f"storehub {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    config_path: Annotated[
        Optional[Path], typer.Option("--config", help="Path to a .storehub.toml file.")
    ] = None,
    data_dir: Annotated[
        Optional[Path], typer.Option("--data-dir", help="Directory for stored collections.")
    ] = None,
    provider: Annotated[
        Optional[Provider], typer.Option("--provider", help="Text-generation backend.")
    ] = None,
    model: Annotated[Optional[str], typer.Option("--model", help="Model override.")] = None,
) -> None:
    """Store Hub - content management for the X450 digital hub."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    config = merge_cli_overrides(
        load_config(config_path), data_dir=data_dir, provider=provider, model=model
    )
    ctx.obj = config


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _hub(ctx: typer.Context) -> ContentHub:
    config: HubConfig = ctx.obj
    return ContentHub.from_config(config)


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except HubError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc


def _load_image(ctx: typer.Context, path: Path | None) -> str | None:
    if path is None:
        return None
    config: HubConfig = ctx.obj
    return asyncio.run(attach_image_file(path, max_bytes=config.images.max_bytes))


def _report_save(store: EntityStore) -> None:
    if store.last_save_ok is False:
        console.print(
            f"[yellow]Warning:[/yellow] changes kept for this session only "
            f"({store.last_save_error})"
        )


def _describe_image(image: str | None) -> str:
    if not image:
        return "-"
    return "embedded" if image.startswith("data:") else "link"


def _print_saved(action: str, entity_id: str, store: EntityStore) -> None:
    console.print(f"[green]{action}[/green] {store.kind.label} {entity_id}")
    _report_save(store)


# ---------------------------------------------------------------------------
# Read commands
# ---------------------------------------------------------------------------


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    kind: Annotated[KindName, typer.Argument(help="Collection to show.")],
    category: Annotated[
        Optional[str], typer.Option("--category", "-c", help="Category filter, or 'All'.")
    ] = None,
) -> None:
    """List a collection, most recent first."""
    hub = _hub(ctx)
    store = hub.store(kind.value)
    if category and category != ALL_CATEGORIES and category not in store.kind.categories:
        allowed = ", ".join((ALL_CATEGORIES, *store.kind.categories)) or ALL_CATEGORIES
        console.print(f"[red]Error:[/red] unknown category {category!r} (choose from: {allowed})")
        raise typer.Exit(1)

    if store.read_error is not None:
        console.print(
            f"[yellow]Warning:[/yellow] stored {kind.value} could not be read, "
            f"showing defaults ({store.read_error.reason})"
        )
    entities = store.list(category)
    if not entities:
        console.print(f"[yellow]No {kind.value} entries.[/yellow]")
        return

    fields = [f for f in store.kind.entity_type.model_fields if f not in ("id", "image")]
    table = Table(title=store.kind.label)
    table.add_column("id")
    for field in fields:
        table.add_column(field)
    table.add_column("image")
    for entity in entities:
        values = [str(getattr(entity, f)) for f in fields]
        table.add_row(entity.id, *values, _describe_image(entity.image))
    console.print(table)


# ---------------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------------


@app.command(name="add-member")
def add_member(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", help="Member name.")] = "",
    role: Annotated[str, typer.Option("--role", help="Job title.")] = "",
    quote: Annotated[str, typer.Option("--quote", help="Personal motto.")] = "",
    image: Annotated[Optional[Path], typer.Option("--image", help="Profile photo.")] = None,
) -> None:
    """Add a team member (admin)."""
    hub = _hub(ctx)
    with _reporting_errors():
        draft = TeamMemberDraft(name=name, role=role, quote=quote, image=_load_image(ctx, image))
        member = hub.submit("team", draft, hub.sessions.current())
    _print_saved("Added", member.id, hub.team)


@app.command(name="edit-member")
def edit_member(
    ctx: typer.Context,
    entity_id: Annotated[str, typer.Argument(help="Member id.")],
    name: Annotated[Optional[str], typer.Option("--name")] = None,
    role: Annotated[Optional[str], typer.Option("--role")] = None,
    quote: Annotated[Optional[str], typer.Option("--quote")] = None,
    image: Annotated[Optional[Path], typer.Option("--image")] = None,
) -> None:
    """Edit a team member (admin). Unset options keep their current value."""
    hub = _hub(ctx)
    with _reporting_errors():
        store = hub.editor("team", hub.sessions.current())
        current = store.get(entity_id)
        draft = TeamMemberDraft(
            name=name if name is not None else getattr(current, "name", ""),
            role=role if role is not None else getattr(current, "role", ""),
            quote=quote if quote is not None else getattr(current, "quote", ""),
            image=_load_image(ctx, image) or getattr(current, "image", None),
        )
        store.update(entity_id, draft)
    _print_saved("Updated", entity_id, store)


# ---------------------------------------------------------------------------
# Memories
# ---------------------------------------------------------------------------


@app.command(name="add-memory")
def add_memory(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title")] = "",
    description: Annotated[str, typer.Option("--description")] = "",
    date: Annotated[str, typer.Option("--date", help="Free-text date label.")] = "",
    category: Annotated[MemoryCategory, typer.Option("--category")] = MemoryCategory.DAILY,
    image: Annotated[Optional[Path], typer.Option("--image")] = None,
) -> None:
    """Add a gallery memory (admin)."""
    hub = _hub(ctx)
    with _reporting_errors():
        draft = MemoryDraft(
            title=title,
            description=description,
            date=date,
            category=category,
            image=_load_image(ctx, image),
        )
        memory = hub.submit("memories", draft, hub.sessions.current())
    _print_saved("Added", memory.id, hub.memories)


@app.command(name="edit-memory")
def edit_memory(
    ctx: typer.Context,
    entity_id: Annotated[str, typer.Argument(help="Memory id.")],
    title: Annotated[Optional[str], typer.Option("--title")] = None,
    description: Annotated[Optional[str], typer.Option("--description")] = None,
    date: Annotated[Optional[str], typer.Option("--date")] = None,
    category: Annotated[Optional[MemoryCategory], typer.Option("--category")] = None,
    image: Annotated[Optional[Path], typer.Option("--image")] = None,
) -> None:
    """Edit a gallery memory (admin)."""
    hub = _hub(ctx)
    with _reporting_errors():
        store = hub.editor("memories", hub.sessions.current())
        current = store.get(entity_id)
        draft = MemoryDraft(
            title=title if title is not None else getattr(current, "title", ""),
            description=(
                description if description is not None else getattr(current, "description", "")
            ),
            date=date if date is not None else getattr(current, "date", ""),
            category=category or getattr(current, "category", MemoryCategory.DAILY),
            image=_load_image(ctx, image) or getattr(current, "image", None),
        )
        store.update(entity_id, draft)
    _print_saved("Updated", entity_id, store)


# ---------------------------------------------------------------------------
# News
# ---------------------------------------------------------------------------


@app.command(name="add-news")
def add_news(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title")] = "",
    summary: Annotated[str, typer.Option("--summary", help="Summary and full text.")] = "",
    category: Annotated[NewsCategory, typer.Option("--category")] = NewsCategory.PROMO,
    image: Annotated[Optional[Path], typer.Option("--image")] = None,
) -> None:
    """Publish a news item (admin)."""
    hub = _hub(ctx)
    with _reporting_errors():
        draft = NewsItemDraft(
            title=title, summary=summary, category=category, image=_load_image(ctx, image)
        )
        item = hub.submit("news", draft, hub.sessions.current())
    _print_saved("Added", item.id, hub.news)


@app.command(name="edit-news")
def edit_news(
    ctx: typer.Context,
    entity_id: Annotated[str, typer.Argument(help="News item id.")],
    title: Annotated[Optional[str], typer.Option("--title")] = None,
    summary: Annotated[Optional[str], typer.Option("--summary")] = None,
    category: Annotated[Optional[NewsCategory], typer.Option("--category")] = None,
    image: Annotated[Optional[Path], typer.Option("--image")] = None,
) -> None:
    """Edit a news item (admin)."""
    hub = _hub(ctx)
    with _reporting_errors():
        store = hub.editor("news", hub.sessions.current())
        current = store.get(entity_id)
        draft = NewsItemDraft(
            title=title if title is not None else getattr(current, "title", ""),
            summary=summary if summary is not None else getattr(current, "summary", ""),
            category=category or getattr(current, "category", NewsCategory.PROMO),
            image=_load_image(ctx, image) or getattr(current, "image", None),
        )
        store.update(entity_id, draft)
    _print_saved("Updated", entity_id, store)


# ---------------------------------------------------------------------------
# Guestbook
# ---------------------------------------------------------------------------


@app.command(name="sign")
def sign(
    ctx: typer.Context,
    sender: Annotated[str, typer.Option("--sender", help="Your name.")] = "",
    content: Annotated[str, typer.Option("--content", help="Message.")] = "",
    image: Annotated[Optional[Path], typer.Option("--image", help="Optional photo.")] = None,
) -> None:
    """Leave a guestbook message."""
    hub = _hub(ctx)
    with _reporting_errors():
        draft = GuestMessageDraft(sender=sender, content=content, image=_load_image(ctx, image))
        message = hub.submit("guestbook", draft, hub.sessions.current())
    _print_saved("Added", message.id, hub.guestbook)


@app.command(name="edit-message")
def edit_message(
    ctx: typer.Context,
    entity_id: Annotated[str, typer.Argument(help="Message id.")],
    sender: Annotated[Optional[str], typer.Option("--sender")] = None,
    content: Annotated[Optional[str], typer.Option("--content")] = None,
    image: Annotated[Optional[Path], typer.Option("--image")] = None,
    remove_image: Annotated[bool, typer.Option("--remove-image")] = False,
) -> None:
    """Edit a guestbook message (admin)."""
    hub = _hub(ctx)
    with _reporting_errors():
        store = hub.editor("guestbook", hub.sessions.current())
        current = store.get(entity_id)
        kept_image = None if remove_image else getattr(current, "image", None)
        draft = GuestMessageDraft(
            sender=sender if sender is not None else getattr(current, "sender", ""),
            content=content if content is not None else getattr(current, "content", ""),
            image=_load_image(ctx, image) or kept_image,
        )
        store.update(entity_id, draft)
    _print_saved("Updated", entity_id, store)


# ---------------------------------------------------------------------------
# Delete / reset
# ---------------------------------------------------------------------------


@app.command(name="delete")
def delete_cmd(
    ctx: typer.Context,
    kind: Annotated[KindName, typer.Argument(help="Collection.")],
    entity_id: Annotated[str, typer.Argument(help="Entity id.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation.")] = False,
) -> None:
    """Delete an entry (admin). Asks for confirmation."""
    hub = _hub(ctx)
    with _reporting_errors():
        store = hub.editor(kind.value, hub.sessions.current())
    if not yes and not typer.confirm(f"Delete {store.kind.label} {entity_id}?"):
        console.print("Cancelled.")
        raise typer.Exit(0)
    if store.delete(entity_id):
        _print_saved("Deleted", entity_id, store)
    else:
        console.print(f"[yellow]Nothing to delete:[/yellow] no {store.kind.label} {entity_id}")


@app.command(name="reset")
def reset_cmd(
    ctx: typer.Context,
    kind: Annotated[KindName, typer.Argument(help="Collection.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation.")] = False,
) -> None:
    """Discard stored entries and restore the built-in defaults (admin)."""
    hub = _hub(ctx)
    with _reporting_errors():
        store = hub.editor(kind.value, hub.sessions.current())
    if not yes and not typer.confirm(
        f"Reset all {kind.value} entries to the defaults? Saved changes will be lost."
    ):
        console.print("Cancelled.")
        raise typer.Exit(0)
    with _reporting_errors():
        store.reset()
    console.print(f"[green]Reset[/green] {kind.value} to {len(store)} default entries.")


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@app.command()
def login(ctx: typer.Context) -> None:
    """Enable admin mode for subsequent commands."""
    hub = _hub(ctx)
    with _reporting_errors():
        hub.sessions.login()
    console.print("[green]Admin control active.[/green]")


@app.command()
def logout(ctx: typer.Context) -> None:
    """Leave admin mode."""
    _hub(ctx).sessions.logout()
    console.print("Logged out.")


# ---------------------------------------------------------------------------
# Augmentation
# ---------------------------------------------------------------------------


@app.command(name="flash-news")
def flash_news(ctx: typer.Context) -> None:
    """Generate flash-news headlines."""
    hub = _hub(ctx)
    asyncio.run(hub.flash_news.refresh())
    for line in hub.flash_news.lines:
        console.print(f"[bold]>>[/bold] {line}")


@app.command(name="team-vibe")
def team_vibe(ctx: typer.Context) -> None:
    """Generate a team-synergy sentence from the current roster."""
    hub = _hub(ctx)
    if not asyncio.run(hub.refresh_team_vibe()):
        console.print("[yellow]No team members.[/yellow]")
        return
    console.print(f'[italic]"{hub.team_vibe.text}"[/italic]')


@app.command()
def domains(ctx: typer.Context) -> None:
    """Suggest domain names for the site (admin)."""
    hub = _hub(ctx)
    with _reporting_errors():
        hub.sessions.current().require_privileged()
    text = asyncio.run(hub.augmenter.generate(PromptKind.DOMAIN_SUGGESTIONS))
    for suggestion in split_lines(text):
        console.print(f"- {suggestion}")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@app.command()
def settings(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Option("--name", help="Site name.")] = None,
    tagline: Annotated[Optional[str], typer.Option("--tagline", help="Site tagline.")] = None,
) -> None:
    """Show or update the site identity (admin)."""
    hub = _hub(ctx)
    session = hub.sessions.current()
    with _reporting_errors():
        session.require_privileged()
    current = hub.settings()
    if name is None and tagline is None:
        console.print(f"[bold]{current.name}[/bold]\n{current.tagline}")
        return
    updated = SiteSettings(
        name=name if name is not None else current.name,
        tagline=tagline if tagline is not None else current.tagline,
    )
    with _reporting_errors():
        saved = hub.update_settings(updated, session)
    if saved:
        console.print("[green]Settings saved.[/green]")
    else:
        console.print("[yellow]Warning:[/yellow] settings could not be stored.")


if __name__ == "__main__":
    app()
