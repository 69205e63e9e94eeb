"""Per-content-type rules plugged into the generic EntityStore.

An :class:`EntityKind` bundles everything type-specific: the storage
key, required draft fields, the category field used for filtering,
the seed dataset, and how a validated draft becomes an entity.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from storehub.content import seed
from storehub.content.models import (
    DEFAULT_QUOTE,
    FRESH_LABEL,
    GuestMessage,
    GuestMessageDraft,
    Memory,
    MemoryCategory,
    MemoryDraft,
    NewsCategory,
    NewsItem,
    NewsItemDraft,
    TeamMember,
    TeamMemberDraft,
)

E = TypeVar("E", bound=BaseModel)
D = TypeVar("D", bound=BaseModel)


@dataclass(frozen=True)
class EntityKind(Generic[E, D]):
    """Type-specific rules for one content collection."""

    name: str
    label: str
    storage_key: str
    entity_type: type[E]
    draft_type: type[D]
    required: tuple[str, ...]
    build: Callable[[D, str, E | None], E]
    seed: tuple[E, ...] = ()
    category_field: str | None = None
    categories: tuple[str, ...] = ()
    public_create: bool = False  # anyone may create; edit/delete still need admin

    def missing_fields(self, draft: D) -> list[str]:
        """Required fields that are absent or blank, in declaration order."""
        missing = []
        for field in self.required:
            value = getattr(draft, field)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(field)
        return missing

    def category_of(self, entity: E) -> str | None:
        if self.category_field is None:
            return None
        return str(getattr(entity, self.category_field))


def _build_member(draft: TeamMemberDraft, entity_id: str, previous: TeamMember | None) -> TeamMember:
    return TeamMember(
        id=entity_id,
        name=draft.name.strip().upper(),
        role=draft.role.strip().upper(),
        quote=draft.quote.strip() or DEFAULT_QUOTE,
        image=draft.image or "",
    )


def _build_memory(draft: MemoryDraft, entity_id: str, previous: Memory | None) -> Memory:
    return Memory(
        id=entity_id,
        title=draft.title,
        description=draft.description,
        date=draft.date,
        category=draft.category,
        image=draft.image or "",
    )


def _build_news(draft: NewsItemDraft, entity_id: str, previous: NewsItem | None) -> NewsItem:
    return NewsItem(
        id=entity_id,
        title=draft.title,
        summary=draft.summary,
        content=draft.summary,
        category=draft.category,
        date=previous.date if previous is not None else FRESH_LABEL,
        image=draft.image or "",
    )


def _build_message(
    draft: GuestMessageDraft, entity_id: str, previous: GuestMessage | None
) -> GuestMessage:
    return GuestMessage(
        id=entity_id,
        sender=draft.sender,
        content=draft.content,
        timestamp=previous.timestamp if previous is not None else FRESH_LABEL,
        image=draft.image or None,
    )


TEAM: EntityKind[TeamMember, TeamMemberDraft] = EntityKind(
    name="team",
    label="TeamMember",
    storage_key="x450_team_members",
    entity_type=TeamMember,
    draft_type=TeamMemberDraft,
    required=("name", "role", "image"),
    build=_build_member,
    seed=seed.TEAM_MEMBERS,
)

MEMORIES: EntityKind[Memory, MemoryDraft] = EntityKind(
    name="memories",
    label="Memory",
    storage_key="x450_memories",
    entity_type=Memory,
    draft_type=MemoryDraft,
    required=("title", "description", "date", "image"),
    build=_build_memory,
    seed=seed.MEMORIES,
    category_field="category",
    categories=tuple(c.value for c in MemoryCategory),
)

NEWS: EntityKind[NewsItem, NewsItemDraft] = EntityKind(
    name="news",
    label="NewsItem",
    storage_key="x450_news",
    entity_type=NewsItem,
    draft_type=NewsItemDraft,
    required=("title", "summary", "image"),
    build=_build_news,
    seed=seed.NEWS_ITEMS,
    category_field="category",
    categories=tuple(c.value for c in NewsCategory),
)

GUESTBOOK: EntityKind[GuestMessage, GuestMessageDraft] = EntityKind(
    name="guestbook",
    label="GuestMessage",
    storage_key="x450_guestbook",
    entity_type=GuestMessage,
    draft_type=GuestMessageDraft,
    required=("sender", "content"),
    build=_build_message,
    seed=seed.GUEST_MESSAGES,
    public_create=True,
)

ALL_KINDS: dict[str, EntityKind] = {k.name: k for k in (TEAM, MEMORIES, NEWS, GUESTBOOK)}
