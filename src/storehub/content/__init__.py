"""Content domain — entity models, per-type rules, and the generic store."""

from storehub.content.kinds import ALL_KINDS, GUESTBOOK, MEMORIES, NEWS, TEAM, EntityKind
from storehub.content.models import (
    ALL_CATEGORIES,
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
from storehub.content.store import EntityStore

__all__ = [
    "ALL_CATEGORIES",
    "ALL_KINDS",
    "EntityKind",
    "EntityStore",
    "GUESTBOOK",
    "GuestMessage",
    "GuestMessageDraft",
    "MEMORIES",
    "Memory",
    "MemoryCategory",
    "MemoryDraft",
    "NEWS",
    "NewsCategory",
    "NewsItem",
    "NewsItemDraft",
    "TEAM",
    "TeamMember",
    "TeamMemberDraft",
]
