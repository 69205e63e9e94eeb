"""Content domain models — pure Pydantic v2 data types.

Four content types share one shape: an opaque ``id`` plus type-specific
string fields and an optional embedded image. Each has a matching
``*Draft`` model holding un-validated form values; drafts allow empty
strings so the store can report every missing field at once.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

ALL_CATEGORIES = "All"

FRESH_LABEL = "Baru saja"
DEFAULT_QUOTE = "Semangat melayani!"


class MemoryCategory(StrEnum):
    """Gallery memory categories."""

    EVENT = "Event"
    DAILY = "Daily"
    ACHIEVEMENT = "Achievement"


class NewsCategory(StrEnum):
    """News feed categories."""

    PROMO = "Promo"
    STORE_INFO = "Store Info"
    INTERNAL = "Internal"


class _Entity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str


class TeamMember(_Entity):
    """A member of the store roster."""

    name: str
    role: str
    quote: str = DEFAULT_QUOTE
    image: str


class Memory(_Entity):
    """A photo memory in the gallery."""

    title: str
    description: str
    date: str  # free-text label, not a calendar date
    category: MemoryCategory = MemoryCategory.DAILY
    image: str


class NewsItem(_Entity):
    """A news feed entry. ``content`` mirrors ``summary``."""

    title: str
    summary: str
    content: str = ""
    category: NewsCategory = NewsCategory.PROMO
    date: str = FRESH_LABEL
    image: str


class GuestMessage(_Entity):
    """A guestbook message."""

    sender: str
    content: str
    timestamp: str = FRESH_LABEL
    image: str | None = None


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------


class TeamMemberDraft(BaseModel):
    name: str = ""
    role: str = ""
    quote: str = ""
    image: str | None = None


class MemoryDraft(BaseModel):
    title: str = ""
    description: str = ""
    date: str = ""
    category: MemoryCategory = MemoryCategory.DAILY
    image: str | None = None


class NewsItemDraft(BaseModel):
    title: str = ""
    summary: str = ""
    category: NewsCategory = NewsCategory.PROMO
    image: str | None = None


class GuestMessageDraft(BaseModel):
    sender: str = ""
    content: str = ""
    image: str | None = None
