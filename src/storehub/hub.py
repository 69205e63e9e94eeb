"""Wires the four content stores, session, settings and augmentation."""

from __future__ import annotations

from pydantic import BaseModel

from storehub.augment import AugmentationService, PromptKind, RefreshableText
from storehub.config import HubConfig
from storehub.content.kinds import ALL_KINDS, GUESTBOOK, MEMORIES, NEWS, TEAM, EntityKind
from storehub.content.models import (
    GuestMessage,
    GuestMessageDraft,
    Memory,
    MemoryDraft,
    NewsItem,
    NewsItemDraft,
    TeamMember,
    TeamMemberDraft,
)
from storehub.content.store import EntityStore
from storehub.session import Session, SessionStore, SiteSettings, load_settings, save_settings
from storehub.storage import FileKeyValueStore, KeyValueStore

LOADING_FLASH = "Memuat berita terkini..."


class ContentHub:
    """Single entry point for the content management layer.

    Reads go through the public store attributes; mutations should go
    through :meth:`editor`, which checks the session capability.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        config: HubConfig | None = None,
        *,
        augmenter: AugmentationService | None = None,
        autosave: bool = True,
    ) -> None:
        self.config = config or HubConfig()
        self.kv = kv
        max_image = self.config.images.max_bytes
        self.team: EntityStore[TeamMember, TeamMemberDraft] = EntityStore(
            TEAM, kv, autosave=autosave, max_image_bytes=max_image
        )
        self.memories: EntityStore[Memory, MemoryDraft] = EntityStore(
            MEMORIES, kv, autosave=autosave, max_image_bytes=max_image
        )
        self.news: EntityStore[NewsItem, NewsItemDraft] = EntityStore(
            NEWS, kv, autosave=autosave, max_image_bytes=max_image
        )
        self.guestbook: EntityStore[GuestMessage, GuestMessageDraft] = EntityStore(
            GUESTBOOK, kv, autosave=autosave, max_image_bytes=max_image
        )
        self.sessions = SessionStore(kv)
        self.augmenter = augmenter or AugmentationService(
            self.config.augment, site=self.settings().name
        )
        self.flash_news = RefreshableText(
            self.augmenter, PromptKind.FLASH_NEWS, placeholder=LOADING_FLASH
        )
        self.team_vibe = RefreshableText(self.augmenter, PromptKind.TEAM_SYNERGY)

    @classmethod
    def from_config(cls, config: HubConfig) -> ContentHub:
        kv = FileKeyValueStore(config.data_dir, capacity_bytes=config.storage.capacity_bytes)
        return cls(kv, config)

    def store(self, kind: str | EntityKind) -> EntityStore:
        name = kind if isinstance(kind, str) else kind.name
        return {
            TEAM.name: self.team,
            MEMORIES.name: self.memories,
            NEWS.name: self.news,
            GUESTBOOK.name: self.guestbook,
        }[name]

    def editor(self, kind: str | EntityKind, session: Session) -> EntityStore:
        """Return the store for mutation. Raises NotAuthorizedError otherwise."""
        session.require_privileged()
        return self.store(kind)

    def submit(self, kind: str | EntityKind, draft: BaseModel, session: Session) -> BaseModel:
        """Create an entity, allowing anonymous sessions for public kinds."""
        store = self.store(kind)
        if not store.kind.public_create:
            session.require_privileged()
        return store.create(draft)

    def stores(self) -> list[EntityStore]:
        return [self.store(name) for name in ALL_KINDS]

    def flush(self) -> bool:
        """Persist every collection. True only if all writes succeeded."""
        return all([s.flush() for s in self.stores()])

    async def drain(self) -> None:
        for s in self.stores():
            await s.drain()

    async def refresh_team_vibe(self) -> bool:
        names = [m.name for m in self.team.list()]
        if not names:
            return False
        return await self.team_vibe.refresh(names)

    def settings(self) -> SiteSettings:
        return load_settings(self.kv, self.config.site)

    def update_settings(self, settings: SiteSettings, session: Session) -> bool:
        saved = save_settings(self.kv, settings, session)
        self.augmenter.site = settings.name
        return saved
