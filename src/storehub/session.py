"""Operator session capability and persisted site settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from storehub.config import SiteConfig
from storehub.errors import NotAuthorizedError, PersistenceFailure
from storehub.storage import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_KEY = "isAdmin"
SETTINGS_KEY = "x450_site_settings"


@dataclass(frozen=True)
class Session:
    """Whether the current operator may mutate content."""

    privileged: bool = False

    def require_privileged(self) -> None:
        if not self.privileged:
            raise NotAuthorizedError("Admin login required for this action")


ANONYMOUS = Session(privileged=False)
ADMIN = Session(privileged=True)


class SessionStore:
    """Persists the privileged flag across runs."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def current(self) -> Session:
        try:
            flag = self._kv.load(SESSION_KEY)
        except PersistenceFailure as exc:
            logger.warning("Could not read session flag: %s", exc.reason)
            return ANONYMOUS
        return ADMIN if flag == b"true" else ANONYMOUS

    def login(self) -> Session:
        self._kv.save(SESSION_KEY, b"true")
        return ADMIN

    def logout(self) -> Session:
        self._kv.delete(SESSION_KEY)
        return ANONYMOUS


class SiteSettings(BaseModel):
    """Editable site identity."""

    name: str
    tagline: str


def load_settings(kv: KeyValueStore, defaults: SiteConfig) -> SiteSettings:
    """Load stored settings, falling back to configured defaults."""
    fallback = SiteSettings(name=defaults.name, tagline=defaults.tagline)
    try:
        raw = kv.load(SETTINGS_KEY)
    except PersistenceFailure as exc:
        logger.warning("Could not read site settings: %s", exc.reason)
        return fallback
    if raw is None:
        return fallback
    try:
        return SiteSettings.model_validate_json(raw)
    except PydanticValidationError:
        logger.warning("Corrupt site settings, using defaults")
        return fallback


def save_settings(kv: KeyValueStore, settings: SiteSettings, session: Session) -> bool:
    """Persist settings. Returns False if the store rejected the write."""
    session.require_privileged()
    try:
        kv.save(SETTINGS_KEY, settings.model_dump_json().encode("utf-8"))
    except PersistenceFailure as exc:
        logger.warning("Could not save site settings: %s", exc.reason)
        return False
    return True
