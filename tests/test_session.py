"""Tests for session capability and site settings."""

import pytest
from storehub.config import SiteConfig
from storehub.errors import NotAuthorizedError
from storehub.session import (
    ADMIN,
    ANONYMOUS,
    SETTINGS_KEY,
    SessionStore,
    SiteSettings,
    load_settings,
    save_settings,
)
from storehub.storage import FileKeyValueStore, MemoryKeyValueStore


class TestSession:
    def test_anonymous_not_privileged(self):
        with pytest.raises(NotAuthorizedError):
            ANONYMOUS.require_privileged()

    def test_admin_privileged(self):
        ADMIN.require_privileged()


class TestSessionStore:
    def test_default_is_anonymous(self):
        assert SessionStore(MemoryKeyValueStore()).current() == ANONYMOUS

    def test_login_persists(self):
        kv = MemoryKeyValueStore()
        SessionStore(kv).login()
        assert SessionStore(kv).current() == ADMIN

    def test_logout(self):
        kv = MemoryKeyValueStore()
        store = SessionStore(kv)
        store.login()
        store.logout()
        assert store.current() == ANONYMOUS


class TestSiteSettings:
    def test_defaults_from_config(self):
        settings = load_settings(MemoryKeyValueStore(), SiteConfig(name="A", tagline="B"))
        assert settings == SiteSettings(name="A", tagline="B")

    def test_save_and_load(self):
        kv = MemoryKeyValueStore()
        assert save_settings(kv, SiteSettings(name="X", tagline="Y"), ADMIN) is True
        assert load_settings(kv, SiteConfig()).name == "X"

    def test_save_requires_admin(self):
        kv = MemoryKeyValueStore()
        with pytest.raises(NotAuthorizedError):
            save_settings(kv, SiteSettings(name="X", tagline="Y"), ANONYMOUS)
        assert kv.load(SETTINGS_KEY) is None

    def test_save_failure_reported(self):
        kv = MemoryKeyValueStore(capacity_bytes=5)
        assert save_settings(kv, SiteSettings(name="X", tagline="Y"), ADMIN) is False

    def test_corrupt_settings_use_defaults(self):
        kv = MemoryKeyValueStore()
        kv.save(SETTINGS_KEY, b"garbage")
        assert load_settings(kv, SiteConfig()).name == SiteConfig().name


class TestUnreadableStore:
    def test_unreadable_flag_means_anonymous(self, tmp_path):
        (tmp_path / "isAdmin.json").mkdir()
        assert SessionStore(FileKeyValueStore(tmp_path)).current() == ANONYMOUS

    def test_unreadable_settings_use_defaults(self, tmp_path):
        (tmp_path / f"{SETTINGS_KEY}.json").mkdir()
        settings = load_settings(FileKeyValueStore(tmp_path), SiteConfig())
        assert settings.name == SiteConfig().name
