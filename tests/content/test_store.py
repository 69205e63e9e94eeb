"""Tests for EntityStore — generic ordered CRUD with durable snapshots."""

import asyncio
import itertools
import json
from pathlib import Path
from unittest.mock import patch

import pytest
from storehub.content.kinds import GUESTBOOK, MEMORIES, NEWS, TEAM
from storehub.content.models import (
    GuestMessageDraft,
    MemoryCategory,
    MemoryDraft,
    NewsCategory,
    NewsItemDraft,
    TeamMemberDraft,
)
from storehub.content.seed import MEMORIES as SEED_MEMORIES
from storehub.content.seed import TEAM_MEMBERS
from storehub.content.store import EntityStore
from storehub.errors import (
    ImageTooLargeError,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from storehub.storage import FileKeyValueStore, MemoryKeyValueStore

IMG = "data:image/png;base64,iVBORw0KGgo="


def _fixed_clock(ms: int = 1_700_000_000_000):
    """Clock that always returns the same instant, in nanoseconds."""
    return lambda: ms * 1_000_000


def _ticking_clock(start_ms: int = 1_700_000_000_000):
    counter = itertools.count(start_ms)
    return lambda: next(counter) * 1_000_000


def _team(kv=None, **kwargs) -> EntityStore:
    return EntityStore(TEAM, kv if kv is not None else MemoryKeyValueStore(), **kwargs)


def _member(name: str = "budi", role: str = "staff", **kwargs) -> TeamMemberDraft:
    return TeamMemberDraft(name=name, role=role, image=kwargs.pop("image", IMG), **kwargs)


class TestSeedFallback:
    def test_empty_store_uses_seed_roster(self):
        store = _team()
        assert store.list() == list(TEAM_MEMBERS)

    def test_corrupt_snapshot_uses_seed(self):
        kv = MemoryKeyValueStore()
        kv.save(TEAM.storage_key, b"{not json")
        store = _team(kv)
        assert store.list() == list(TEAM_MEMBERS)

    def test_stored_empty_list_is_not_replaced_by_seed(self):
        kv = MemoryKeyValueStore()
        kv.save(TEAM.storage_key, b"[]")
        store = _team(kv)
        assert store.list() == []

    def test_guestbook_seed_has_welcome_message(self):
        store = EntityStore(GUESTBOOK, MemoryKeyValueStore())
        assert [m.sender for m in store.list()] == ["Pak RT Mulyadi"]


class TestCreate:
    def test_prepends_new_entity(self):
        store = _team()
        member = store.create(_member())
        assert store.list()[0] == member
        assert len(store) == len(TEAM_MEMBERS) + 1

    def test_normalizes_name_and_role(self):
        member = _team().create(_member(name="  budi ", role="staff"))
        assert member.name == "BUDI"
        assert member.role == "STAFF"

    def test_empty_quote_gets_default(self):
        member = _team().create(_member(quote=""))
        assert member.quote == "Semangat melayani!"

    def test_ids_are_unique_even_with_frozen_clock(self):
        store = _team(clock=_fixed_clock())
        ids = [store.create(_member(name=f"m{i}")).id for i in range(20)]
        assert len(set(ids)) == 20

    def test_ids_never_collide_with_existing(self):
        kv = MemoryKeyValueStore()
        kv.save(
            TEAM.storage_key,
            json.dumps(
                [{"id": "5", "name": "A", "role": "B", "quote": "q", "image": IMG}]
            ).encode(),
        )
        store = _team(kv, clock=lambda: 5_000_000)  # 5 ms
        member = store.create(_member())
        assert member.id != "5"
        assert member.id == "6"

    def test_ids_are_timestamp_derived(self):
        store = _team(clock=_ticking_clock(1_700_000_000_000))
        assert store.create(_member()).id == "1700000000000"

    def test_missing_fields_rejected_without_mutation(self):
        store = _team()
        before = store.list()
        with pytest.raises(ValidationError) as excinfo:
            store.create(TeamMemberDraft(name="", role="  ", image=None))
        assert excinfo.value.missing_fields == ("name", "role", "image")
        assert store.list() == before

    def test_memory_requires_all_fields(self):
        store = EntityStore(MEMORIES, MemoryKeyValueStore())
        with pytest.raises(ValidationError) as excinfo:
            store.create(MemoryDraft(title="Outing", image=IMG))
        assert excinfo.value.missing_fields == ("description", "date")

    def test_news_gets_fresh_date_and_mirrored_content(self):
        store = EntityStore(NEWS, MemoryKeyValueStore())
        item = store.create(
            NewsItemDraft(title="Promo", summary="Diskon 20%", category=NewsCategory.PROMO, image=IMG)
        )
        assert item.date == "Baru saja"
        assert item.content == "Diskon 20%"

    def test_guest_message_image_optional(self):
        store = EntityStore(GUESTBOOK, MemoryKeyValueStore())
        message = store.create(GuestMessageDraft(sender="Ani", content="Mantap"))
        assert message.image is None
        assert message.timestamp == "Baru saja"

    def test_oversized_embedded_image_rejected(self):
        store = _team(max_image_bytes=10)
        big = "data:image/png;base64," + "A" * 400
        with pytest.raises(ImageTooLargeError):
            store.create(_member(image=big))
        assert len(store) == len(TEAM_MEMBERS)


class TestUpdate:
    def test_preserves_position(self):
        store = _team()
        target = store.list()[2]
        updated = store.update(target.id, _member(name="new name"))
        assert store.list()[2] == updated
        assert store.list()[2].id == target.id
        assert updated.name == "NEW NAME"

    def test_other_entities_untouched(self):
        store = _team()
        before = store.list()
        store.update(before[1].id, _member())
        after = store.list()
        assert [e for i, e in enumerate(after) if i != 1] == [
            e for i, e in enumerate(before) if i != 1
        ]

    def test_unknown_id_raises_not_found(self):
        store = _team()
        with pytest.raises(NotFoundError):
            store.update("missing", _member())

    def test_not_found_checked_before_validation(self):
        store = _team()
        with pytest.raises(NotFoundError):
            store.update("missing", TeamMemberDraft())

    def test_invalid_draft_leaves_entity(self):
        store = _team()
        before = store.list()
        with pytest.raises(ValidationError):
            store.update(before[0].id, _member(image=None))
        assert store.list() == before

    def test_news_update_keeps_date(self):
        store = EntityStore(NEWS, MemoryKeyValueStore())
        original = store.list()[0]
        updated = store.update(
            original.id,
            NewsItemDraft(title="Baru", summary="Isi baru", category=original.category, image=IMG),
        )
        assert updated.date == original.date
        assert updated.content == "Isi baru"

    def test_guest_update_keeps_timestamp_and_can_drop_image(self):
        store = EntityStore(GUESTBOOK, MemoryKeyValueStore())
        created = store.create(GuestMessageDraft(sender="Ani", content="Hai", image=IMG))
        updated = store.update(created.id, GuestMessageDraft(sender="Ani", content="Halo"))
        assert updated.timestamp == created.timestamp
        assert updated.image is None


class TestDelete:
    def test_removes_entity(self):
        store = _team()
        target = store.list()[0].id
        assert store.delete(target) is True
        assert store.get(target) is None

    def test_idempotent(self):
        store = _team()
        target = store.list()[0].id
        store.delete(target)
        snapshot = store.list()
        assert store.delete(target) is False
        assert store.list() == snapshot

    def test_unknown_id_is_not_an_error(self):
        store = _team()
        assert store.delete("nope") is False


class TestList:
    def test_returns_snapshot(self):
        store = _team()
        view = store.list()
        store.create(_member())
        assert len(view) == len(TEAM_MEMBERS)

    def test_mutating_view_does_not_touch_store(self):
        store = _team()
        view = store.list()
        view.clear()
        assert len(store) == len(TEAM_MEMBERS)

    def test_category_filter(self):
        store = EntityStore(MEMORIES, MemoryKeyValueStore())
        store.create(
            MemoryDraft(
                title="Lomba", description="Juara 1", date="Mei",
                category=MemoryCategory.ACHIEVEMENT, image=IMG,
            )
        )
        results = store.list(MemoryCategory.ACHIEVEMENT)
        assert results
        assert all(m.category == MemoryCategory.ACHIEVEMENT for m in results)

    def test_all_categories_reconstruct_full_list(self):
        store = EntityStore(MEMORIES, MemoryKeyValueStore())
        full = store.list()
        per_category = [m for c in MEMORIES.categories for m in store.list(c)]
        assert sorted(m.id for m in per_category) == sorted(m.id for m in full)
        assert [m for m in full if m in per_category] == full
        assert store.list("All") == full


class TestPersistence:
    def test_round_trip_reproduces_collection(self, tmp_path: Path):
        kv = FileKeyValueStore(tmp_path)
        store = EntityStore(MEMORIES, kv, clock=_ticking_clock())
        store.create(
            MemoryDraft(title="A", description="a", date="Jan", category=MemoryCategory.EVENT, image=IMG)
        )
        store.create(MemoryDraft(title="B", description="b", date="Feb", image=IMG))
        store.delete(SEED_MEMORIES[0].id)

        reloaded = EntityStore(MEMORIES, FileKeyValueStore(tmp_path))
        assert reloaded.list() == store.list()

    def test_create_then_reload(self, tmp_path: Path):
        store = _team(FileKeyValueStore(tmp_path))
        store.create(TeamMemberDraft(name="BUDI", role="STAFF", image=IMG))

        fresh = _team(FileKeyValueStore(tmp_path))
        assert fresh.list()[0].name == "BUDI"

    def test_snapshot_is_json_array(self, tmp_path: Path):
        kv = FileKeyValueStore(tmp_path)
        store = _team(kv)
        store.create(_member())
        data = json.loads(kv.load(TEAM.storage_key))
        assert isinstance(data, list)
        assert data[0]["name"] == "BUDI"

    def test_save_failure_keeps_memory_state(self):
        kv = MemoryKeyValueStore(capacity_bytes=10)
        store = _team(kv)
        member = store.create(_member())
        assert store.list()[0] == member
        assert store.last_save_ok is False
        assert store.last_save_error is not None
        assert kv.load(TEAM.storage_key) is None

    def test_next_write_gets_fresh_chance(self):
        kv = MemoryKeyValueStore(capacity_bytes=10)
        store = _team(kv)
        store.create(_member())
        assert store.last_save_ok is False
        kv.capacity_bytes = 0
        store.delete("nope")
        assert store.last_save_ok is True
        assert kv.load(TEAM.storage_key) is not None

    def test_autosave_disabled_requires_flush(self):
        kv = MemoryKeyValueStore()
        store = _team(kv, autosave=False)
        store.create(_member())
        assert kv.load(TEAM.storage_key) is None
        assert store.flush() is True
        assert kv.load(TEAM.storage_key) is not None

    def test_reload_discards_unsaved_changes(self):
        kv = MemoryKeyValueStore()
        store = _team(kv, autosave=False)
        store.create(_member())
        store.reload()
        assert store.list() == list(TEAM_MEMBERS)

    def test_background_save_inside_event_loop(self):
        kv = MemoryKeyValueStore()

        async def scenario():
            store = _team(kv)
            store.create(_member())
            await store.drain()
            return store

        store = asyncio.run(scenario())
        assert store.last_save_ok is True
        assert json.loads(kv.load(TEAM.storage_key))[0]["name"] == "BUDI"

    def test_aflush_writes_snapshot(self):
        kv = MemoryKeyValueStore()
        store = _team(kv, autosave=False)
        store.create(_member())
        assert asyncio.run(store.aflush()) is True
        assert kv.load(TEAM.storage_key) is not None


class TestUnreadableSnapshot:
    def _stored_names(self, tmp_path: Path) -> list[str]:
        raw = FileKeyValueStore(tmp_path).load(TEAM.storage_key)
        return [m["name"] for m in json.loads(raw)]

    def _open_while_unreadable(self, tmp_path: Path) -> EntityStore:
        with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
            return _team(FileKeyValueStore(tmp_path))

    def test_serves_seed_and_records_error(self, tmp_path: Path):
        _team(FileKeyValueStore(tmp_path)).create(_member())
        store = self._open_while_unreadable(tmp_path)
        assert store.list() == list(TEAM_MEMBERS)
        assert isinstance(store.read_error, PersistenceFailure)

    def test_mutation_does_not_overwrite_snapshot(self, tmp_path: Path):
        _team(FileKeyValueStore(tmp_path)).create(_member())
        store = self._open_while_unreadable(tmp_path)

        store.create(_member(name="sari"))

        assert store.last_save_ok is False
        assert store.last_save_error is store.read_error
        assert self._stored_names(tmp_path)[0] == "BUDI"
        assert "SARI" not in self._stored_names(tmp_path)

    def test_flush_is_refused(self, tmp_path: Path):
        _team(FileKeyValueStore(tmp_path)).create(_member())
        store = self._open_while_unreadable(tmp_path)
        assert store.flush() is False
        assert self._stored_names(tmp_path)[0] == "BUDI"

    def test_successful_reload_lifts_hold(self, tmp_path: Path):
        _team(FileKeyValueStore(tmp_path)).create(_member())
        store = self._open_while_unreadable(tmp_path)

        store.reload()

        assert store.read_error is None
        assert store.list()[0].name == "BUDI"
        store.create(_member(name="sari"))
        assert store.last_save_ok is True
        assert self._stored_names(tmp_path)[:2] == ["SARI", "BUDI"]


class TestReset:
    def test_restores_seed_and_removes_key(self):
        kv = MemoryKeyValueStore()
        store = _team(kv)
        store.create(_member())
        store.delete(TEAM_MEMBERS[0].id)

        store.reset()

        assert store.list() == list(TEAM_MEMBERS)
        assert kv.load(TEAM.storage_key) is None

    def test_new_session_sees_seed(self, tmp_path: Path):
        store = _team(FileKeyValueStore(tmp_path))
        store.create(_member())
        store.reset()
        assert _team(FileKeyValueStore(tmp_path)).list() == list(TEAM_MEMBERS)

    def test_reset_when_nothing_stored(self):
        kv = MemoryKeyValueStore()
        store = _team(kv)
        store.reset()
        assert store.list() == list(TEAM_MEMBERS)
        assert kv.load(TEAM.storage_key) is None

    def test_pending_background_save_is_discarded(self):
        kv = MemoryKeyValueStore()

        async def scenario():
            store = _team(kv)
            store.create(_member())
            store.reset()
            await store.drain()
            return store

        store = asyncio.run(scenario())
        assert store.list() == list(TEAM_MEMBERS)
        assert kv.load(TEAM.storage_key) is None

    def test_lifts_hold_after_unreadable_snapshot(self, tmp_path: Path):
        kv = FileKeyValueStore(tmp_path)
        (tmp_path / f"{TEAM.storage_key}.json").write_bytes(b"[]")
        with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
            store = _team(kv)
        assert store.read_error is not None

        store.reset()
        store.create(_member())

        assert store.read_error is None
        assert store.last_save_ok is True
        assert json.loads(kv.load(TEAM.storage_key))[0]["name"] == "BUDI"
