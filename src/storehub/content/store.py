"""Generic, persistence-backed collection store.

One :class:`EntityStore` is instantiated per content type. It holds the
ordered collection in memory (most recent first), validates drafts
against the kind's required fields, and mirrors every mutation to a
:class:`~storehub.storage.KeyValueStore` as a full JSON snapshot.

Mutations are synchronous. Persistence is scheduled after each one:
inside a running event loop the snapshot is written by a background
task, otherwise it is written before the mutation returns. Either way a
failed write is logged and recorded in ``last_save_ok`` without rolling
back the in-memory change.

If the stored snapshot exists but cannot be read, the store serves the
seed dataset and refuses every save (``read_error`` is set) until
:meth:`EntityStore.reload` succeeds or :meth:`EntityStore.reset` clears it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Generic, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storehub.content.kinds import EntityKind
from storehub.content.views import project
from storehub.errors import ImageTooLargeError, NotFoundError, PersistenceFailure, ValidationError
from storehub.images import DATA_URL_PREFIX, MAX_IMAGE_BYTES, decoded_size
from storehub.storage import KeyValueStore

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)
D = TypeVar("D", bound=BaseModel)

# Alias to avoid shadowing by EntityStore.list method
_list = list


class EntityStore(Generic[E, D]):
    """Ordered CRUD collection for one content type."""

    def __init__(
        self,
        kind: EntityKind[E, D],
        kv: KeyValueStore,
        *,
        autosave: bool = True,
        max_image_bytes: int = MAX_IMAGE_BYTES,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self.kind = kind
        self.autosave = autosave
        self.max_image_bytes = max_image_bytes
        self.last_save_ok: bool | None = None
        self.last_save_error: PersistenceFailure | None = None
        self.read_error: PersistenceFailure | None = None
        self._kv = kv
        self._clock = clock
        self._adapter: TypeAdapter[_list[E]] = TypeAdapter(_list[kind.entity_type])
        self._last_id = 0
        self._epoch = 0
        self._pending: set[asyncio.Task[bool]] = set()
        self._entities: _list[E] = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _list[E]:
        try:
            raw = self._kv.load(self.kind.storage_key)
        except PersistenceFailure as exc:
            # Serve the seed but never overwrite a snapshot we could not read.
            logger.warning(
                "Cannot read %s, using seed dataset with saves held: %s",
                self.kind.storage_key,
                exc.reason,
            )
            self.read_error = exc
            return _list(self.kind.seed)
        self.read_error = None
        if raw is None:
            logger.debug("No stored %s, using seed dataset", self.kind.storage_key)
            return _list(self.kind.seed)
        try:
            entities = self._adapter.validate_json(raw)
        except PydanticValidationError:
            logger.warning("Corrupt snapshot for %s, using seed dataset", self.kind.storage_key)
            return _list(self.kind.seed)
        logger.info("Loaded %d %s record(s)", len(entities), self.kind.label)
        return entities

    def _index_of(self, entity_id: str) -> int | None:
        for index, entity in enumerate(self._entities):
            if entity.id == entity_id:  # type: ignore[attr-defined]
                return index
        return None

    def _new_id(self) -> str:
        """Millisecond timestamp, bumped past the last issued or any taken id."""
        candidate = max(self._clock() // 1_000_000, self._last_id + 1)
        taken = {e.id for e in self._entities}  # type: ignore[attr-defined]
        while str(candidate) in taken:
            candidate += 1
        self._last_id = candidate
        return str(candidate)

    def _validate(self, draft: D) -> None:
        missing = self.kind.missing_fields(draft)
        if missing:
            raise ValidationError(self.kind.label, missing)
        image = getattr(draft, "image", None)
        if image and image.startswith(DATA_URL_PREFIX):
            size = decoded_size(image)
            if size > self.max_image_bytes:
                raise ImageTooLargeError(size, self.max_image_bytes)

    def _snapshot(self) -> bytes:
        return self._adapter.dump_json(self._entities)

    def _write(self, payload: bytes, epoch: int) -> bool:
        if epoch != self._epoch:
            logger.debug("Dropping stale snapshot for %s", self.kind.storage_key)
            return False
        if self.read_error is not None:
            self.last_save_ok = False
            self.last_save_error = self.read_error
            return False
        try:
            self._kv.save(self.kind.storage_key, payload)
        except PersistenceFailure as exc:
            logger.warning("Save failed for %s: %s", self.kind.storage_key, exc.reason)
            self.last_save_ok = False
            self.last_save_error = exc
            return False
        self.last_save_ok = True
        self.last_save_error = None
        return True

    def _schedule_save(self) -> None:
        if not self.autosave:
            return
        # Serialize now so each write is a full, consistent snapshot.
        payload = self._snapshot()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write(payload, self._epoch)
            return
        task = loop.create_task(asyncio.to_thread(self._write, payload, self._epoch))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # ── Write operations ─────────────────────────────────────────

    def create(self, draft: D) -> E:
        """Validate a draft, prepend the new entity, and schedule a save.

        Raises ValidationError naming the missing fields; nothing changes.
        """
        self._validate(draft)
        entity = self.kind.build(draft, self._new_id(), None)
        self._entities.insert(0, entity)
        self._schedule_save()
        return entity

    def update(self, entity_id: str, draft: D) -> E:
        """Replace an entity in place with a re-submitted draft.

        Raises NotFoundError if the id is unknown, ValidationError if the
        draft is incomplete.
        """
        index = self._index_of(entity_id)
        if index is None:
            raise NotFoundError(self.kind.label, entity_id)
        self._validate(draft)
        entity = self.kind.build(draft, entity_id, self._entities[index])
        self._entities[index] = entity
        self._schedule_save()
        return entity

    def delete(self, entity_id: str) -> bool:
        """Remove an entity if present. Returns whether anything was removed."""
        index = self._index_of(entity_id)
        if index is not None:
            del self._entities[index]
        self._schedule_save()
        return index is not None

    # ── Read operations ──────────────────────────────────────────

    def list(self, category: str | None = None) -> _list[E]:
        """Snapshot of the collection, optionally filtered by category."""
        return project(self._entities, category, self.kind.category_of)

    def get(self, entity_id: str) -> E | None:
        index = self._index_of(entity_id)
        return None if index is None else self._entities[index]

    def ids(self) -> _list[str]:
        return [e.id for e in self._entities]  # type: ignore[attr-defined]

    def __len__(self) -> int:
        return len(self._entities)

    # ── Persistence ──────────────────────────────────────────────

    def flush(self) -> bool:
        """Write the current snapshot now. Returns False on failure."""
        return self._write(self._snapshot(), self._epoch)

    async def aflush(self) -> bool:
        payload = self._snapshot()
        return await asyncio.to_thread(self._write, payload, self._epoch)

    async def drain(self) -> None:
        """Wait for all background saves scheduled so far."""
        if self._pending:
            await asyncio.gather(*_list(self._pending))

    def reload(self) -> None:
        """Discard in-memory state and re-read from the durable store."""
        self._entities = self._load()

    def reset(self) -> None:
        """Delete the stored snapshot and start over from the seed dataset.

        Background saves scheduled before the reset are discarded. Raises
        PersistenceFailure if the stored snapshot could not be removed.
        """
        self._kv.delete(self.kind.storage_key)
        self._epoch += 1
        self.read_error = None
        self._entities = _list(self.kind.seed)
        logger.info("Reset %s to seed dataset", self.kind.storage_key)
