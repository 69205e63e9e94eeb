"""Error taxonomy for the content hub.

Every failure in the hub is recoverable: callers catch these, show a
message, and carry on with the last-known-good in-memory state.
"""

from __future__ import annotations

from collections.abc import Sequence


class HubError(Exception):
    """Base error for all hub failures."""


class ValidationError(HubError):
    """A draft is missing one or more required fields."""

    def __init__(self, kind: str, missing_fields: Sequence[str]) -> None:
        self.kind = kind
        self.missing_fields = tuple(missing_fields)
        super().__init__(f"{kind}: missing required field(s): {', '.join(self.missing_fields)}")


class NotFoundError(HubError):
    """No entity with the given id exists in the collection."""

    def __init__(self, kind: str, entity_id: str) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind}: no entity with id {entity_id!r}")


class ImageTooLargeError(HubError):
    """The selected image exceeds the attachment size limit."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Image is {size} bytes, limit is {limit} bytes")


class ImageUnreadableError(HubError):
    """The selected file could not be decoded as a supported image."""


class PersistenceFailure(HubError):
    """The durable store rejected a read or write."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Storage failure for {key!r}: {reason}")


class AugmentationFailure(HubError):
    """Text generation failed. Never escapes the augmentation service."""


class NotAuthorizedError(HubError):
    """A mutation was attempted without a privileged session."""
