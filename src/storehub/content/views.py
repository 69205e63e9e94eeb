"""Category filtering over a collection snapshot."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

from storehub.content.models import ALL_CATEGORIES

T = TypeVar("T")


def project(
    entities: Sequence[T],
    category: str | None,
    category_of: Callable[[T], str | None],
) -> list[T]:
    """Return the entities whose category matches, in original order.

    ``None`` or ``"All"`` selects everything. Always returns a new list.
    """
    if category is None or category == ALL_CATEGORIES:
        return list(entities)
    return [e for e in entities if category_of(e) == category]
