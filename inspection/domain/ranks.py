from __future__ import annotations

from typing import Any, Iterable, TypeVar

RANKS: dict[str, int] = {
    "SDO": 1,
    "EE": 2,
    "SE": 3,
    "CE": 4,
}

T = TypeVar("T")


def rank(level: Any) -> int:
    """Position of a level in the approval hierarchy; 0 for non-participating levels."""
    if level is None:
        return 0
    return RANKS.get(str(getattr(level, "value", level)).strip(), 0)


def sort_by_rank(officers: Iterable[T]) -> list[T]:
    return sorted(officers, key=lambda o: rank(getattr(o, "level", None)), reverse=True)


def login_roster(officers: Iterable[T], search: str = "") -> list[T]:
    needle = (search or "").lower()
    matching = [o for o in officers if needle in str(getattr(o, "name", "")).lower()]
    return sort_by_rank(matching)
