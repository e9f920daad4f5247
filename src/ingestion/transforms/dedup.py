"""Identity-based deduplication."""

from typing import Callable, Hashable, Iterable, TypeVar

T = TypeVar("T")


def dedupe_by(rows: Iterable[T], key: Callable[[T], Hashable]) -> list[T]:
    """Collapse rows sharing ``key(row)``; the last occurrence wins.

    The result keeps the position of each key's first occurrence, so output
    order is stable across runs over the same input.
    """
    by_key: dict[Hashable, T] = {}
    for row in rows:
        by_key[key(row)] = row
    return list(by_key.values())


def by_id(row: dict) -> Hashable:
    return row["id"]
