from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sized
from typing import TypeVar

K = TypeVar("K")
T = TypeVar("T")


def count(m: Mapping[K, Sized]) -> dict[K, int]:
    return {k: len(v) for k, v in m.items()}


def group_by(items: Iterable[T], key: Callable[[T], str | None]) -> dict[str, list[T]]:
    """
    Group `items` by `key(item)`, keeping item order inside each group.
    Items whose key is None are left out.
    """
    out: dict[str, list[T]] = {}
    for item in items:
        k = key(item)
        if k is None:
            continue
        out.setdefault(k, []).append(item)
    return out
