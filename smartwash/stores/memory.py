# smartwash/stores/memory.py
from typing import Any, Callable, Optional

from smartwash.exceptions import DuplicateKeyError
from smartwash.stores.base import Repository, T


class InMemoryRepository(Repository[T]):
    """
    Dict-backed repository. Without order_key, items come back in insertion order.
    With order_key, ties keep insertion order (reversed too when descending).
    """

    def __init__(self, order_key: Optional[Callable[[T], Any]] = None, descending: bool = False):
        self._items: dict[str, T] = {}
        self._order_key = order_key
        self._descending = descending

    def get(self, key: str) -> Optional[T]:
        return self._items.get(key)

    def list(self, lower_bound: Any = None) -> list[T]:
        items = list(self._items.values())
        if self._order_key is None:
            return list(reversed(items)) if self._descending else items
        if lower_bound is not None:
            items = [i for i in items if self._order_key(i) >= lower_bound]
        indexed = sorted(enumerate(items), key=lambda p: (self._order_key(p[1]), p[0]),
                         reverse=self._descending)
        return [item for _, item in indexed]

    def add(self, key: str, item: T) -> None:
        if key in self._items:
            raise DuplicateKeyError(key)
        self._items[key] = item

    def save(self, key: str, item: T) -> None:
        self._items[key] = item

    def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._items)
