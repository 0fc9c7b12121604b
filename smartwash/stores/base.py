# smartwash/stores/base.py
"""
Repository interface shared by the registry, ledger, offline queue and catalog.

The backend behind it is swappable: SqlRepository for a SQLAlchemy database,
InMemoryRepository for tests and throwaway sessions.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class Repository(ABC, Generic[T]):

    @abstractmethod
    def get(self, key: str) -> Optional[T]:
        """Return the item stored under key, or None."""

    @abstractmethod
    def list(self, lower_bound: Any = None) -> list[T]:
        """
        Return every item in the repository's configured order.
        With lower_bound, only items whose ordering value is >= lower_bound.
        """

    @abstractmethod
    def add(self, key: str, item: T) -> None:
        """Insert a new item. Raises DuplicateKeyError if key is taken."""

    @abstractmethod
    def save(self, key: str, item: T) -> None:
        """Insert or replace."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key. Returns False if it was not present."""

    def __len__(self) -> int:
        return len(self.list())
