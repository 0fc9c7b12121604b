# smartwash/stores/sql.py
"""
SQLAlchemy-backed repository.

Row classes provide to_schema() / from_schema() (and update_from() if they
support save()). Each call opens and closes its own short-lived session.
"""

from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from smartwash.exceptions import DuplicateKeyError, PersistenceError
from smartwash.stores.base import Repository, T
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)


class SqlRepository(Repository[T]):

    def __init__(self, session_factory, row_cls, key_column: str,
                 order_by: Optional[str] = None, descending: bool = False):
        self._session_factory = session_factory
        self._row_cls = row_cls
        self._key = getattr(row_cls, key_column)
        self._order = getattr(row_cls, order_by or key_column)
        self._descending = descending

    def _find(self, db, key: str):
        return db.query(self._row_cls).filter(self._key == key).first()

    def get(self, key: str) -> Optional[T]:
        with self._session_factory() as db:
            try:
                row = self._find(db, key)
            except SQLAlchemyError as e:
                raise PersistenceError(f"Could not read {key}") from e
            return row.to_schema() if row else None

    def list(self, lower_bound: Any = None) -> list[T]:
        with self._session_factory() as db:
            q = db.query(self._row_cls)
            if lower_bound is not None:
                q = q.filter(self._order >= lower_bound)
            q = q.order_by(self._order.desc() if self._descending else self._order.asc())
            try:
                rows = q.all()
            except SQLAlchemyError as e:
                raise PersistenceError(f"Could not read {self._row_cls.__tablename__}") from e
            return [row.to_schema() for row in rows]

    def __len__(self) -> int:
        with self._session_factory() as db:
            try:
                return db.query(self._row_cls).count()
            except SQLAlchemyError as e:
                raise PersistenceError(f"Could not count {self._row_cls.__tablename__}") from e

    def add(self, key: str, item: T) -> None:
        with self._session_factory() as db:
            db.add(self._row_cls.from_schema(item))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise DuplicateKeyError(key)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"[STORE] Insert into {self._row_cls.__tablename__} failed for {key}: {e}")
                raise PersistenceError(f"Could not write {key}") from e

    def save(self, key: str, item: T) -> None:
        with self._session_factory() as db:
            row = self._find(db, key)
            if row:
                row.update_from(item)
            else:
                db.add(self._row_cls.from_schema(item))
            try:
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"[STORE] Save into {self._row_cls.__tablename__} failed for {key}: {e}")
                raise PersistenceError(f"Could not write {key}") from e

    def delete(self, key: str) -> bool:
        with self._session_factory() as db:
            row = self._find(db, key)
            if not row:
                return False
            db.delete(row)
            try:
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError(f"Could not delete {key}") from e
            return True
