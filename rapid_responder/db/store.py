"""Event store: the single gateway between the services and the database.

Every read and write goes through one of the operations below so that
database outages are reported uniformly as ``StoreUnavailableError`` and a
failed write never leaves a half-applied transaction behind.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, select, update
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from rapid_responder.core.errors import StoreUnavailableError
from rapid_responder.db.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class EventStore:
    """Thin record store over a SQLAlchemy session.

    Consistency is per single operation: each write commits on its own, and
    ``update_where`` gives compare-and-swap semantics through a conditional
    UPDATE instead of any in-process locking.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def _guard(self, op: str, write: bool = False) -> Iterator[None]:
        try:
            yield
        except (OperationalError, PoolTimeoutError) as exc:
            self._db.rollback()
            logger.error("Event store unavailable during %s: %s", op, exc)
            raise StoreUnavailableError(f"Event store unavailable during {op}") from exc
        except DBAPIError as exc:
            self._db.rollback()
            if exc.connection_invalidated:
                logger.error("Event store connection lost during %s: %s", op, exc)
                raise StoreUnavailableError(f"Event store unavailable during {op}") from exc
            raise
        except Exception:
            if write:
                self._db.rollback()
            raise

    def insert(self, record: ModelT) -> ModelT:
        """Persist a new record and return it with its id assigned.

        Everything that can fail runs before the commit, so an error here
        always means nothing was written.
        """
        with self._guard(f"insert {record.__tablename__}", write=True):
            self._db.add(record)
            self._db.flush()
            self._db.refresh(record)
            self._db.commit()
        return record

    def get(self, model: type[ModelT], record_id: Any) -> ModelT | None:
        with self._guard(f"get {model.__tablename__}"):
            return self._db.get(model, record_id)

    def query(
        self,
        model: type[ModelT],
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        limit: int | None = None,
    ) -> list[ModelT]:
        """Select records matching all criteria, optionally ordered and limited."""
        stmt = select(model).where(*criteria)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._guard(f"query {model.__tablename__}"):
            return list(self._db.execute(stmt).scalars().all())

    def first(
        self,
        model: type[ModelT],
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] = (),
    ) -> ModelT | None:
        rows = self.query(model, *criteria, order_by=order_by, limit=1)
        return rows[0] if rows else None

    def update(self, record: ModelT, patch: dict[str, Any]) -> ModelT:
        """Unconditionally apply ``patch`` to an already loaded record."""
        with self._guard(f"update {record.__tablename__}", write=True):
            for key, value in patch.items():
                setattr(record, key, value)
            self._db.flush()
            self._db.refresh(record)
            self._db.commit()
        return record

    def update_where(
        self,
        model: type[ModelT],
        criteria: Sequence[ColumnElement[bool]],
        patch: dict[str, Any],
    ) -> int:
        """Conditionally update rows. Returns how many rows matched.

        Zero means the guard did not hold, i.e. someone else changed the row
        first. Loaded records are expired afterwards so the next read sees
        what the database actually holds.
        """
        stmt = (
            update(model)
            .where(*criteria)
            .values(**patch)
            .execution_options(synchronize_session=False)
        )
        with self._guard(f"update {model.__tablename__}", write=True):
            matched = self._db.execute(stmt).rowcount
            self._db.commit()
        self._db.expire_all()
        return matched

    def delete(self, model: type[ModelT], record_id: Any) -> bool:
        """Remove a record by id. Returns False if there was nothing to remove."""
        with self._guard(f"delete {model.__tablename__}", write=True):
            record = self._db.get(model, record_id)
            if record is None:
                return False
            self._db.delete(record)
            self._db.commit()
        return True
