"""Collection storage port and its SQLAlchemy implementation.

Lifecycle and aggregation code works on whole, fully loaded collections of
records. Storage exposes exactly two operations per collection:

    load()        -> list of records
    save(items)   -> synchronise the table with ``items``

``Storage`` groups one ``SqlCollection`` per entity around a single
session, so a request does load -> compute -> save -> commit in one
transaction.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Generic, Iterable, List, Protocol, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import models
import records
from db import SessionLocal
from errors import ConcurrencyError, DuplicateRecordError, PersistenceError
from records import Record, VersionedRecord

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)


class CollectionStore(Protocol[T]):
    def load(self) -> List[T]:
        ...

    def save(self, items: Iterable[T]) -> None:
        ...


def _column_value(value):
    if isinstance(value, Enum):
        return value.value
    return value


class SqlCollection(Generic[T]):
    """One record collection backed by one table.

    ``save`` inserts unknown ids, updates changed rows and deletes rows that
    were returned by the last ``load`` but are absent from ``items``. Rows
    inserted by someone else after our ``load`` are left alone.

    Versioned records are only written when the stored version is exactly
    one behind the record; anything else means another writer got there
    first and raises ``ConcurrencyError``.
    """

    def __init__(self, session: Session, orm_cls, record_cls: Type[T], entity: str):
        self.session = session
        self.orm_cls = orm_cls
        self.record_cls = record_cls
        self.entity = entity
        self._columns = [c.name for c in orm_cls.__table__.columns]
        self._loaded_ids: set[str] = set()

    @property
    def versioned(self) -> bool:
        return issubclass(self.record_cls, VersionedRecord)

    def _to_record(self, row) -> T:
        return self.record_cls.model_validate({name: getattr(row, name) for name in self._columns})

    def _row_values(self, item: T) -> Dict:
        data = item.model_dump()
        return {name: _column_value(data[name]) for name in self._columns}

    def load(self) -> List[T]:
        try:
            rows = (
                self.session.query(self.orm_cls)
                .order_by(self.orm_cls.created_at, self.orm_cls.id)
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error("Failed to load %s collection: %s", self.entity, exc)
            raise PersistenceError(f"Failed to load {self.entity} records") from exc
        items = [self._to_record(row) for row in rows]
        self._loaded_ids = {item.id for item in items}
        return items

    def get(self, record_id: str) -> T | None:
        row = self.session.get(self.orm_cls, record_id)
        return self._to_record(row) if row is not None else None

    def save(self, items: Iterable[T]) -> None:
        items = list(items)
        try:
            # refresh rows this session already holds so version checks see committed state
            rows = self.session.query(self.orm_cls).populate_existing().all()
            existing = {row.id: row for row in rows}
            keep_ids = set()
            for item in items:
                keep_ids.add(item.id)
                row = existing.get(item.id)
                if row is None:
                    self.session.add(self.orm_cls(**self._row_values(item)))
                    continue
                self._check_version(row, item)
                if self._to_record(row) == item:
                    continue
                for name, value in self._row_values(item).items():
                    setattr(row, name, value)

            for record_id in self._loaded_ids - keep_ids:
                row = existing.get(record_id)
                if row is not None:
                    self.session.delete(row)

            self.session.flush()
        except IntegrityError as exc:
            logger.warning("Unique constraint rejected %s write: %s", self.entity, exc.orig)
            raise DuplicateRecordError(self.entity) from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to save %s collection: %s", self.entity, exc)
            raise PersistenceError(f"Failed to save {self.entity} records") from exc
        self._loaded_ids = keep_ids

    def replace(self, items: Iterable[T]) -> None:
        """Drop every row and write ``items`` as-is (used by backup import)."""
        try:
            for row in self.session.query(self.orm_cls).all():
                self.session.delete(row)
            self.session.flush()
            self.session.add_all(self.orm_cls(**self._row_values(item)) for item in items)
            self.session.flush()
        except IntegrityError as exc:
            raise DuplicateRecordError(self.entity) from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to replace %s collection: %s", self.entity, exc)
            raise PersistenceError(f"Failed to replace {self.entity} records") from exc
        self._loaded_ids = set()

    def _check_version(self, row, item: T) -> None:
        if not self.versioned:
            return
        stored = row.version
        if item.version == stored + 1:
            return
        if item.version == stored and self._to_record(row) == item:
            return
        raise ConcurrencyError(self.entity, item.id, expected=item.version - 1, actual=stored)


class Storage:
    """Unit of work: every collection shares one session."""

    def __init__(self, session: Session):
        self.session = session
        self.employees: SqlCollection[records.Employee] = SqlCollection(
            session, models.Employee, records.Employee, "Employee")
        self.clients: SqlCollection[records.Client] = SqlCollection(
            session, models.Client, records.Client, "Client")
        self.services: SqlCollection[records.Service] = SqlCollection(
            session, models.Service, records.Service, "Service")
        self.tasks: SqlCollection[records.Task] = SqlCollection(
            session, models.Task, records.Task, "Task")
        self.client_services: SqlCollection[records.ClientService] = SqlCollection(
            session, models.ClientService, records.ClientService, "ClientService")
        self.reports: SqlCollection[records.MonthlyReport] = SqlCollection(
            session, models.MonthlyReport, records.MonthlyReport, "MonthlyReport")
        self.entries: SqlCollection[records.TimeEntry] = SqlCollection(
            session, models.TimeEntry, records.TimeEntry, "TimeEntry")
        self.edit_requests: SqlCollection[records.EditRequest] = SqlCollection(
            session, models.EditRequest, records.EditRequest, "EditRequest")

    def collections(self) -> Dict[str, SqlCollection]:
        """Collections keyed by their backup/export name."""
        return {
            "employees": self.employees,
            "clients": self.clients,
            "services": self.services,
            "tasks": self.tasks,
            "clientServices": self.client_services,
            "monthlyReports": self.reports,
            "timeEntries": self.entries,
            "editRequests": self.edit_requests,
        }

    def commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("Commit rejected by unique constraint: %s", exc.orig)
            raise DuplicateRecordError("record") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Commit failed: %s", exc)
            raise PersistenceError("Failed to commit changes") from exc

    def rollback(self) -> None:
        self.session.rollback()


def get_store():
    """FastAPI dependency: one Storage per request.

    Endpoints commit explicitly; anything left uncommitted is rolled back.
    """
    session = SessionLocal()
    try:
        yield Storage(session)
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
