"""Generic record store over SQLModel tables.

Each public call runs in its own session and commits once. ``batch_update``
applies a whole renumbering (and an optional insert) in one transaction, so
readers see either the old orders or the new ones, never a mix.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, col, select

from directory_admin.domain.errors import NotFoundError, StoreError
from directory_admin.domain.models import now_utc
from directory_admin.infra.db import get_engine

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)
Filters = Mapping[str, Any]


def _apply_filters(statement: Any, model: type[SQLModel], filters: Filters | None) -> Any:
    for field_name, value in (filters or {}).items():
        column = col(getattr(model, field_name))
        if value is None:
            statement = statement.where(column.is_(None))
        elif isinstance(value, (list, tuple, set, frozenset)):
            statement = statement.where(column.in_(list(value)))
        else:
            statement = statement.where(column == value)
    return statement


def _touch(record: SQLModel) -> None:
    if hasattr(record, "updated_at"):
        record.updated_at = now_utc()  # type: ignore[attr-defined]


class RecordStore:
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine

    def _session(self) -> Session:
        return Session(self._engine or get_engine(), expire_on_commit=False)

    def query(
        self,
        model: type[ModelT],
        filters: Filters | None = None,
        order_by: Sequence[str] = (),
    ) -> list[ModelT]:
        statement = _apply_filters(select(model), model, filters)
        for field_name in order_by:
            descending = field_name.startswith("-")
            column = col(getattr(model, field_name.lstrip("-")))
            statement = statement.order_by(column.desc() if descending else column.asc())
        try:
            with self._session() as session:
                return list(session.exec(statement).all())
        except SQLAlchemyError as exc:
            logger.exception("query on %s failed", model.__tablename__)
            raise StoreError(f"failed to load {model.__tablename__}") from exc

    def get(self, model: type[ModelT], record_id: str) -> ModelT | None:
        try:
            with self._session() as session:
                return session.get(model, record_id)
        except SQLAlchemyError as exc:
            logger.exception("get on %s failed", model.__tablename__)
            raise StoreError(f"failed to load {model.__tablename__}") from exc

    def count(self, model: type[SQLModel], filters: Filters | None = None) -> int:
        statement = _apply_filters(select(func.count()).select_from(model), model, filters)
        try:
            with self._session() as session:
                return int(session.exec(statement).one())
        except SQLAlchemyError as exc:
            logger.exception("count on %s failed", model.__tablename__)
            raise StoreError(f"failed to count {model.__tablename__}") from exc

    def count_by(self, model: type[SQLModel], field_name: str) -> dict[str, int]:
        """Row counts grouped by a column, skipping NULL values."""
        column = col(getattr(model, field_name))
        statement = (
            select(column, func.count())
            .select_from(model)
            .where(column.is_not(None))
            .group_by(column)
        )
        try:
            with self._session() as session:
                return {str(key): int(total) for key, total in session.exec(statement).all()}
        except SQLAlchemyError as exc:
            logger.exception("grouped count on %s failed", model.__tablename__)
            raise StoreError(f"failed to count {model.__tablename__}") from exc

    def delete(self, model: type[SQLModel], record_id: str) -> None:
        with self._session() as session:
            try:
                record = session.get(model, record_id)
                if record is None:
                    raise NotFoundError(f"{model.__tablename__} record not found")
                session.delete(record)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("delete on %s failed", model.__tablename__)
                raise StoreError(f"failed to delete {model.__tablename__}") from exc

    def batch_update(
        self,
        model: type[ModelT],
        updates: Sequence[tuple[str, Mapping[str, Any]]],
        *,
        insert: ModelT | None = None,
    ) -> ModelT | None:
        """Apply every patch (and the optional insert) or none of them."""
        with self._session() as session:
            try:
                for record_id, patch in updates:
                    record = session.get(model, record_id)
                    if record is None:
                        raise StoreError(
                            f"{model.__tablename__} record {record_id} vanished during batch update"
                        )
                    for key, value in patch.items():
                        setattr(record, key, value)
                    _touch(record)
                    session.add(record)
                if insert is not None:
                    session.add(insert)
                session.commit()
                if insert is not None:
                    session.refresh(insert)
            except StoreError:
                session.rollback()
                raise
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception(
                    "batch write on %s failed; %d updates rolled back",
                    model.__tablename__,
                    len(updates),
                )
                raise StoreError(f"failed to save {model.__tablename__} changes") from exc
            return insert

    def delete_many(self, records: Sequence[tuple[type[SQLModel], str]]) -> None:
        """Delete the given rows, in order, in one transaction."""
        with self._session() as session:
            try:
                for model, record_id in records:
                    record = session.get(model, record_id)
                    if record is not None:
                        session.delete(record)
                        session.flush()
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("multi-record delete failed")
                raise StoreError("failed to delete records") from exc

    def save_all(self, records: Sequence[SQLModel]) -> None:
        """Insert or update several rows of different tables in one transaction."""
        with self._session() as session:
            try:
                for record in records:
                    session.add(record)
                    session.flush()
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("multi-record save failed")
                raise StoreError("failed to save records") from exc
            for record in records:
                session.refresh(record)
