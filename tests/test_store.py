from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, create_engine

from directory_admin.domain.errors import NotFoundError, StoreError
from directory_admin.domain.models import Designation
from directory_admin.services.store import RecordStore


def _store(tmp_path: Path, *, with_tables: bool = True) -> RecordStore:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'store_test.db'}",
        connect_args={"check_same_thread": False},
    )
    if with_tables:
        SQLModel.metadata.create_all(engine)
    return RecordStore(engine)


def test_delete_lookup_failure_becomes_store_error(tmp_path: Path) -> None:
    store = _store(tmp_path, with_tables=False)
    with pytest.raises(StoreError):
        store.delete(Designation, "missing")


def test_delete_missing_record_is_not_found(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(NotFoundError):
        store.delete(Designation, "missing")


def test_batch_insert_refresh_failure_becomes_store_error(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    store = _store(tmp_path)

    def _broken_refresh(self: Session, instance: object, *args: object, **kwargs: object) -> None:
        raise OperationalError("refresh", {}, Exception("connection lost"))

    monkeypatch.setattr(Session, "refresh", _broken_refresh)
    with pytest.raises(StoreError):
        store.batch_update(Designation, [], insert=Designation(name="Director", order=1))


def test_batch_insert_returns_saved_record(tmp_path: Path) -> None:
    store = _store(tmp_path)
    saved = store.batch_update(Designation, [], insert=Designation(name="Director", order=1))
    assert saved is not None
    assert store.get(Designation, saved.id) is not None
    assert store.count(Designation) == 1
