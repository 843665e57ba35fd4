"""
Key/value blob store backed by the app database.

One row per storage key, value is an opaque text blob (JSON by convention).
Migration 0001_local_storage owns the table in deployments; first use creates
it when missing (fresh dev/test databases).
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlmodel import Field, Session, SQLModel

from gamekit.core.db import get_engine
from gamekit.core.events import now_iso


class LocalStorageEntry(SQLModel, table=True):
    __tablename__ = "local_storage"

    key: str = Field(primary_key=True)
    value: str
    updated_at: str


_ready_engine: Optional[Engine] = None


def _engine() -> Engine:
    global _ready_engine
    eng = get_engine()
    if eng is not _ready_engine:
        SQLModel.metadata.create_all(eng, tables=[LocalStorageEntry.__table__])
        _ready_engine = eng
    return eng


def get_item(key: str) -> Optional[str]:
    with Session(_engine()) as session:
        row = session.get(LocalStorageEntry, key)
        return row.value if row is not None else None


_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def set_item(key: str, value: str) -> None:
    # single INSERT .. ON CONFLICT so concurrent first writes cannot collide
    eng = _engine()
    insert = _INSERTS.get(eng.dialect.name, sqlite_insert)
    table = LocalStorageEntry.__table__
    stmt = insert(table).values(key=key, value=value, updated_at=now_iso())
    stmt = stmt.on_conflict_do_update(
        index_elements=["key"],
        set_={"value": stmt.excluded["value"], "updated_at": stmt.excluded["updated_at"]},
    )
    with eng.begin() as conn:
        conn.execute(stmt)


def remove_item(key: str) -> bool:
    with Session(_engine()) as session:
        row = session.get(LocalStorageEntry, key)
        if row is None:
            return False
        session.delete(row)
        session.commit()
        return True
