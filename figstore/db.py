"""
Durable tier abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Protocol

from sqlalchemy import Column, String, Text, create_engine, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from figstore.errors import DurableUnavailable, RecordNotFound

logger = logging.getLogger(__name__)


class DurableClient(Protocol):
    """Interface for the durable name -> message table."""

    def upsert(self, name: str, message: str) -> None:
        ...

    def get(self, name: str) -> str:
        """Return the stored message or raise ``RecordNotFound``."""
        ...


class InMemoryDurableClient:
    """Simple in-memory table for development and tests."""

    def __init__(self):
        self.records: Dict[str, str] = {}
        self._lock = threading.Lock()

    def upsert(self, name: str, message: str) -> None:
        with self._lock:
            self.records[name] = message

    def get(self, name: str) -> str:
        with self._lock:
            if name not in self.records:
                raise RecordNotFound(name)
            return self.records[name]

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.records.clear()


def build_database_url(
    name: str,
    user: Optional[str] = None,
    password: Optional[str] = None,
    socket: Optional[str] = None,
) -> URL:
    """
    Build a Postgres URL. ``socket`` may be a Unix socket directory
    (e.g. ``/cloudsql/project:region:instance``) or a host name; libpq
    accepts either as ``host``.
    """
    query = {"host": socket} if socket else {}
    return URL.create(
        "postgresql+psycopg2",
        username=user or None,
        password=password or None,
        database=name,
        query=query,
    )


class SqlDurableClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str | URL):
        if not database_url:
            raise ValueError("A database URL is required for SqlDurableClient")
        url = make_url(database_url)
        engine_kwargs = {
            "future": True,
            "pool_pre_ping": True,
            "pool_recycle": 1800,
        }
        if url.get_backend_name() == "postgresql":
            engine_kwargs.update(
                pool_size=5,
                max_overflow=2,
                connect_args={"connect_timeout": 10},
            )
        self.engine = create_engine(url, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        self._insert = _insert_for_dialect(self.engine.dialect.name)
        Base.metadata.create_all(self.engine)
        logger.info(
            "Durable tier ready at %s", url.render_as_string(hide_password=True)
        )

    def upsert(self, name: str, message: str) -> None:
        stmt = self._insert(FigureRow).values(name=name, message=message)
        stmt = stmt.on_conflict_do_update(
            index_elements=[FigureRow.name],
            set_={"message": stmt.excluded.message},
        )
        try:
            with self.Session() as session:
                session.execute(stmt)
                session.commit()
        except SQLAlchemyError as exc:
            raise DurableUnavailable(f"Upsert failed for '{name}': {exc}") from exc

    def get(self, name: str) -> str:
        try:
            with self.Session() as session:
                message = session.execute(
                    select(FigureRow.message).where(FigureRow.name == name)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise DurableUnavailable(f"Read failed for '{name}': {exc}") from exc
        if message is None:
            raise RecordNotFound(name)
        return message

    def close(self) -> None:
        self.engine.dispose()


def _insert_for_dialect(dialect_name: str):
    if dialect_name == "postgresql":
        return postgresql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    raise ValueError(f"Unsupported database dialect for upsert: {dialect_name}")


Base = declarative_base()


class FigureRow(Base):
    __tablename__ = "figures"

    name = Column(String(255), primary_key=True)
    message = Column(Text, nullable=False)
