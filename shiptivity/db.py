from __future__ import annotations

import os
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from sqlalchemy import Engine, Integer, String, Text, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clients.db")

# Connection execution option asking for a write-locked transaction.
WRITE_LOCK = "shiptivity_write_lock"


class Lane(str, Enum):
    BACKLOG = "backlog"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"


class Base(DeclarativeBase):
    pass


class Client(Base):
    __tablename__ = "clients"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), index=True)  # backlog|in-progress|complete
    priority: Mapped[int] = mapped_column(Integer)

    def __repr__(self) -> str:
        return f"Client(id={self.id}, status={self.status}, priority={self.priority})"


def _serialize_sqlite_writes(engine: Engine) -> None:
    """Take SQLite's write lock at BEGIN for write transactions.

    pysqlite's own transaction handling is switched off so that BEGIN is
    emitted by us: ``BEGIN IMMEDIATE`` when the connection carries the
    ``WRITE_LOCK`` option, a plain deferred ``BEGIN`` otherwise.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(WRITE_LOCK):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def make_engine(database_url: str | None = None) -> Engine:
    url = database_url or DATABASE_URL
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
        _serialize_sqlite_writes(engine)
        return engine
    return create_engine(url)


def make_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


@contextmanager
def write_transaction(session: Session) -> Iterator[Session]:
    """Run a block as one write transaction, committed on success.

    Must be entered before the session has touched the database so the
    write lock is taken ahead of the first read.
    """
    session.connection(execution_options={WRITE_LOCK: True})
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
