# salonbook/db.py

import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from .config import get_settings

logger = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        echo=False,          # set to True to see SQL
        connect_args={"check_same_thread": False},  # required for SQLite + FastAPI
    )

    # pysqlite opens transactions lazily; take the write lock up front so a
    # booking's availability check and its insert cannot interleave with
    # another booking for the same staff member.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


# Engine = connection to the database
engine = make_engine(get_settings().database_url)


def create_db_and_tables(bind: Engine = engine) -> None:
    # models must be imported so their tables are registered on the metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(bind)
    logger.info("Database tables ensured on %s", bind.url.render_as_string(hide_password=True))


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
