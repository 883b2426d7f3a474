"""
Engine construction.

Builds the SQLAlchemy engine from application settings. SQLite URLs
(local development, tests) get the thread flag FastAPI's threadpool needs,
and SQLAlchemy emits BEGIN itself so SAVEPOINTs nest inside the outer
transaction instead of committing it.
"""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from tradevault.infrastructure.db.tables import metadata

logger = logging.getLogger(__name__)


def _use_explicit_transactions(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine for the given URL.

    Args:
        url: SQLAlchemy database URL.
        **kwargs: Extra arguments passed to create_engine.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(url, **kwargs)
        _use_explicit_transactions(engine)
        return engine
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


def create_schema(engine: Engine) -> None:
    """Create any missing tables."""
    metadata.create_all(engine)
    logger.info("Database schema ready on %s", engine.url.render_as_string(hide_password=True))
