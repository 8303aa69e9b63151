"""
SQLAlchemy engine & session factory for the SQLite host.

Function Registration
---------------------
Every new DBAPI connection gets the spatial UDFs and aggregates
(``TransformWkt``, ``SpatialExtent``, ``SpatialExtentState``,
``SpatialExtentMerge``) through a ``connect`` event listener, so any
session or raw connection can call them in SQL.

Table Creation
--------------
``init_models()`` uses ``Base.metadata.create_all`` to issue
``CREATE TABLE IF NOT EXISTS`` for every registered ORM model.  It is
idempotent and called once during the FastAPI lifespan startup.

Session Lifecycle
-----------------
The ``get_db`` dependency yields a ``Session`` with **no automatic
commit**.  Callers (routers / services) call ``session.commit()`` when
their unit of work succeeds.  On error the session is rolled back and
the exception re-raised; ``session.close()`` always runs.
"""

from __future__ import annotations

import logging
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from spatialsql.config import get_settings
from spatialsql.models.sql_functions import register_spatial_functions

logger = logging.getLogger(__name__)
settings = get_settings()


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine whose connections carry the spatial functions.

    In-memory SQLite URLs share one connection across threads so every
    session sees the same database.
    """
    kwargs: dict = {"echo": echo}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}

    new_engine = create_engine(url, **kwargs)

    @event.listens_for(new_engine, "connect")
    def _register_functions(dbapi_connection, connection_record):
        register_spatial_functions(dbapi_connection)

    return new_engine


engine = build_engine(settings.database_url, echo=settings.debug)

session_factory = sessionmaker(engine, class_=Session, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency — yields a DB session.

    **No auto-commit.**  The caller is responsible for calling
    ``session.commit()`` at the transaction boundary.
    """
    session = session_factory()
    try:
        yield session
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Database error: %s", exc, exc_info=True)
        raise
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_models(bind: Engine | None = None) -> None:
    """
    Create all tables defined in ``Base.metadata`` if they do not
    already exist.  Existing tables and data are never dropped.

    Must be called **after** all model modules have been imported so
    that ``Base.metadata`` is fully populated.
    """
    Base.metadata.create_all(bind or engine)
