#app_registry\infrastructure\postgres\database.py

"""Engine and session handling for the registry's system of record."""

from contextlib import contextmanager
from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app_registry.infrastructure.postgres.config import get_database_settings


Base = declarative_base()


# ============================================
# Engines
# ============================================
def create_db_engine(database_url: Optional[str] = None) -> Engine:
    """Pooled PostgreSQL engine pinned to the registry schema."""
    settings = get_database_settings()

    engine = create_engine(
        database_url or settings.database_url,
        echo=settings.echo_sql,
        pool_pre_ping=True,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
    )

    @event.listens_for(engine, "connect")
    def set_search_path(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute(f'SET search_path TO "{settings.postgres_schema}"')
        cursor.close()

    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


# ============================================
# Sessions
# ============================================
def get_session_factory(engine_instance: Optional[Engine] = None) -> sessionmaker:
    """
    Session factory for the given engine, or for the default engine.

    Stores take a factory rather than an engine so tests can point them at
    SQLite.
    """
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine_instance or get_engine(),
        expire_on_commit=False
    )


@contextmanager
def get_db_session(engine_instance: Optional[Engine] = None) -> Generator[Session, None, None]:
    """
    Transactional session: commits on success, rolls back on error.

    Usage:
        with get_db_session(engine) as session:
            session.add(ApplicationORM(app_id="1", name="blog"))
    """
    session = get_session_factory(engine_instance)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ============================================
# Schema
# ============================================
def init_db(engine_instance: Optional[Engine] = None) -> None:
    """Create the registry tables directly; deployments run the migrations."""
    Base.metadata.create_all(bind=engine_instance or get_engine())


def drop_db(engine_instance: Optional[Engine] = None) -> None:
    Base.metadata.drop_all(bind=engine_instance or get_engine())
