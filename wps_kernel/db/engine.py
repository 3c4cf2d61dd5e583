"""
Engine and session management.

One process-wide engine, configured from a URL:

* PostgreSQL (deployment): pooled connections with pre-ping, READ COMMITTED.
* SQLite (tests, local tooling): a single shared connection so that an
  in-memory database is visible to every session.

Callers that need a unit of work use ``session_scope()``; the wage file
service takes a session and owns its own commit/rollback instead.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from wps_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None

_POSTGRES_DEFAULTS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_pre_ping": True,
    "pool_timeout": 30,
    "pool_recycle": 1800,
    "isolation_level": "READ COMMITTED",
}


def init_engine_from_url(database_url: str, echo: bool = False, **options: Any) -> Engine:
    """
    Create (or replace) the process engine.

    ``options`` override the pooled-backend defaults (``pool_size``,
    ``max_overflow``, ``pool_timeout``...); they are ignored for SQLite.
    """
    global _engine, _session_factory

    url = make_url(database_url)
    backend = url.get_backend_name()
    if backend == "sqlite":
        engine = create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(url, echo=echo, **{**_POSTGRES_DEFAULTS, **options})

    reset_engine()
    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={"dialect": backend, "echo": echo})
    return engine


def _require_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _session_factory


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    """A new session bound to the process engine."""
    return _require_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Commit on normal exit; roll back and re-raise on any exception.

        with session_scope() as session:
            session.add(model)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    from wps_kernel.db.base import Base
    import wps_modules.wage_file.orm  # noqa: F401  registers wps_files

    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    """Drop every mapped table. Test teardown only."""
    from wps_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
