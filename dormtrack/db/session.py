"""
Database connection management.

``Database`` owns the engine for the primary store and, when configured,
a second engine for the replicated secondary store. One instance is built
by the application factory, handed to whatever needs it and disposed on
shutdown; nothing here is a module-level singleton.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dormtrack.config.settings import Settings
from dormtrack.db.read_mode import ReadMode, StoreRole, select_store

logger = logging.getLogger(__name__)


def _engine_options(url: str, config: Settings) -> Dict[str, Any]:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        options: Dict[str, Any] = {
            "echo": config.DB_ECHO,
            "connect_args": {"check_same_thread": False, "timeout": 30},
        }
        if parsed.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "echo": config.DB_ECHO,
        "pool_pre_ping": True,
        "pool_size": config.DB_POOL_SIZE,
        "max_overflow": config.DB_POOL_OVERFLOW,
        "pool_recycle": 3600,
    }


def _install_listeners(engine: Engine, label: str, slow_threshold: float) -> None:
    """Slow query logging, plus foreign key enforcement on SQLite."""

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        total_time = time.perf_counter() - conn.info["query_start_time"].pop()
        if total_time > slow_threshold:
            logger.warning(
                "Slow query on %s store (%.4fs): %s",
                label,
                total_time,
                statement[:100],
            )

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()


class Database:
    """
    Primary store plus optional secondary store.

    Writes and ``strong`` reads always use the primary. Relaxed reads use
    the secondary when one is configured.
    """

    def __init__(
        self,
        primary_url: str,
        secondary_url: Optional[str] = None,
        config: Optional[Settings] = None,
    ):
        config = config or Settings()
        self.primary_engine: Engine = create_engine(primary_url, **_engine_options(primary_url, config))
        _install_listeners(self.primary_engine, "primary", config.SLOW_QUERY_THRESHOLD_SECONDS)
        self._primary_factory = sessionmaker(
            bind=self.primary_engine,
            autoflush=False,
            expire_on_commit=False,
        )

        self.secondary_engine: Optional[Engine] = None
        self._secondary_factory: Optional[sessionmaker] = None
        if secondary_url:
            self.secondary_engine = create_engine(secondary_url, **_engine_options(secondary_url, config))
            _install_listeners(self.secondary_engine, "secondary", config.SLOW_QUERY_THRESHOLD_SECONDS)
            self._secondary_factory = sessionmaker(
                bind=self.secondary_engine,
                autoflush=False,
                expire_on_commit=False,
            )

        logger.info(
            "Database initialised (primary=%s, secondary=%s)",
            self.primary_engine.url.render_as_string(hide_password=True),
            self.secondary_engine.url.render_as_string(hide_password=True) if self.secondary_engine else "none",
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "Database":
        return cls(config.get_database_url(), config.get_replica_url(), config)

    @property
    def has_secondary(self) -> bool:
        return self._secondary_factory is not None

    @property
    def session_factory(self) -> sessionmaker:
        """Factory for primary-store sessions, used by units of work."""
        return self._primary_factory

    def primary_session(self) -> Session:
        return self._primary_factory()

    def _store_for(self, mode: ReadMode) -> StoreRole:
        return select_store(mode, self.has_secondary)

    def read_session(self, mode: ReadMode) -> Session:
        """Open a session on whichever copy serves ``mode``."""
        if self._store_for(mode) is StoreRole.SECONDARY:
            return self._secondary_factory()
        return self._primary_factory()

    @contextmanager
    def reading(self, mode: ReadMode) -> Generator[Session, None, None]:
        """Read-only session context; always rolled back and closed."""
        session = self.read_session(mode)
        try:
            yield session
        finally:
            session.rollback()
            session.close()

    def dispose(self) -> None:
        """Release both connection pools."""
        self.primary_engine.dispose()
        if self.secondary_engine is not None:
            self.secondary_engine.dispose()
        logger.info("Database connections disposed")
