"""Database initialization utilities."""
import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from dormtrack.db.base import Base, import_models

logger = logging.getLogger(__name__)


def init_db(engine: Engine) -> None:
    """
    Create any missing tables on ``engine``.

    Suitable for development and tests. The secondary store gets the same
    schema so the replication job has somewhere to copy rows into.
    """
    import_models()

    existing_tables = set(inspect(engine).get_table_names())
    missing = [name for name in Base.metadata.tables if name not in existing_tables]
    if not missing:
        logger.info("Database already initialized with %d tables", len(existing_tables))
        return

    Base.metadata.create_all(bind=engine)
    logger.info("Created tables: %s", ", ".join(sorted(missing)))


def drop_db(engine: Engine) -> None:
    """
    Drop all tables.

    WARNING: This will delete all data! Only for development and tests.
    """
    import_models()
    Base.metadata.drop_all(bind=engine)
    logger.warning("All database tables dropped on %s", engine.url.render_as_string(hide_password=True))
