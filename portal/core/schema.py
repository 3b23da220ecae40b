import logging

from sqlalchemy.exc import SQLAlchemyError

from portal.core.config import Settings
from portal.core.db import PostgresStore, SqliteStore, Store
from portal.models.base import Base
from portal.models.user_model import User
from portal.models.application_model import Application

logger = logging.getLogger(__name__)

# Columns added to ``applications`` after the first release. Older databases
# get them through ALTER TABLE; fresh ones already have them from create_all.
ADDITIVE_COLUMNS = {
    Application.__tablename__: ["billAmount", "billNumber", "billOn", "billAttachment", "payment_status"],
}


def ensure_schema(store: Store) -> list[str]:
    """Create tables, indexes and missing columns. Safe to run repeatedly.

    Returns the ``table.column`` names added by this run.
    """
    added = []
    with store.engine.begin() as conn:
        Base.metadata.create_all(conn, tables=[User.__table__, Application.__table__], checkfirst=True)
        for index in Application.__table__.indexes:
            index.create(conn, checkfirst=True)
        for table_name, columns in ADDITIVE_COLUMNS.items():
            table = Base.metadata.tables[table_name]
            for name in columns:
                if store.add_column(conn, table_name, table.c[name]):
                    added.append(f"{table_name}.{name}")
    if added:
        logger.info("Schema migration on %s added columns: %s", store.name, ", ".join(added))
    return added


def _log_startup_failure(settings: Settings, level: int, message: str, *args):
    handler = logging.FileHandler(settings.startup_error_log)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(handler)
    try:
        logger.log(level, message, *args, exc_info=True)
    finally:
        logger.removeHandler(handler)
        handler.close()


def connect_store(settings: Settings) -> Store | None:
    """Pick the backing store for the lifetime of the process.

    PostgreSQL is tried first. Any failure there switches to SQLite for good.
    Returns None when neither store can be prepared; the error is written to
    the startup error log and the server keeps running.
    """
    store = None
    try:
        store = PostgresStore(settings.database_url, sslmode=settings.database_sslmode)
        ensure_schema(store)
        logger.info("Connected to PostgreSQL database")
        return store
    except (SQLAlchemyError, ImportError) as exc:
        _log_startup_failure(
            settings,
            logging.WARNING,
            "PostgreSQL unavailable (%s), falling back to SQLite at %s",
            exc,
            settings.sqlite_path,
        )
        if store is not None:
            store.dispose()

    try:
        store = SqliteStore(settings.sqlite_path)
        ensure_schema(store)
        logger.info("Connected to SQLite database at %s", settings.sqlite_path)
        return store
    except SQLAlchemyError:
        _log_startup_failure(settings, logging.ERROR, "Database initialization failed on every backend")
        return None
