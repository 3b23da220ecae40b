"""Persistence adapter.

A ``Store`` wraps one SQLAlchemy engine and hides the differences between the
PostgreSQL primary and the SQLite fallback. The process picks one store at
startup (see ``portal.core.schema.connect_store``) and every request session is
bound to it.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import Column, Table, create_engine, func, inspect, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


@dataclass
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0


class Store:
    name = "store"

    def __init__(self, engine: Engine):
        self.engine = engine
        self._sessionmaker = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def session(self) -> Session:
        return self._sessionmaker()

    def execute(self, statement, params: Optional[dict[str, Any]] = None) -> QueryResult:
        """Run one statement in its own transaction.

        Plain strings are wrapped in ``text()`` and use named binds
        (``:email``); the driver binds the values. Backend errors are raised
        as-is.
        """
        if isinstance(statement, str):
            statement = text(statement)
        with self.engine.begin() as conn:
            result = conn.execute(statement, params or {})
            rows = [dict(r) for r in result.mappings()] if result.returns_rows else []
            row_count = len(rows) if result.returns_rows else result.rowcount
        return QueryResult(rows=rows, row_count=row_count)

    def _insert(self, table: Table):
        raise NotImplementedError

    def insert_if_absent(
        self,
        db: Session,
        table: Table,
        values: dict[str, Any],
        index_elements: list[str],
        update_columns: Optional[list[str]] = None,
    ) -> int:
        """Insert ``values`` unless a row with the same key exists.

        When ``update_columns`` is given the existing row has those columns
        refreshed from ``values`` instead; a NULL in ``values`` keeps the
        stored value. Runs as one statement inside the
        caller's session. Returns the affected row count.
        """
        stmt = self._insert(table).values(**values)
        if update_columns:
            stmt = stmt.on_conflict_do_update(
                index_elements=index_elements,
                set_={c: func.coalesce(stmt.excluded[c], table.c[c]) for c in update_columns},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=index_elements)
        return db.execute(stmt).rowcount

    def column_names(self, conn: Connection, table_name: str) -> set[str]:
        return {c["name"] for c in inspect(conn).get_columns(table_name)}

    def add_column(self, conn: Connection, table_name: str, column: Column) -> bool:
        raise NotImplementedError

    def _column_ddl(self, conn: Connection, table_name: str, column: Column) -> tuple[str, str]:
        preparer = conn.dialect.identifier_preparer
        col_type = column.type.compile(dialect=conn.dialect)
        ddl = f"{preparer.quote(column.name)} {col_type}"
        if column.server_default is not None:
            default = column.server_default.arg
            ddl += f" DEFAULT '{default}'"
        return preparer.quote(table_name), ddl

    def reset_sequence(self, db: Session, table: Table):
        """Move the id generator past rows inserted with explicit ids."""

    def dispose(self):
        self.engine.dispose()


class PostgresStore(Store):
    name = "postgresql"

    def __init__(self, url: str, sslmode: str | None = None):
        connect_args = {"sslmode": sslmode} if sslmode else {}
        super().__init__(create_engine(url, pool_pre_ping=True, connect_args=connect_args))

    def _insert(self, table: Table):
        return postgresql.insert(table)

    def reset_sequence(self, db: Session, table: Table):
        quoted = self.engine.dialect.identifier_preparer.format_table(table)
        db.execute(
            text(f"SELECT setval(pg_get_serial_sequence(:table, 'id'), COALESCE(MAX(id), 1)) FROM {quoted}"),
            {"table": table.name},
        )

    def add_column(self, conn: Connection, table_name: str, column: Column) -> bool:
        present = column.name in self.column_names(conn, table_name)
        table, ddl = self._column_ddl(conn, table_name, column)
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN IF NOT EXISTS {ddl}"))
        return not present


def _json_serializer(obj) -> str:
    # Keep non-ASCII text as-is so a text search over the document matches it.
    return json.dumps(obj, ensure_ascii=False)


class SqliteStore(Store):
    name = "sqlite"

    def __init__(self, path: str = ":memory:"):
        if path == ":memory:":
            engine = create_engine(
                "sqlite+pysqlite:///:memory:",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                json_serializer=_json_serializer,
            )
        else:
            engine = create_engine(
                f"sqlite+pysqlite:///{path}",
                connect_args={"check_same_thread": False},
                json_serializer=_json_serializer,
            )
        super().__init__(engine)

    def _insert(self, table: Table):
        return sqlite.insert(table)

    def add_column(self, conn: Connection, table_name: str, column: Column) -> bool:
        # SQLite has no ADD COLUMN IF NOT EXISTS.
        if column.name in self.column_names(conn, table_name):
            return False
        table, ddl = self._column_ddl(conn, table_name, column)
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {ddl}"))
        return True


_store: Optional[Store] = None


def set_store(store: Optional[Store]):
    global _store
    _store = store


def get_store() -> Store:
    if _store is None:
        # The app can still start, but any DB access will fail until a store is connected.
        raise RuntimeError("No database store is connected")
    return _store


def get_db():
    db = get_store().session()
    try:
        yield db
    finally:
        db.close()
