# taskapi/database.py
"""Database engine, per-request sessions and dev schema sync using SQLModel."""

import logging
from enum import Enum

from sqlalchemy import Column, inspect, text
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from taskapi import config
from taskapi import models  # noqa: F401  registers the task table

logger = logging.getLogger(__name__)


def make_engine(url: str = config.DATABASE_URL, echo: bool = config.SQL_ECHO) -> Engine:
    """Create an engine; SQLite connections may be used from the threadpool."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


engine = make_engine()


def _column_ddl(column: Column, dialect) -> str:
    """Build the ``ADD COLUMN`` clause for a model column missing from the table."""
    ddl = f'"{column.name}" {column.type.compile(dialect=dialect)}'
    if column.nullable:
        return ddl

    # SQLite refuses NOT NULL columns without a default on existing tables.
    default = column.default.arg if column.default is not None and column.default.is_scalar else None
    if isinstance(default, Enum):
        default = default.name
    if isinstance(default, bool):
        default = int(default)
    if default is None:
        type_name = str(column.type).upper()
        if "INT" in type_name or "BOOL" in type_name:
            default = 0
        elif "DATE" in type_name or "TIME" in type_name:
            default = "1970-01-01 00:00:00"
        else:
            default = ""
    if isinstance(default, (int, float)):
        return f"{ddl} NOT NULL DEFAULT {default}"
    escaped = str(default).replace("'", "''")
    return f"{ddl} NOT NULL DEFAULT '{escaped}'"


def sync_schema(bind: Engine) -> list[str]:
    """Add model columns that an existing table lacks. Returns the DDL applied.

    Only additive changes are made; existing rows are kept.
    """
    inspector = inspect(bind)
    existing_tables = set(inspector.get_table_names())
    applied: list[str] = []

    for table_name, table in SQLModel.metadata.tables.items():
        if table_name not in existing_tables:
            continue
        present = {col["name"] for col in inspector.get_columns(table_name)}
        missing = [col for col in table.columns if col.name not in present]
        if not missing:
            continue

        logger.info("Adding columns to '%s': %s", table_name, [c.name for c in missing])
        with bind.begin() as conn:
            for col in missing:
                stmt = f'ALTER TABLE "{table_name}" ADD COLUMN {_column_ddl(col, bind.dialect)}'
                logger.info("  %s", stmt)
                conn.execute(text(stmt))
                applied.append(stmt)
    return applied


def create_db_and_tables(bind: Engine = engine) -> None:
    """Create all tables from SQLModel metadata, then add any missing columns."""
    SQLModel.metadata.create_all(bind)
    sync_schema(bind)


def get_session():
    """Yield a database session for FastAPI dependency injection."""
    with Session(engine) as session:
        yield session
