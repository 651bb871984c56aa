"""
Schema migration run on every connect.

Tables are declared below; `migrate()` creates missing tables, columns and
unique indexes. It never drops or rewrites existing data, so running it
against an already-migrated database is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import asyncpg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    name: str
    ddl: str
    unique: bool = False


@dataclass(frozen=True)
class Table:
    name: str
    primary_key: Column
    columns: tuple[Column, ...]


# NOT NULL columns carry defaults so they can be added to tables with rows.
TABLES: tuple[Table, ...] = (
    Table(
        name="users",
        primary_key=Column("id", "BIGSERIAL PRIMARY KEY"),
        columns=(
            Column("name", "VARCHAR(100) NOT NULL DEFAULT ''"),
            Column("email", "VARCHAR(100)", unique=True),
            Column("age", "INTEGER NOT NULL DEFAULT 0"),
            Column("created_at", "TIMESTAMPTZ NOT NULL DEFAULT now()"),
            Column("updated_at", "TIMESTAMPTZ NOT NULL DEFAULT now()"),
        ),
    ),
    Table(
        name="msg_contents",
        primary_key=Column("msg_id", "BIGSERIAL PRIMARY KEY"),
        columns=(
            Column("user_id", "TEXT NOT NULL DEFAULT ''"),
            Column("user_ip", "TEXT NOT NULL DEFAULT ''"),
            Column("content", "TEXT NOT NULL DEFAULT ''"),
            Column("created_at", "TIMESTAMPTZ NOT NULL DEFAULT now()"),
        ),
    ),
)


def table_names() -> list[str]:
    return [table.name for table in TABLES]


async def migrate(conn: asyncpg.Connection) -> None:
    async with conn.transaction():
        for table in TABLES:
            await conn.execute(
                f"CREATE TABLE IF NOT EXISTS {table.name} "
                f"({table.primary_key.name} {table.primary_key.ddl})"
            )
            for column in table.columns:
                await conn.execute(
                    f"ALTER TABLE {table.name} ADD COLUMN IF NOT EXISTS {column.name} {column.ddl}"
                )
                if column.unique:
                    await conn.execute(
                        f"CREATE UNIQUE INDEX IF NOT EXISTS idx_{table.name}_{column.name} "
                        f"ON {table.name} ({column.name})"
                    )
            logger.info("migration_applied table=%s columns=%s", table.name, len(table.columns) + 1)


async def missing_tables(conn: asyncpg.Connection) -> list[str]:
    rows = await conn.fetch(
        """
        SELECT table_name
        FROM information_schema.tables
        WHERE table_schema = current_schema()
          AND table_name = ANY($1::text[])
        """,
        table_names(),
    )
    present = {str(row["table_name"]) for row in rows}
    return [name for name in table_names() if name not in present]
