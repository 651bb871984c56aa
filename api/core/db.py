"""
Database lifecycle (create / connect / status) using asyncpg.

This module owns the connection pool. Nothing connects implicitly: the pool
only exists after `Database.connect()` succeeded, either through
`POST /api/database/connect` or at startup when DATABASE_URL is set
(see `api/main.py`). Repositories get the pool from `Database.pool()`, which
fails fast with NotConnectedError while disconnected.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Annotated, Any, Iterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Path, Request

from . import migrations, settings
from .errors import (
    DatabaseConnectionError,
    DuplicateKeyError,
    MigrationError,
    NotConnectedError,
    SQLExecutionError,
    StoreError,
)

if TYPE_CHECKING:
    from database.schemas import DatabaseConfig

logger = logging.getLogger(__name__)

_CONNECT_ERRORS = (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError)
_STORE_ERRORS = (OSError, asyncpg.PostgresError, asyncpg.InterfaceError)

# Primary keys are BIGSERIAL; path ids outside this range are rejected as 400.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

RowId = Annotated[int, Path(ge=INT64_MIN, le=INT64_MAX)]


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _connect_kwargs(config: DatabaseConfig, *, database: str) -> dict[str, Any]:
    return {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password or None,
        "database": database,
    }


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """
    Translate driver errors raised inside the block into StoreError.
    """
    try:
        yield
    except asyncpg.exceptions.UniqueViolationError as exc:
        logger.warning("store_duplicate_key action=%r error=%s", action, exc)
        raise DuplicateKeyError(f"{action}: {exc}") from exc
    except _STORE_ERRORS as exc:
        logger.warning("store_failed action=%r error=%s", action, exc)
        raise StoreError(f"{action}: {exc}") from exc


class Database:
    """
    Process-wide owner of the asyncpg pool.

    connect/close are serialised by a lock; a reconnect swaps in the new
    pool and then closes the old one.
    """

    def __init__(self, *, min_pool_size: int | None = None, max_pool_size: int | None = None) -> None:
        self._pool: asyncpg.Pool | None = None
        self._lock = asyncio.Lock()
        self._min_pool_size = settings.db_pool_min_size() if min_pool_size is None else min_pool_size
        self._max_pool_size = settings.db_pool_max_size() if max_pool_size is None else max_pool_size
        self._min_pool_size = min(self._min_pool_size, self._max_pool_size)

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise NotConnectedError()
        return self._pool

    async def create_database(self, config: DatabaseConfig) -> None:
        """
        Create `config.dbname` on the server if it does not exist yet.
        """
        maintenance_db = settings.maintenance_database()
        logger.info(
            "database_create host=%s port=%s user=%s dbname=%s",
            config.host,
            config.port,
            config.user,
            config.dbname,
        )
        try:
            conn = await asyncpg.connect(**_connect_kwargs(config, database=maintenance_db))
        except _CONNECT_ERRORS as exc:
            raise DatabaseConnectionError(f"failed to connect to database server: {exc}") from exc

        try:
            exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", config.dbname)
            if exists:
                logger.info("database_exists dbname=%s", config.dbname)
                return
            await conn.execute(
                f"CREATE DATABASE {_quote_ident(config.dbname)} "
                "ENCODING 'UTF8' LC_COLLATE 'C' LC_CTYPE 'C' TEMPLATE template0"
            )
        except asyncpg.exceptions.DuplicateDatabaseError:
            # Another request created it between the check and the CREATE.
            logger.info("database_exists dbname=%s", config.dbname)
            return
        except _STORE_ERRORS as exc:
            raise SQLExecutionError(f"failed to create database: {exc}") from exc
        finally:
            await conn.close()

        logger.info("database_created dbname=%s", config.dbname)

    async def connect(self, config: DatabaseConfig) -> None:
        await self._open(
            _connect_kwargs(config, database=config.dbname),
            target=f"{config.host}:{config.port}/{config.dbname}",
        )

    async def connect_dsn(self, dsn: str) -> None:
        dsn = _sanitize_database_url(dsn)
        parts = urlsplit(dsn)
        await self._open({"dsn": dsn}, target=f"{parts.hostname}:{parts.port or 5432}{parts.path}")

    async def _open(self, connect_kwargs: dict[str, Any], *, target: str) -> None:
        async with self._lock:
            try:
                new_pool = await asyncpg.create_pool(
                    min_size=self._min_pool_size,
                    max_size=self._max_pool_size,
                    **connect_kwargs,
                )
            except _CONNECT_ERRORS as exc:
                raise DatabaseConnectionError(f"failed to connect to database: {exc}") from exc

            try:
                await self._migrate(new_pool)
            except BaseException:
                # Includes cancellation and timeouts: the new pool never leaks.
                await new_pool.close()
                raise

            old_pool, self._pool = self._pool, new_pool

        logger.info("database_connected target=%s pool_max_size=%s", target, self._max_pool_size)
        if old_pool is not None:
            await old_pool.close()
            logger.info("pool_closed reason=replaced")

    async def _migrate(self, pool: asyncpg.Pool) -> None:
        try:
            async with pool.acquire() as conn:
                await migrations.migrate(conn)
                missing = await migrations.missing_tables(conn)
        except _STORE_ERRORS as exc:
            raise MigrationError(f"schema migration failed: {exc}") from exc
        if missing:
            raise MigrationError(f"tables missing after migration: {', '.join(missing)}")

    async def status(self) -> dict[str, Any]:
        pool = self._pool
        if pool is None:
            return {"connected": False, "status": "disconnected"}

        try:
            async with pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except _CONNECT_ERRORS as exc:
            return {"connected": False, "status": "ping failed", "error": str(exc)}

        size = pool.get_size()
        idle = pool.get_idle_size()
        return {
            "connected": True,
            "status": "connected",
            "open_connections": size,
            "in_use": size - idle,
            "idle": idle,
            "max_size": pool.get_max_size(),
        }

    async def close(self) -> None:
        async with self._lock:
            pool, self._pool = self._pool, None
        if pool is None:
            return None
        await pool.close()
        logger.info("pool_closed reason=shutdown")


def get_database(request: Request) -> Database:
    return request.app.state.database
