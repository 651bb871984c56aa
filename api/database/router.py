"""
Database administration endpoints: create, connect, status.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from core.db import Database, get_database
from core.responses import APIResponse, ok

from . import schemas

router = APIRouter()


@router.post("/database/create")
async def create_database(
    config: schemas.DatabaseConfig,
    database: Database = Depends(get_database),
) -> APIResponse:
    await database.create_database(config)
    return ok(f"database {config.dbname} created")


@router.post("/database/connect")
async def connect_database(
    config: schemas.DatabaseConfig,
    database: Database = Depends(get_database),
) -> APIResponse:
    """
    Open a pool on `config.dbname` and migrate the schema.
    """
    await database.connect(config)
    return ok("database connected")


@router.get("/database/status")
async def database_status(
    database: Database = Depends(get_database),
) -> APIResponse[dict[str, Any]]:
    return ok("database status", await database.status())
