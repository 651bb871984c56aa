"""
User repository wiring for FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends

from core.db import Database, get_database

from .repository import UserRepository


def get_user_repository(database: Database = Depends(get_database)) -> UserRepository:
    # Raises NotConnectedError (500) until the database is connected.
    return UserRepository(database.pool())
