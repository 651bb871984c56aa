"""
Database administration schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    # Transient: supplied per request, never persisted.
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = Field(default="", repr=False)
    dbname: str
