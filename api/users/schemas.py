"""
User API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class UserCreate(BaseModel):
    name: str
    email: str | None = None
    age: int = 0


class UserUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are applied, so
    `{"age": 0}` sets the age to zero while leaving name/email untouched.
    An explicit null is treated as "not provided".
    """

    name: str | None = None
    email: str | None = None
    age: int | None = None

    def changes(self) -> dict[str, Any]:
        return {k: v for (k, v) in self.model_dump(exclude_unset=True).items() if v is not None}


class User(BaseModel):
    id: int
    name: str
    email: str | None = None
    age: int
    created_at: datetime
    updated_at: datetime
