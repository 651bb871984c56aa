"""
User persistence (raw SQL over the asyncpg pool).
"""

from __future__ import annotations

import asyncpg

from core.db import store_errors
from core.errors import NotFoundError, StoreError

from .schemas import User, UserCreate, UserUpdate

_COLUMNS = "id, name, email, age, created_at, updated_at"
_UPDATABLE = ("name", "email", "age")


def _to_user(row: asyncpg.Record) -> User:
    return User.model_validate(dict(row))


class UserRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def create(self, payload: UserCreate) -> User:
        with store_errors("create user failed"):
            row = await self._pool.fetchrow(
                f"""
                INSERT INTO users (name, email, age)
                VALUES ($1, $2, $3)
                RETURNING {_COLUMNS}
                """,
                payload.name,
                payload.email,
                payload.age,
            )
        if row is None:
            raise StoreError("create user failed: no row returned")
        return _to_user(row)

    async def list_all(self) -> list[User]:
        with store_errors("list users failed"):
            rows = await self._pool.fetch(f"SELECT {_COLUMNS} FROM users ORDER BY id")
        return [_to_user(r) for r in rows]

    async def get(self, user_id: int) -> User:
        with store_errors("get user failed"):
            row = await self._pool.fetchrow(f"SELECT {_COLUMNS} FROM users WHERE id = $1", user_id)
        if row is None:
            raise NotFoundError("user not found")
        return _to_user(row)

    async def update(self, user_id: int, patch: UserUpdate) -> User:
        changes = {k: v for (k, v) in patch.changes().items() if k in _UPDATABLE}
        if not changes:
            return await self.get(user_id)

        # $1 is the id; changed columns follow in order.
        assignments = ", ".join(f"{column} = ${i}" for i, column in enumerate(changes, start=2))
        with store_errors("update user failed"):
            row = await self._pool.fetchrow(
                f"""
                UPDATE users
                SET {assignments}, updated_at = now()
                WHERE id = $1
                RETURNING {_COLUMNS}
                """,
                user_id,
                *changes.values(),
            )
        if row is None:
            raise NotFoundError("user not found")
        return _to_user(row)

    async def delete(self, user_id: int) -> None:
        # No existence check: deleting a missing id succeeds.
        with store_errors("delete user failed"):
            await self._pool.execute("DELETE FROM users WHERE id = $1", user_id)
