"""
Message board persistence. Messages are never updated, only created,
listed and deleted.
"""

from __future__ import annotations

import asyncpg

from core.db import store_errors
from core.errors import StoreError

from .schemas import ContentCreate, MessageContent

_COLUMNS = "msg_id, user_id, user_ip, content, created_at"


class ContentRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def create(self, payload: ContentCreate, *, user_ip: str) -> MessageContent:
        with store_errors("post message failed"):
            row = await self._pool.fetchrow(
                f"""
                INSERT INTO msg_contents (user_id, user_ip, content)
                VALUES ($1, $2, $3)
                RETURNING {_COLUMNS}
                """,
                payload.user_id,
                user_ip,
                payload.content,
            )
        if row is None:
            raise StoreError("post message failed: no row returned")
        return MessageContent.model_validate(dict(row))

    async def list_all(self) -> list[MessageContent]:
        with store_errors("list messages failed"):
            rows = await self._pool.fetch(f"SELECT {_COLUMNS} FROM msg_contents ORDER BY msg_id")
        return [MessageContent.model_validate(dict(r)) for r in rows]

    async def delete(self, msg_id: int) -> None:
        with store_errors("delete message failed"):
            await self._pool.execute("DELETE FROM msg_contents WHERE msg_id = $1", msg_id)
