"""
Message board endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from core.client_ip import client_ip_from_request
from core.db import Database, RowId, get_database
from core.responses import APIResponse, ok

from . import schemas
from .repository import ContentRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def get_content_repository(database: Database = Depends(get_database)) -> ContentRepository:
    return ContentRepository(database.pool())


@router.post("/addContent")
async def add_content(
    payload: schemas.ContentCreate,
    request: Request,
    contents: ContentRepository = Depends(get_content_repository),
) -> APIResponse[schemas.MessageContent]:
    user_ip = client_ip_from_request(request)
    message = await contents.create(payload, user_ip=user_ip)
    logger.info("message_posted msg_id=%s user_ip=%s", message.msg_id, user_ip)
    return ok("message posted", message)


@router.get("/getAllContent")
async def get_all_content(
    contents: ContentRepository = Depends(get_content_repository),
) -> APIResponse[list[schemas.MessageContent]]:
    return ok("query succeeded", await contents.list_all())


@router.delete("/removeContent/{msg_id}")
async def remove_content(
    msg_id: RowId,
    contents: ContentRepository = Depends(get_content_repository),
) -> APIResponse:
    await contents.delete(msg_id)
    return ok("message deleted")
