"""
Message board schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ContentCreate(BaseModel):
    # user_ip is derived from the request; any client-supplied value is ignored.
    user_id: str = ""
    content: str


class MessageContent(BaseModel):
    msg_id: int
    user_id: str
    user_ip: str
    content: str
    created_at: datetime
