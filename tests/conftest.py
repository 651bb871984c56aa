from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from content.router import get_content_repository
from content.schemas import ContentCreate, MessageContent
from core.errors import DuplicateKeyError, NotFoundError
from main import create_app
from users.dependencies import get_user_repository
from users.schemas import User, UserCreate, UserUpdate


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryUserRepository:
    """Mirrors UserRepository against a dict keyed by id."""

    def __init__(self) -> None:
        self.users: dict[int, User] = {}
        self._next_id = 1

    async def create(self, payload: UserCreate) -> User:
        if payload.email is not None and any(u.email == payload.email for u in self.users.values()):
            raise DuplicateKeyError(f"create user failed: duplicate email {payload.email}")
        now = _now()
        user = User(id=self._next_id, created_at=now, updated_at=now, **payload.model_dump())
        self.users[user.id] = user
        self._next_id += 1
        return user

    async def list_all(self) -> list[User]:
        return [self.users[k] for k in sorted(self.users)]

    async def get(self, user_id: int) -> User:
        if user_id not in self.users:
            raise NotFoundError("user not found")
        return self.users[user_id]

    async def update(self, user_id: int, patch: UserUpdate) -> User:
        user = await self.get(user_id)
        changes = patch.changes()
        if not changes:
            return user
        updated = user.model_copy(update={**changes, "updated_at": _now()})
        self.users[user_id] = updated
        return updated

    async def delete(self, user_id: int) -> None:
        self.users.pop(user_id, None)


class InMemoryContentRepository:
    def __init__(self) -> None:
        self.messages: dict[int, MessageContent] = {}
        self._next_id = 1

    async def create(self, payload: ContentCreate, *, user_ip: str) -> MessageContent:
        message = MessageContent(
            msg_id=self._next_id,
            user_id=payload.user_id,
            user_ip=user_ip,
            content=payload.content,
            created_at=_now(),
        )
        self.messages[message.msg_id] = message
        self._next_id += 1
        return message

    async def list_all(self) -> list[MessageContent]:
        return [self.messages[k] for k in sorted(self.messages)]

    async def delete(self, msg_id: int) -> None:
        self.messages.pop(msg_id, None)


@pytest.fixture()
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def content_repository() -> InMemoryContentRepository:
    return InMemoryContentRepository()


@pytest.fixture()
def app(
    user_repository: InMemoryUserRepository,
    content_repository: InMemoryContentRepository,
) -> FastAPI:
    application = create_app()
    application.dependency_overrides[get_user_repository] = lambda: user_repository
    application.dependency_overrides[get_content_repository] = lambda: content_repository
    return application


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def disconnected_client() -> TestClient:
    # No overrides: repositories need a real connection.
    return TestClient(create_app())
