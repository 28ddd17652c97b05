"""
File: tests/conftest.py
Description: Pytest 全局 Fixtures 配置 (Async + 内存 SQLite)

1. 在导入 wxpanel 之前写入测试环境变量 (SECRET_KEY 必填)
2. 每个测试使用独立的内存 SQLite (StaticPool 保证同一连接)
3. 微信网关使用 httpx.MockTransport 模拟
4. client 通过 dependency_overrides 注入测试会话与网关 (ASGITransport 不触发 lifespan)

Created: 2025-11-26
Updated: 2026-03-02 (SQLite in-memory + fake gateway)
"""

import os

# ------------------------------------------------------------------------------
# 1. 环境配置 (必须在导入 wxpanel 之前)
# ------------------------------------------------------------------------------
os.environ["SECRET_KEY"] = "pytest-secret-key-0123456789abcdefghijklmnop"
os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite+aiosqlite:///:memory:"
os.environ["ADMIN_BOOTSTRAP"] = "first_registrant"
os.environ["ENVIRONMENT"] = "local"

from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from wxpanel.api.deps import get_db, get_gateway
from wxpanel.core.security import create_access_token, get_password_hash
from wxpanel.db.models import User, UserRole
from wxpanel.db.session import Database
from wxpanel.domains.wechat.gateway import WeChatGatewayClient
from wxpanel.main import app

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "password123"


# ------------------------------------------------------------------------------
# 2. 模拟微信网关
# ------------------------------------------------------------------------------


class FakeGateway:
    """
    按路径返回预设响应的网关替身。

    用法:
        fake_gateway.set("/login/WakeUpLogin", {"Code": 200, "Data": {...}})
        fake_gateway.set("/login/WakeUpLogin", "<html>", status_code=500)
        fake_gateway.fail("/login/WakeUpLogin")  # 网络错误
    """

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def set(self, path: str, payload: Any, status_code: int = 200) -> None:
        self.routes[path] = (status_code, payload)

    def fail(self, path: str) -> None:
        self.routes[path] = (0, None)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, payload = self.routes.get(
            request.url.path, (200, {"Code": -1, "Message": "not mocked"})
        )
        if status_code == 0:
            raise httpx.ConnectError("connection refused", request=request)
        if isinstance(payload, str):
            return httpx.Response(status_code, text=payload)
        return httpx.Response(status_code, json=payload)


# ------------------------------------------------------------------------------
# 3. 全局 Fixtures
# ------------------------------------------------------------------------------


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """每个测试一个全新的内存数据库。"""
    db = Database(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.init_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest_asyncio.fixture
async def gateway(fake_gateway: FakeGateway) -> AsyncGenerator[WeChatGatewayClient, None]:
    client = WeChatGatewayClient(
        "http://gateway.test", transport=httpx.MockTransport(fake_gateway.handler)
    )
    yield client
    await client.close()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, gateway: WeChatGatewayClient
) -> AsyncGenerator[AsyncClient, None]:
    """
    获取异步 HTTP 客户端。
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    async def override_get_gateway() -> WeChatGatewayClient:
        return gateway

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = override_get_gateway

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"  # type: ignore
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ------------------------------------------------------------------------------
# 4. 用户与令牌
# ------------------------------------------------------------------------------


async def create_user(
    session: AsyncSession,
    username: str,
    role: str = UserRole.USER.value,
    password: str = TEST_PASSWORD,
    email: str | None = None,
) -> User:
    user = User(
        username=username,
        hashed_password=get_password_hash(password),
        role=role,
        email=email,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user_id=user.id, username=user.username, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "root", role=UserRole.ADMIN.value)


@pytest_asyncio.fixture
async def normal_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "alice")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "bob")


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession):
    """用户工厂: await make_user("carol", role="agent")"""

    async def _make(username: str, role: str = UserRole.USER.value, **kwargs: Any) -> User:
        return await create_user(db_session, username, role=role, **kwargs)

    return _make


@pytest_asyncio.fixture
async def headers_for():
    """令牌工厂: headers_for(user) -> {"Authorization": "Bearer ..."}"""
    return auth_headers
