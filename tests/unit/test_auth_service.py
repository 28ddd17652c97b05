"""
File: tests/unit/test_auth_service.py
Description: 认证领域服务单元测试

1. 注册: 首个用户成为管理员 (first_registrant)，seed 策略不提升
2. 注册唯一性校验
3. 登录: 用户不存在与密码错误返回相同错误
"""

import pytest
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from wxpanel.core.config import settings
from wxpanel.core.exceptions import AppException
from wxpanel.core.security import verify_password
from wxpanel.db.models.user import User, UserRole
from wxpanel.domains.auth.schemas import LoginRequest, RegisterRequest
from wxpanel.domains.auth.service import AuthService
from wxpanel.domains.users.repository import UserRepository


@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    repo = UserRepository(model=User, session=db_session)
    return AuthService(user_repo=repo, bootstrap_policy="first_registrant")


@pytest.mark.asyncio
async def test_first_registrant_becomes_admin(auth_service: AuthService) -> None:
    first = await auth_service.register(
        RegisterRequest(username="first", password="secret123")
    )
    second = await auth_service.register(
        RegisterRequest(username="second", password="secret123")
    )

    assert first.role == UserRole.ADMIN
    assert second.role == UserRole.USER
    # 密码以哈希存储
    assert first.hashed_password != "secret123"
    assert verify_password("secret123", first.hashed_password)


@pytest.mark.asyncio
async def test_seed_policy_never_promotes(db_session: AsyncSession) -> None:
    service = AuthService(
        user_repo=UserRepository(model=User, session=db_session),
        bootstrap_policy="seed",
    )

    user = await service.register(RegisterRequest(username="first", password="secret123"))

    assert user.role == UserRole.USER


@pytest.mark.asyncio
async def test_register_uses_requested_role(auth_service: AuthService) -> None:
    await auth_service.register(RegisterRequest(username="boss", password="secret123"))

    agent = await auth_service.register(
        RegisterRequest(username="agent1", password="secret123", role=UserRole.AGENT)
    )

    assert agent.role == UserRole.AGENT


@pytest.mark.asyncio
async def test_register_duplicate_username_and_email(auth_service: AuthService) -> None:
    await auth_service.register(
        RegisterRequest(username="dup", password="secret123", email="dup@example.com")
    )

    with pytest.raises(AppException) as exc_info:
        await auth_service.register(RegisterRequest(username="dup", password="secret123"))
    assert exc_info.value.code == "auth.username_exist"
    assert exc_info.value.http_status == 400

    with pytest.raises(AppException) as exc_info:
        await auth_service.register(
            RegisterRequest(
                username="other", password="secret123", email="dup@example.com"
            )
        )
    assert exc_info.value.code == "auth.email_exist"


@pytest.mark.asyncio
async def test_login_issues_token_with_role_claims(auth_service: AuthService) -> None:
    user = await auth_service.register(
        RegisterRequest(username="carol", password="secret123", email="c@example.com")
    )

    result = await auth_service.login(LoginRequest(username="carol", password="secret123"))

    claims = jwt.decode(result.token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["sub"] == str(user.id)
    assert claims["username"] == "carol"
    assert claims["role"] == user.role
    assert result.user.email == "c@example.com"
    assert result.expires_in == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(auth_service: AuthService) -> None:
    await auth_service.register(RegisterRequest(username="dave", password="secret123"))

    with pytest.raises(AppException) as wrong_password:
        await auth_service.login(LoginRequest(username="dave", password="wrong-pass"))
    with pytest.raises(AppException) as unknown_user:
        await auth_service.login(LoginRequest(username="nobody", password="wrong-pass"))

    assert wrong_password.value.code == unknown_user.value.code == "auth.invalid_credentials"
    assert wrong_password.value.message == unknown_user.value.message
    assert wrong_password.value.http_status == 401
