"""
File: tests/unit/test_auth_key_service.py
Description: 授权码领域服务单元测试

1. 批量签发: 令牌互不相同，expires_at = created_at + days
2. 过期授权码仍然存在，仅 is_expired 为真
3. 延期: 以当前时间为基准
4. 删除: 不存在 / 仍被引用
"""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from wxpanel.core.exceptions import AppException
from wxpanel.db.models import AuthKey, User, WeChatAccount
from wxpanel.db.models.base import utcnow
from wxpanel.domains.auth_keys.repository import AuthKeyRepository
from wxpanel.domains.auth_keys.service import AuthKeyService


@pytest.fixture
def key_service(db_session: AsyncSession) -> AuthKeyService:
    return AuthKeyService(repo=AuthKeyRepository(model=AuthKey, session=db_session))


@pytest.mark.asyncio
async def test_mint_distinct_keys_with_expiry(
    key_service: AuthKeyService, admin_user: User
) -> None:
    keys = await key_service.mint(admin_user.id, count=5, days=30)

    assert len(keys) == 5
    assert len(set(keys)) == 5

    for value in keys:
        key = await key_service.get(value)
        assert key.owner_user_id == admin_user.id
        assert key.days == 30
        delta = key.expires_at - key.created_at
        assert abs(delta.total_seconds() - timedelta(days=30).total_seconds()) <= 1
        assert not key.is_expired


@pytest.mark.asyncio
async def test_expired_key_still_exists(
    key_service: AuthKeyService, db_session: AsyncSession, admin_user: User
) -> None:
    [value] = await key_service.mint(admin_user.id, count=1, days=1)
    key = await key_service.get(value)

    # 模拟 2 天前签发
    key.created_at = utcnow() - timedelta(days=2)
    key.expires_at = key.created_at + timedelta(days=1)
    await db_session.commit()

    listed = await key_service.list_keys(owner_id=admin_user.id)
    assert [k.key_value for k in listed] == [value]
    assert listed[0].is_expired
    assert listed[0].owner_name == admin_user.username


@pytest.mark.asyncio
async def test_delay_rebases_on_now(key_service: AuthKeyService, admin_user: User) -> None:
    [value] = await key_service.mint(admin_user.id, count=1, days=1)

    before = utcnow()
    key = await key_service.delay(value, 10)

    assert key.days == 10
    expected = before + timedelta(days=10)
    assert abs((key.expires_at - expected).total_seconds()) <= 2


@pytest.mark.asyncio
async def test_delay_and_revoke_unknown_key(key_service: AuthKeyService) -> None:
    with pytest.raises(AppException) as exc_info:
        await key_service.delay("missing", 10)
    assert exc_info.value.code == "auth_keys.not_found"

    with pytest.raises(AppException) as exc_info:
        await key_service.revoke("missing")
    assert exc_info.value.http_status == 404


@pytest.mark.asyncio
async def test_revoke_bound_key_is_rejected(
    key_service: AuthKeyService, db_session: AsyncSession, admin_user: User
) -> None:
    [value] = await key_service.mint(admin_user.id, count=1, days=30)
    db_session.add(
        WeChatAccount(auth_key=value, owner_user_id=admin_user.id, status="waiting")
    )
    await db_session.commit()

    with pytest.raises(AppException) as exc_info:
        await key_service.revoke(value)

    assert exc_info.value.code == "auth_keys.in_use"
    assert await key_service.get(value)


@pytest.mark.asyncio
async def test_revoke_free_key(key_service: AuthKeyService, admin_user: User) -> None:
    [value] = await key_service.mint(admin_user.id, count=1, days=30)

    await key_service.revoke(value)

    with pytest.raises(AppException):
        await key_service.get(value)


@pytest.mark.asyncio
async def test_mint_interrupted_keeps_committed_keys(
    key_service: AuthKeyService, admin_user: User, monkeypatch: pytest.MonkeyPatch
) -> None:
    original_new_key = key_service.repo.new_key
    calls = 0

    async def new_key_failing_on_third(owner_user_id: int, days: int) -> AuthKey:
        nonlocal calls
        calls += 1
        if calls == 3:
            raise OperationalError("INSERT INTO auth_keys", {}, Exception("disk I/O error"))
        return await original_new_key(owner_user_id, days)

    monkeypatch.setattr(key_service.repo, "new_key", new_key_failing_on_third)

    with pytest.raises(AppException) as exc_info:
        await key_service.mint(admin_user.id, count=5, days=30)

    assert exc_info.value.code == "system.db_error"
    reported = exc_info.value.data["keys"]
    assert len(reported) == 2

    listed = await key_service.list_keys(owner_id=admin_user.id)
    assert sorted(k.key_value for k in listed) == sorted(reported)
