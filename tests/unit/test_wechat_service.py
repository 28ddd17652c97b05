"""
File: tests/unit/test_wechat_service.py
Description: 微信账号领域服务单元测试

1. 创建或更新的三种分流
2. 登录流程: 二维码 -> 扫码 -> 确认 / 失败 -> 重试
3. 唤醒登录: 未绑定、成功、网关拒绝 (状态不变)
4. 归属校验与删除后的授权码清理
"""

from datetime import timedelta
from typing import Any

import pytest
from loguru import logger
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from wxpanel.core.exceptions import AppException
from wxpanel.db.models import AuthKey, User, WeChatAccount
from wxpanel.db.models.base import utcnow
from wxpanel.domains.auth_keys.repository import AuthKeyRepository
from wxpanel.domains.wechat.gateway import WeChatGatewayClient
from wxpanel.domains.wechat.lifecycle import InvalidStateTransition
from wxpanel.domains.wechat.repository import WeChatAccountRepository
from wxpanel.domains.wechat.schemas import (
    ConfirmRequest,
    WeChatAccountCreate,
    WeChatAccountUpdate,
)
from wxpanel.domains.wechat.service import WeChatService


@pytest.fixture
def wechat_service(db_session: AsyncSession, gateway: WeChatGatewayClient) -> WeChatService:
    return WeChatService(
        repo=WeChatAccountRepository(model=WeChatAccount, session=db_session),
        key_repo=AuthKeyRepository(model=AuthKey, session=db_session),
        gateway=gateway,
    )


async def _new_account(service: WeChatService, user: User) -> WeChatAccount:
    account, created = await service.create_or_update(user, WeChatAccountCreate())
    assert created
    return account


async def _set_status(db_session: AsyncSession, account: WeChatAccount, status: str) -> None:
    account.status = status
    await db_session.commit()


# ------------------------------------------------------------------------------
# 创建 / 更新
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_without_key_mints_key_and_waits(
    wechat_service: WeChatService, normal_user: User
) -> None:
    account = await _new_account(wechat_service, normal_user)

    assert account.status == "waiting"
    assert account.nickname == "新微信账号"
    assert account.owner_user_id == normal_user.id

    key = await wechat_service.key_repo.get_by_value(account.auth_key)
    assert key is not None
    assert key.owner_user_id == normal_user.id
    assert key.days == 30


@pytest.mark.asyncio
async def test_create_with_existing_key_updates_in_place(
    wechat_service: WeChatService, normal_user: User
) -> None:
    account = await _new_account(wechat_service, normal_user)

    updated, created = await wechat_service.create_or_update(
        normal_user,
        WeChatAccountCreate(auth_key=account.auth_key, nickname="Tom", username="wxid_tom"),
    )

    assert not created
    assert updated.id == account.id
    assert updated.status == "online"
    assert updated.nickname == "Tom"
    assert updated.last_login is not None


@pytest.mark.asyncio
async def test_create_with_free_key_inserts_online(
    wechat_service: WeChatService, normal_user: User
) -> None:
    key = await wechat_service.key_repo.new_key(normal_user.id, 30)
    await wechat_service.session.commit()

    account, created = await wechat_service.create_or_update(
        normal_user, WeChatAccountCreate(auth_key=key.key_value)
    )

    assert created
    assert account.status == "online"
    assert account.owner_user_id == normal_user.id


@pytest.mark.asyncio
async def test_create_with_unknown_key(
    wechat_service: WeChatService, normal_user: User
) -> None:
    with pytest.raises(AppException) as exc_info:
        await wechat_service.create_or_update(
            normal_user, WeChatAccountCreate(auth_key="nope")
        )
    assert exc_info.value.code == "auth_keys.not_found"


@pytest.mark.asyncio
async def test_owner_is_copied_from_key(
    wechat_service: WeChatService,
    normal_user: User,
    other_user: User,
    admin_user: User,
) -> None:
    key = await wechat_service.key_repo.new_key(normal_user.id, 30)
    await wechat_service.session.commit()

    # 非归属用户不能绑定他人的授权码
    with pytest.raises(AppException) as exc_info:
        await wechat_service.create_or_update(
            other_user, WeChatAccountCreate(auth_key=key.key_value)
        )
    assert exc_info.value.code == "system.forbidden"

    # 管理员代为创建时 owner 仍是授权码的归属用户
    account, _ = await wechat_service.create_or_update(
        admin_user, WeChatAccountCreate(auth_key=key.key_value)
    )
    assert account.owner_user_id == normal_user.id


# ------------------------------------------------------------------------------
# 登录流程
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_qr_login_moves_waiting_to_scanning(
    wechat_service: WeChatService, normal_user: User, fake_gateway: Any
) -> None:
    fake_gateway.set(
        "/login/GetLoginQrCodeNew",
        {"Code": 200, "Data": {"QrCodeUrl": "http://qr.test/a.png"}},
    )
    account = await _new_account(wechat_service, normal_user)

    account = await wechat_service.issue_qr_code(normal_user, account.auth_key)

    assert account.status == "scanning"
    assert account.qr_code_url == "http://qr.test/a.png"


@pytest.mark.asyncio
async def test_confirm_while_waiting_is_invalid(
    wechat_service: WeChatService, normal_user: User
) -> None:
    account = await _new_account(wechat_service, normal_user)

    with pytest.raises(InvalidStateTransition) as exc_info:
        await wechat_service.confirm(
            normal_user, account.auth_key, ConfirmRequest(success=True)
        )

    assert exc_info.value.data["current_status"] == "waiting"
    refreshed = await wechat_service.repo.get(account.id)
    assert refreshed is not None
    assert refreshed.status == "waiting"


@pytest.mark.asyncio
async def test_qr_rejected_by_gateway_keeps_state(
    wechat_service: WeChatService, normal_user: User, fake_gateway: Any
) -> None:
    fake_gateway.set("/login/GetLoginQrCodeNew", {"Code": 500, "Message": "busy"})
    account = await _new_account(wechat_service, normal_user)

    with pytest.raises(AppException) as exc_info:
        await wechat_service.issue_qr_code(normal_user, account.auth_key)

    assert exc_info.value.code == "wechat.gateway_rejected"
    assert account.status == "waiting"


@pytest.mark.asyncio
async def test_scan_confirm_success_binds_simulated_device_key(
    wechat_service: WeChatService, db_session: AsyncSession, normal_user: User
) -> None:
    account = await _new_account(wechat_service, normal_user)
    await _set_status(db_session, account, "scanning")

    account = await wechat_service.scan(normal_user, account.auth_key)
    assert account.status == "scanned_confirming"

    account = await wechat_service.confirm(
        normal_user,
        account.auth_key,
        ConfirmRequest(success=True, nickname="Jerry"),
    )

    assert account.status == "online"
    assert account.device_auth_key is not None
    assert account.device_auth_key.startswith("sim_dak_")
    assert account.nickname == "Jerry"
    assert account.last_login is not None


@pytest.mark.asyncio
async def test_confirm_failure_then_retry(
    wechat_service: WeChatService, db_session: AsyncSession, normal_user: User
) -> None:
    account = await _new_account(wechat_service, normal_user)
    account.device_auth_key = "old-device"
    account.qr_code_url = "http://qr.test/old.png"
    await _set_status(db_session, account, "scanned_confirming")

    account = await wechat_service.confirm(
        normal_user, account.auth_key, ConfirmRequest(success=False)
    )
    assert account.status == "failed"
    assert account.device_auth_key is None

    account = await wechat_service.retry(normal_user, account.auth_key)
    assert account.status == "waiting"
    assert account.qr_code_url is None


# ------------------------------------------------------------------------------
# 唤醒登录
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_wakeup_without_device_key(
    wechat_service: WeChatService, normal_user: User
) -> None:
    account = await _new_account(wechat_service, normal_user)

    with pytest.raises(AppException) as exc_info:
        await wechat_service.wakeup(normal_user, account.auth_key)

    assert exc_info.value.code == "wechat.not_bound"


@pytest.mark.asyncio
async def test_wakeup_success_goes_online(
    wechat_service: WeChatService,
    db_session: AsyncSession,
    normal_user: User,
    fake_gateway: Any,
) -> None:
    fake_gateway.set("/login/WakeUpLogin", {"Code": 200, "Data": {"wxid": "wxid_1"}})
    account = await _new_account(wechat_service, normal_user)
    account.device_auth_key = "DEV-1"
    account.last_login = utcnow() - timedelta(days=3)
    await _set_status(db_session, account, "offline")
    previous_login = account.last_login

    account, data = await wechat_service.wakeup(normal_user, account.auth_key)

    assert account.status == "online"
    assert account.last_login > previous_login
    assert data == {"wxid": "wxid_1"}


@pytest.mark.asyncio
async def test_wakeup_rejected_keeps_state(
    wechat_service: WeChatService,
    db_session: AsyncSession,
    normal_user: User,
    fake_gateway: Any,
) -> None:
    fake_gateway.set("/login/WakeUpLogin", {"Code": -2, "Message": "请重新扫码"})
    account = await _new_account(wechat_service, normal_user)
    account.device_auth_key = "DEV-1"
    await _set_status(db_session, account, "offline")

    with pytest.raises(AppException) as exc_info:
        await wechat_service.wakeup(normal_user, account.auth_key)

    assert exc_info.value.message == "请重新扫码"
    refreshed = await wechat_service.repo.get(account.id)
    assert refreshed is not None
    assert refreshed.status == "offline"


# ------------------------------------------------------------------------------
# 显式更新 / 归属 / 删除
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_explicit_status_update_rules(
    wechat_service: WeChatService, db_session: AsyncSession, normal_user: User
) -> None:
    account = await _new_account(wechat_service, normal_user)

    # waiting 状态不能显式改状态，但可以改普通字段
    with pytest.raises(InvalidStateTransition):
        await wechat_service.update_account(account, WeChatAccountUpdate(status="online"))
    account = await wechat_service.update_account(account, WeChatAccountUpdate(nickname="N"))
    assert account.nickname == "N"

    with pytest.raises(AppException) as exc_info:
        await wechat_service.update_account(account, WeChatAccountUpdate())
    assert exc_info.value.http_status == 400

    await _set_status(db_session, account, "offline")
    account = await wechat_service.update_account(account, WeChatAccountUpdate(status="online"))
    assert account.status == "online"
    assert account.last_login is not None


@pytest.mark.asyncio
async def test_foreign_account_is_forbidden(
    wechat_service: WeChatService, normal_user: User, other_user: User, admin_user: User
) -> None:
    account = await _new_account(wechat_service, normal_user)

    with pytest.raises(AppException) as exc_info:
        await wechat_service.get_account(account.id, other_user)
    assert exc_info.value.code == "system.forbidden"

    assert (await wechat_service.get_account(account.id, admin_user)).id == account.id

    with pytest.raises(AppException) as exc_info:
        await wechat_service.get_account(account.id + 100, normal_user)
    assert exc_info.value.code == "wechat.account_not_found"


@pytest.mark.asyncio
async def test_delete_account_removes_its_key(
    wechat_service: WeChatService, normal_user: User
) -> None:
    account = await _new_account(wechat_service, normal_user)
    auth_key = account.auth_key

    await wechat_service.delete_account(account)

    assert await wechat_service.repo.get_by_auth_key(auth_key) is None
    assert await wechat_service.key_repo.get_by_value(auth_key) is None


@pytest.mark.asyncio
async def test_delete_account_survives_key_cleanup_failure(
    wechat_service: WeChatService, normal_user: User, monkeypatch: pytest.MonkeyPatch
) -> None:
    account = await _new_account(wechat_service, normal_user)
    account_id, auth_key = account.id, account.auth_key

    async def lookup_failing(key_value: str) -> AuthKey | None:
        raise OperationalError("SELECT auth_keys", {}, Exception("database is locked"))

    monkeypatch.setattr(wechat_service.key_repo, "get_by_value", lookup_failing)
    warnings: list[str] = []
    sink_id = logger.add(warnings.append, level="WARNING", format="{message}")

    try:
        # 授权码清理失败只记录日志，不影响删除结果
        await wechat_service.delete_account(account)
    finally:
        logger.remove(sink_id)
    monkeypatch.undo()

    assert any("Auth key cleanup failed" in message for message in warnings)
    assert await wechat_service.repo.get(account_id) is None
    assert await wechat_service.key_repo.get_by_value(auth_key) is not None
