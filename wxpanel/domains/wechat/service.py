"""
File: wxpanel/domains/wechat/service.py
Description: 微信账号领域服务 (生命周期编排)

本模块负责：
1. 账号增删改查与归属校验 (账号的 owner 始终从其授权码复制)
2. 创建或更新 (create_or_update)：按 auth_key 是否存在分流
3. 登录流程：二维码 -> 扫码 -> 确认 / 失败 -> 重试，以及唤醒登录
4. 每次状态变化都经过 lifecycle.next_status 校验

所有写操作在本层 commit。网关调用失败时不修改任何状态。

Created: 2026-03-02
"""

import uuid
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wxpanel.api.deps import ensure_owner
from wxpanel.core.exceptions import AppException
from wxpanel.db.models.base import utcnow
from wxpanel.db.models.user import User
from wxpanel.db.models.wechat_account import WeChatAccount
from wxpanel.domains.auth_keys.constants import AuthKeyError
from wxpanel.domains.auth_keys.repository import AuthKeyRepository
from wxpanel.domains.wechat.constants import (
    DEFAULT_NICKNAME,
    SIMULATED_DEVICE_KEY_PREFIX,
    WeChatError,
)
from wxpanel.domains.wechat.gateway import WeChatGatewayClient
from wxpanel.domains.wechat.lifecycle import AccountStatus, LifecycleEvent, next_status
from wxpanel.domains.wechat.repository import WeChatAccountRepository
from wxpanel.domains.wechat.schemas import (
    ConfirmRequest,
    WeChatAccountCreate,
    WeChatAccountRead,
    WeChatAccountUpdate,
)


class WeChatService:
    def __init__(
        self,
        repo: WeChatAccountRepository,
        key_repo: AuthKeyRepository,
        gateway: WeChatGatewayClient | None = None,
    ):
        self.repo = repo
        self.key_repo = key_repo
        self.gateway = gateway

    @property
    def session(self) -> AsyncSession:
        return self.repo.session

    # --------------------------------------------------------------------------
    # 查询
    # --------------------------------------------------------------------------

    async def list_accounts(self, owner_id: int | None = None) -> list[WeChatAccountRead]:
        rows = await self.repo.list_with_owner(owner_id)
        return [
            WeChatAccountRead.from_row(account, owner_name, days, expires_at)
            for account, owner_name, days, expires_at in rows
        ]

    async def get_account(self, account_id: int, requester: User) -> WeChatAccount:
        """按 ID 获取账号并校验归属 (管理员放行)。"""
        account = await self.repo.get(account_id)
        if not account:
            raise AppException(WeChatError.ACCOUNT_NOT_FOUND)
        ensure_owner(requester, account.owner_user_id)
        return account

    async def get_by_auth_key(self, auth_key: str, requester: User) -> WeChatAccount:
        account = await self.repo.get_by_auth_key(auth_key)
        if not account:
            raise AppException(WeChatError.ACCOUNT_NOT_FOUND)
        ensure_owner(requester, account.owner_user_id)
        return account

    # --------------------------------------------------------------------------
    # 创建 / 更新 / 删除
    # --------------------------------------------------------------------------

    async def create_or_update(
        self, requester: User, obj_in: WeChatAccountCreate
    ) -> tuple[WeChatAccount, bool]:
        """
        Returns:
            (account, created): created 为 True 表示新建
        """
        if not obj_in.auth_key:
            return await self._create_with_new_key(requester, obj_in), True

        key = await self.key_repo.get_by_value(obj_in.auth_key)
        if not key:
            raise AppException(AuthKeyError.NOT_FOUND)
        ensure_owner(requester, key.owner_user_id)

        fields = obj_in.model_dump(
            exclude_unset=True, exclude={"auth_key", "days", "status"}
        )
        status = obj_in.status or AccountStatus.ONLINE
        fields.update(
            status=status.value,
            owner_user_id=key.owner_user_id,
        )
        if status == AccountStatus.ONLINE:
            fields["last_login"] = utcnow()

        account = await self.repo.get_by_auth_key(key.key_value)
        if account:
            account = await self.repo.update(account, fields)
            created = False
        else:
            account = await self.repo.create({"auth_key": key.key_value, **fields})
            created = True
        await self.session.commit()

        logger.bind(
            account_id=account.id, auth_key=key.key_value, status=account.status
        ).info("WeChat account created" if created else "WeChat account updated")
        return account, created

    async def _create_with_new_key(
        self, requester: User, obj_in: WeChatAccountCreate
    ) -> WeChatAccount:
        key = await self.key_repo.new_key(requester.id, obj_in.days)
        account = await self.repo.create(
            {
                "auth_key": key.key_value,
                "nickname": obj_in.nickname or DEFAULT_NICKNAME,
                "username": obj_in.username,
                "avatar": obj_in.avatar,
                "device_auth_key": obj_in.device_auth_key,
                "status": AccountStatus.WAITING.value,
                "owner_user_id": key.owner_user_id,
            }
        )
        await self.session.commit()

        logger.bind(account_id=account.id, auth_key=key.key_value).info(
            "WeChat account created with new auth key"
        )
        return account

    async def update_account(
        self, account: WeChatAccount, obj_in: WeChatAccountUpdate
    ) -> WeChatAccount:
        """
        部分更新。携带 status 时仅允许从 online / offline 显式切换。
        """
        fields: dict[str, Any] = obj_in.model_dump(exclude_unset=True)
        requested = fields.pop("status", None)
        if not fields and requested is None:
            raise AppException(WeChatError.EMPTY_UPDATE)

        if requested is not None:
            new_status = next_status(
                account.status, LifecycleEvent.SET_STATUS, AccountStatus(requested)
            )
            fields["status"] = new_status.value
            if new_status == AccountStatus.ONLINE:
                fields["last_login"] = utcnow()

        previous = account.status
        account = await self.repo.update(account, fields)
        await self.session.commit()

        logger.bind(
            account_id=account.id, old_status=previous, new_status=account.status
        ).info("WeChat account updated")
        return account

    async def delete_account(self, account: WeChatAccount) -> None:
        """
        删除账号，然后尽力删除其授权码；授权码清理失败只记录日志。
        """
        account_id, auth_key = account.id, account.auth_key

        await self.session.delete(account)
        await self.session.commit()
        logger.bind(account_id=account_id, auth_key=auth_key).info(
            "WeChat account deleted"
        )

        try:
            key = await self.key_repo.get_by_value(auth_key)
            if key and not await self.key_repo.is_bound(auth_key):
                await self.session.delete(key)
                await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.opt(exception=exc).bind(auth_key=auth_key).warning(
                "Auth key cleanup failed"
            )

    # --------------------------------------------------------------------------
    # 登录流程 (状态机驱动)
    # --------------------------------------------------------------------------

    async def issue_qr_code(
        self, requester: User, auth_key: str, proxy: str = "", check: bool = False
    ) -> WeChatAccount:
        account = await self.get_by_auth_key(auth_key, requester)
        # 先校验状态，再访问网关
        new_status = next_status(account.status, LifecycleEvent.QR_ISSUED)

        resp = await self._gateway().request_qr_code(auth_key, check=check, proxy=proxy)
        data = resp.Data if isinstance(resp.Data, dict) else {}

        return await self._transition(
            account,
            new_status,
            qr_code_url=data.get("QrCodeUrl"),
        )

    async def login_status(self, requester: User, auth_key: str) -> dict[str, Any]:
        """网关登录状态透传，不修改本地状态。"""
        await self.get_by_auth_key(auth_key, requester)
        resp = await self._gateway().check_login_status(auth_key)
        return resp.model_dump()

    async def scan(self, requester: User, auth_key: str) -> WeChatAccount:
        account = await self.get_by_auth_key(auth_key, requester)
        return await self._transition(
            account, next_status(account.status, LifecycleEvent.SCAN)
        )

    async def confirm(
        self, requester: User, auth_key: str, obj_in: ConfirmRequest
    ) -> WeChatAccount:
        account = await self.get_by_auth_key(auth_key, requester)

        if not obj_in.success:
            return await self._transition(
                account,
                next_status(account.status, LifecycleEvent.CONFIRM_FAILURE),
                device_auth_key=None,
            )

        new_status = next_status(account.status, LifecycleEvent.CONFIRM_SUCCESS)
        profile = obj_in.model_dump(
            exclude_unset=True, exclude={"success", "device_auth_key"}
        )
        return await self._transition(
            account,
            new_status,
            device_auth_key=obj_in.device_auth_key
            or f"{SIMULATED_DEVICE_KEY_PREFIX}{uuid.uuid4().hex}",
            last_login=utcnow(),
            **profile,
        )

    async def retry(self, requester: User, auth_key: str) -> WeChatAccount:
        account = await self.get_by_auth_key(auth_key, requester)
        return await self._transition(
            account,
            next_status(account.status, LifecycleEvent.RETRY),
            qr_code_url=None,
        )

    async def wakeup(self, requester: User, auth_key: str) -> tuple[WeChatAccount, Any]:
        """
        唤醒登录。网关拒绝时抛出 GATEWAY_REJECTED，状态保持不变。
        """
        account = await self.get_by_auth_key(auth_key, requester)
        if not account.device_auth_key:
            raise AppException(WeChatError.NOT_BOUND)

        resp = await self._gateway().request_wakeup(account.device_auth_key)

        account = await self._transition(
            account,
            next_status(account.status, LifecycleEvent.WAKEUP_SUCCESS),
            last_login=utcnow(),
        )
        return account, resp.Data

    # --------------------------------------------------------------------------
    # 内部方法
    # --------------------------------------------------------------------------

    def _gateway(self) -> WeChatGatewayClient:
        if self.gateway is None:
            raise RuntimeError("WeChat gateway client is not configured")
        return self.gateway

    async def _transition(
        self, account: WeChatAccount, new_status: AccountStatus, **fields: Any
    ) -> WeChatAccount:
        previous = account.status
        account = await self.repo.update(account, {"status": new_status.value, **fields})
        await self.session.commit()

        logger.bind(
            account_id=account.id,
            auth_key=account.auth_key,
            old_status=previous,
            new_status=account.status,
        ).info("WeChat account status changed")
        return account
