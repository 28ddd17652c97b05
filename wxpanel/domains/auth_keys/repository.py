"""
File: wxpanel/domains/auth_keys/repository.py
Description: 授权码领域仓储层 (Repository)

扩展功能：
1. new_key: 生成不可猜测的令牌并写入 (expires_at = created_at + days)
2. get_by_value: 按令牌查询
3. list_with_owner: 关联所属用户名，按创建时间倒序
4. is_bound: 是否仍被微信账号或设备引用

Created: 2026-03-02
"""

import secrets
from datetime import timedelta

from sqlalchemy import exists, or_, select

from wxpanel.db.models.auth_key import AuthKey
from wxpanel.db.models.base import utcnow
from wxpanel.db.models.device import Device
from wxpanel.db.models.user import User
from wxpanel.db.models.wechat_account import WeChatAccount
from wxpanel.db.repositories.base import BaseRepository
from wxpanel.domains.auth_keys.constants import KEY_TOKEN_BYTES


class AuthKeyRepository(BaseRepository[AuthKey]):
    """授权码仓储类。"""

    async def new_key(self, owner_user_id: int, days: int) -> AuthKey:
        """写入一枚新授权码 (flush，不 commit)。"""
        created_at = utcnow()
        return await self.create(
            {
                "key_value": secrets.token_hex(KEY_TOKEN_BYTES),
                "owner_user_id": owner_user_id,
                "days": days,
                "created_at": created_at,
                "expires_at": created_at + timedelta(days=days),
            }
        )

    async def get_by_value(self, key_value: str) -> AuthKey | None:
        stmt = select(AuthKey).where(AuthKey.key_value == key_value)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_with_owner(
        self, owner_id: int | None = None
    ) -> list[tuple[AuthKey, str | None]]:
        stmt = (
            select(AuthKey, User.username)
            .outerjoin(User, AuthKey.owner_user_id == User.id)
            .order_by(AuthKey.created_at.desc(), AuthKey.id.desc())
        )
        if owner_id is not None:
            stmt = stmt.where(AuthKey.owner_user_id == owner_id)

        result = await self.session.execute(stmt)
        return [(key, owner_name) for key, owner_name in result.all()]

    async def is_bound(self, key_value: str) -> bool:
        stmt = select(
            or_(
                exists().where(WeChatAccount.auth_key == key_value),
                exists().where(Device.auth_key == key_value),
            )
        )
        result = await self.session.execute(stmt)
        return bool(result.scalar())
