"""
File: wxpanel/domains/wechat/repository.py
Description: 微信账号领域仓储层 (Repository)

Created: 2026-03-02
"""

from datetime import datetime

from sqlalchemy import select

from wxpanel.db.models.auth_key import AuthKey
from wxpanel.db.models.user import User
from wxpanel.db.models.wechat_account import WeChatAccount
from wxpanel.db.repositories.base import BaseRepository

AccountRow = tuple[WeChatAccount, str | None, int | None, datetime | None]


class WeChatAccountRepository(BaseRepository[WeChatAccount]):
    async def get_by_auth_key(self, auth_key: str) -> WeChatAccount | None:
        stmt = select(WeChatAccount).where(WeChatAccount.auth_key == auth_key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_with_owner(self, owner_id: int | None = None) -> list[AccountRow]:
        """
        关联所属用户名与授权码有效期，按创建时间倒序。
        """
        stmt = (
            select(WeChatAccount, User.username, AuthKey.days, AuthKey.expires_at)
            .outerjoin(AuthKey, WeChatAccount.auth_key == AuthKey.key_value)
            .outerjoin(User, WeChatAccount.owner_user_id == User.id)
            .order_by(WeChatAccount.created_at.desc(), WeChatAccount.id.desc())
        )
        if owner_id is not None:
            stmt = stmt.where(WeChatAccount.owner_user_id == owner_id)

        result = await self.session.execute(stmt)
        return [tuple(row) for row in result.all()]  # type: ignore[misc]
