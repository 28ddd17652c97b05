"""
File: wxpanel/domains/users/repository.py
Description: 用户领域仓储层 (Repository)

本模块负责用户数据的数据库访问，继承自通用 BaseRepository。
扩展功能：
1. get_by_username / get_by_email: 唯一字段查询
2. count_admins: 管理员数量 (最后一个管理员保护)
3. delete_cascade: 删除用户及其名下的设备、微信账号、授权码

Created: 2025-11-25
Updated: 2026-03-02
"""

from sqlalchemy import delete, func, or_, select

from wxpanel.db.models.auth_key import AuthKey
from wxpanel.db.models.device import Device
from wxpanel.db.models.user import User, UserRole
from wxpanel.db.models.wechat_account import WeChatAccount
from wxpanel.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """
    用户仓储类。
    继承了 BaseRepository 的 create/update/get/delete 方法。
    """

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> list[User]:
        """全部用户，按注册时间倒序。"""
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_admins(self) -> int:
        stmt = (
            select(func.count())
            .select_from(User)
            .where(User.role == UserRole.ADMIN.value)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def delete_cascade(self, user_id: int) -> None:
        """
        按依赖顺序删除：设备 → 微信账号 → 授权码 → 用户。

        设备与微信账号只要归属该用户、或绑定在该用户的授权码上，都会被删除。
        只 flush 不 commit，事务由 Service 层控制。
        """
        owned_keys = select(AuthKey.key_value).where(AuthKey.owner_user_id == user_id)

        await self.session.execute(
            delete(Device).where(
                or_(Device.owner_user_id == user_id, Device.auth_key.in_(owned_keys))
            )
        )
        await self.session.execute(
            delete(WeChatAccount).where(
                or_(
                    WeChatAccount.owner_user_id == user_id,
                    WeChatAccount.auth_key.in_(owned_keys),
                )
            )
        )
        await self.session.execute(delete(AuthKey).where(AuthKey.owner_user_id == user_id))
        await self.session.execute(delete(User).where(User.id == user_id))
        await self.session.flush()
