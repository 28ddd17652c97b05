"""
File: wxpanel/domains/users/service.py
Description: 用户领域服务 (业务逻辑层)

本模块封装用户管理的核心业务逻辑：
1. 个人资料：查询、更新 (邮箱唯一性校验)、修改密码
2. 管理员维护：列表、更新、改角色、删除 (级联 + 最后一个管理员保护)
3. 种子管理员：ADMIN_BOOTSTRAP=seed 时在启动阶段写入

注意：
- 所有数据库写操作的事务提交 (Commit) 由本层负责。
- 密码哈希使用异步版本函数，避免阻塞事件循环。

Created: 2025-11-25
Updated: 2026-03-02 (Admin management + cascade delete)
"""

from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from wxpanel.core.exceptions import AppException
from wxpanel.core.security import get_password_hash_async, verify_password_async
from wxpanel.db.models.user import User, UserRole
from wxpanel.domains.auth.constants import AuthError
from wxpanel.domains.users.constants import UserError
from wxpanel.domains.users.repository import UserRepository
from wxpanel.domains.users.schemas import (
    AdminUserUpdate,
    PasswordChange,
    ProfileUpdate,
)


class UserService:
    """
    用户领域服务。

    职责：
    - 编排业务流程
    - 执行业务规则校验 (唯一性、最后一个管理员)
    - 调用 Repository 进行数据持久化
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # --------------------------------------------------------------------------
    # 查询
    # --------------------------------------------------------------------------

    async def get(self, user_id: int) -> User:
        """获取用户详情，不存在时抛出 UserError.NOT_FOUND。"""
        user = await self.repo.get(user_id)
        if not user:
            raise AppException(UserError.NOT_FOUND)
        return user

    async def count(self) -> int:
        return await self.repo.count()

    async def list_users(self) -> list[User]:
        return await self.repo.list_all()

    # --------------------------------------------------------------------------
    # 本人操作
    # --------------------------------------------------------------------------

    async def update_profile(self, user: User, obj_in: ProfileUpdate) -> User:
        update_data = obj_in.model_dump(exclude_unset=True)
        await self._check_unique(user, update_data)

        updated = await self.repo.update(user, update_data)
        await self.repo.session.commit()

        logger.bind(user_id=user.id).info("User profile updated")
        return updated

    async def change_password(self, user: User, obj_in: PasswordChange) -> None:
        """
        修改密码：必须先校验当前密码。
        """
        if not await verify_password_async(obj_in.current_password, user.hashed_password):
            raise AppException(AuthError.PASSWORD_ERROR)

        user.hashed_password = await get_password_hash_async(obj_in.new_password)
        self.repo.session.add(user)
        await self.repo.session.commit()

        logger.bind(user_id=user.id).info("User password changed")

    # --------------------------------------------------------------------------
    # 管理员操作
    # --------------------------------------------------------------------------

    async def admin_update(self, user_id: int, obj_in: AdminUserUpdate) -> User:
        user = await self.get(user_id)
        update_data = obj_in.model_dump(exclude_unset=True)

        # 显式传 null 的必填字段忽略
        for field in ("username", "role"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)

        await self._check_unique(user, update_data)

        if "role" in update_data:
            update_data["role"] = UserRole(update_data["role"]).value
            await self._guard_last_admin(user, new_role=update_data["role"])

        updated = await self.repo.update(user, update_data)
        await self.repo.session.commit()

        logger.bind(user_id=user_id, fields=sorted(update_data)).info(
            "User updated by admin"
        )
        return updated

    async def change_role(self, user_id: int, role: UserRole) -> User:
        user = await self.get(user_id)
        await self._guard_last_admin(user, new_role=role.value)

        previous = user.role
        updated = await self.repo.update(user, {"role": role.value})
        await self.repo.session.commit()

        logger.bind(user_id=user_id, old_role=previous, new_role=role.value).info(
            "User role changed"
        )
        return updated

    async def delete_user(self, user_id: int) -> None:
        """
        删除用户 (级联删除设备、微信账号、授权码)。
        整个过程在同一事务中完成，任何一步失败都会回滚。
        """
        user = await self.get(user_id)
        await self._guard_last_admin(user, new_role=None)

        try:
            await self.repo.delete_cascade(user_id)
            await self.repo.session.commit()
        except SQLAlchemyError:
            await self.repo.session.rollback()
            logger.bind(user_id=user_id).error("User cascade delete rolled back")
            raise

        logger.bind(user_id=user_id, username=user.username).info("User deleted")

    async def seed_admin(self, username: str, password: str, email: str | None) -> bool:
        """
        写入种子管理员 (用户名已存在则跳过)。

        Returns:
            bool: 本次是否新建了管理员
        """
        if await self.repo.get_by_username(username):
            return False

        hashed_password = await get_password_hash_async(password)
        email_value = email if email and not await self.repo.get_by_email(email) else None
        await self.repo.create(
            {
                "username": username,
                "hashed_password": hashed_password,
                "role": UserRole.ADMIN.value,
                "email": email_value,
            }
        )
        await self.repo.session.commit()

        logger.bind(username=username).info("Seed admin created")
        return True

    # --------------------------------------------------------------------------
    # 内部校验
    # --------------------------------------------------------------------------

    async def _check_unique(self, user: User, update_data: dict[str, Any]) -> None:
        username = update_data.get("username")
        if username and username != user.username:
            existing = await self.repo.get_by_username(username)
            if existing and existing.id != user.id:
                raise AppException(UserError.USERNAME_TAKEN)

        email = update_data.get("email")
        if email and email != user.email:
            existing = await self.repo.get_by_email(email)
            if existing and existing.id != user.id:
                raise AppException(UserError.EMAIL_TAKEN)

    async def _guard_last_admin(self, user: User, new_role: str | None) -> None:
        """
        管理员被删除 (new_role=None) 或降级时，确认系统中仍有其他管理员。
        """
        if not user.is_admin or new_role == UserRole.ADMIN.value:
            return
        if await self.repo.count_admins() <= 1:
            raise AppException(UserError.LAST_ADMIN)
