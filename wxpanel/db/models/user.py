"""
File: wxpanel/db/models/user.py
Description: 用户核心账号模型

继承自 IntModel，自动拥有：
1. 自增整数主键
2. created_at / updated_at (UTC)

约束：
- 用户名唯一且非空
- 角色限定在 admin / agent / user
- 邮箱唯一 (可为空)

Created: 2025-11-25
Updated: 2026-03-02 (Role based access)
"""

from enum import StrEnum

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from wxpanel.db.models.base import IntModel


class UserRole(StrEnum):
    """用户角色"""

    ADMIN = "admin"
    AGENT = "agent"
    USER = "user"


class User(IntModel):
    """
    用户模型 (账号域)
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "users"

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'agent', 'user')", name="role_valid"),
        CheckConstraint("length(hashed_password) > 0", name="password_not_empty"),
    )

    # 用户名：登录凭证，必填且唯一
    username: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, comment="用户名 (登录凭证)"
    )

    # 密码：存储 Argon2id 哈希值
    hashed_password: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="密码哈希值"
    )

    role: Mapped[str] = mapped_column(
        String(16), nullable=False, default=UserRole.USER.value, comment="角色"
    )

    email: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True, comment="用户邮箱"
    )

    phone: Mapped[str | None] = mapped_column(
        String(32), nullable=True, comment="联系电话"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
