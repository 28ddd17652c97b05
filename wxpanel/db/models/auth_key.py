"""
File: wxpanel/db/models/auth_key.py
Description: 授权码模型

授权码 (auth key) 是一个不透明令牌，代表对一个微信机器人账号槽位的限时使用权。
签发时 expires_at = created_at + days；延期时以当前时间为基准重新计算。
过期的授权码不会被自动删除，只通过 is_expired 反映。

Created: 2026-03-02
"""

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from wxpanel.db.models.base import CreatedAtMixin, IntIdBase, UTCDateTime, utcnow


class AuthKey(IntIdBase, CreatedAtMixin):
    """
    授权码模型
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "auth_keys"

    key_value: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, comment="授权码 (不透明令牌)"
    )

    owner_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
        comment="所属用户 ID",
    )

    days: Mapped[int] = mapped_column(
        Integer, nullable=False, default=30, comment="有效天数"
    )

    expires_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, comment="过期时间 (UTC)"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=text("1"),
        nullable=False,
        comment="是否启用",
    )

    @property
    def is_expired(self) -> bool:
        return self.expires_at < utcnow()
