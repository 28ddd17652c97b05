"""
File: wxpanel/db/models/wechat_account.py
Description: 微信机器人账号模型 (会话生命周期)

每个授权码至多对应一个微信账号 (auth_key 唯一)。
owner_user_id 始终与授权码的所属用户一致，由服务层在写入时保证。
status 的合法取值与迁移规则见 wxpanel/domains/wechat/lifecycle.py。

Created: 2026-03-02
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from wxpanel.db.models.base import IntModel, UTCDateTime


class WeChatAccount(IntModel):
    """
    微信账号模型
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "wechat_accounts"

    __table_args__ = (
        CheckConstraint(
            "status IN ('waiting', 'scanning', 'scanned_confirming', "
            "'online', 'offline', 'failed')",
            name="status_valid",
        ),
    )

    auth_key: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("auth_keys.key_value"),
        unique=True,
        nullable=False,
        comment="授权码",
    )

    # 网关在登录确认后下发，用于唤醒登录
    device_auth_key: Mapped[str | None] = mapped_column(
        String(128), nullable=True, comment="设备绑定密钥"
    )

    nickname: Mapped[str | None] = mapped_column(
        String(100), nullable=True, comment="微信昵称"
    )

    username: Mapped[str | None] = mapped_column(
        String(100), nullable=True, comment="微信号 (wxid)"
    )

    avatar: Mapped[str | None] = mapped_column(Text, nullable=True, comment="头像URL")

    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="waiting", comment="会话状态"
    )

    last_login: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True, comment="最近登录时间 (UTC)"
    )

    qr_code_url: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="登录二维码地址"
    )

    owner_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
        comment="所属用户 ID",
    )
