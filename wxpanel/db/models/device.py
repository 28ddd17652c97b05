"""
File: wxpanel/db/models/device.py
Description: 设备模型 (报表用旁路表)

以设备视角记录授权码的使用情况，不与微信账号生命周期同步。

Created: 2026-03-02
"""

from datetime import datetime

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from wxpanel.db.models.base import CreatedAtMixin, IntIdBase, UTCDateTime


class Device(IntIdBase, CreatedAtMixin):
    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "devices"

    device_name: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="设备名称"
    )

    auth_key: Mapped[str] = mapped_column(
        String(64), ForeignKey("auth_keys.key_value"), nullable=False, comment="授权码"
    )

    owner_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
        comment="所属用户 ID",
    )

    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="offline", comment="设备状态"
    )

    last_login: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True, comment="最近登录时间 (UTC)"
    )
