"""
File: wxpanel/db/models/__init__.py
Description: ORM 模型注册表

导入所有业务模型与基类，供建表流程与 Alembic (env.py) 发现 metadata。
新增模型必须在此处导入。

Created: 2025-11-25
Updated: 2026-03-02
"""

from wxpanel.db.models.auth_key import AuthKey
from wxpanel.db.models.base import (
    Base,
    CreatedAtMixin,
    IntIdBase,
    IntModel,
    TimestampMixin,
    UTCDateTime,
)
from wxpanel.db.models.device import Device
from wxpanel.db.models.user import User, UserRole
from wxpanel.db.models.wechat_account import WeChatAccount

__all__ = [
    # 基类
    "Base",
    "IntIdBase",
    "IntModel",
    "CreatedAtMixin",
    "TimestampMixin",
    "UTCDateTime",
    # 业务模型
    "User",
    "UserRole",
    "AuthKey",
    "WeChatAccount",
    "Device",
]
