"""
File: wxpanel/domains/wechat/schemas.py
Description: 微信账号领域 Pydantic 模型 (Schema)

本模块定义了微信账号相关的输入/输出数据结构：
1. WeChatAccountCreate: 创建或更新 (按 auth_key 是否存在分流)
2. WeChatAccountUpdate: 部分字段更新 / 显式设置状态
3. QrLoginRequest / ConfirmRequest / WakeupRequest: 登录流程操作
4. WeChatAccountRead: 账号响应 (可附带所属用户名与授权码有效期)

Created: 2026-03-02
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wxpanel.db.models.wechat_account import WeChatAccount
from wxpanel.domains.auth_keys.constants import DEFAULT_KEY_DAYS, MAX_KEY_DAYS
from wxpanel.domains.wechat.lifecycle import AccountStatus

# ------------------------------------------------------------------------------
# Input Schemas (输入模型)
# ------------------------------------------------------------------------------


class WeChatAccountCreate(BaseModel):
    """
    创建或更新微信账号。

    - 提供 auth_key 且账号已存在: 原地更新 (status 默认 online)
    - 提供 auth_key 且授权码存在但无账号: 新建 (status 默认 online)
    - 不提供 auth_key: 自动签发授权码并新建 waiting 状态账号
    """

    auth_key: str | None = Field(default=None, description="已有授权码 (可选)")
    nickname: str | None = Field(default=None, max_length=100)
    username: str | None = Field(default=None, max_length=100, description="微信号")
    avatar: str | None = Field(default=None)
    status: AccountStatus | None = Field(default=None)
    device_auth_key: str | None = Field(default=None, max_length=128)
    days: int = Field(
        default=DEFAULT_KEY_DAYS,
        ge=1,
        le=MAX_KEY_DAYS,
        description="自动签发授权码时的有效天数",
    )


class WeChatAccountUpdate(BaseModel):
    """
    部分字段更新。
    携带 status 时走状态机 (仅 online / offline 可显式改状态)。
    """

    status: AccountStatus | None = Field(default=None)
    nickname: str | None = Field(default=None, max_length=100)
    username: str | None = Field(default=None, max_length=100)
    avatar: str | None = Field(default=None)
    qr_code_url: str | None = Field(default=None)


class QrLoginRequest(BaseModel):
    auth_key: str = Field(..., min_length=1)
    proxy: str = Field(default="", description="网关使用的代理地址")
    check: bool = Field(default=False)


class ConfirmRequest(BaseModel):
    success: bool = Field(..., description="用户是否在手机上确认登录")
    device_auth_key: str | None = Field(default=None, max_length=128)
    nickname: str | None = Field(default=None, max_length=100)
    username: str | None = Field(default=None, max_length=100)
    avatar: str | None = Field(default=None)


class WakeupRequest(BaseModel):
    auth_key: str = Field(..., min_length=1)


# ------------------------------------------------------------------------------
# Output Schemas (输出/响应模型)
# ------------------------------------------------------------------------------


class WeChatAccountRead(BaseModel):
    id: int
    auth_key: str
    device_auth_key: str | None = None
    nickname: str | None = None
    username: str | None = None
    avatar: str | None = None
    status: AccountStatus
    last_login: datetime | None = None
    qr_code_url: str | None = None
    owner_user_id: int
    owner_name: str | None = Field(default=None, description="所属用户名")
    days: int | None = Field(default=None, description="授权码有效天数")
    expires_at: datetime | None = Field(default=None, description="授权码过期时间")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_row(
        cls,
        account: WeChatAccount,
        owner_name: str | None = None,
        days: int | None = None,
        expires_at: datetime | None = None,
    ) -> "WeChatAccountRead":
        return cls.model_validate(account).model_copy(
            update={"owner_name": owner_name, "days": days, "expires_at": expires_at}
        )


class QrLoginResult(BaseModel):
    qr_code_url: str | None = None
    account: WeChatAccountRead


class WakeupResult(BaseModel):
    success: bool
    data: Any = Field(default=None, description="网关返回的 Data")
