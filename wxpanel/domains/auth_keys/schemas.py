"""
File: wxpanel/domains/auth_keys/schemas.py
Description: 授权码领域 Pydantic 模型 (Schema)

1. GenerateKeysRequest / GenerateKeysResult: 批量签发
2. DelayKeyRequest: 延期 (以当前时间为基准)
3. AuthKeyRead: 列表项 (含所属用户名与派生的 is_expired)

Created: 2026-03-02
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from wxpanel.db.models.auth_key import AuthKey
from wxpanel.domains.auth_keys.constants import DEFAULT_KEY_DAYS, MAX_KEY_COUNT, MAX_KEY_DAYS


class GenerateKeysRequest(BaseModel):
    count: int = Field(default=1, ge=1, le=MAX_KEY_COUNT, description="生成数量")
    days: int = Field(
        default=DEFAULT_KEY_DAYS, ge=1, le=MAX_KEY_DAYS, description="有效天数"
    )
    owner_id: int | None = Field(
        default=None, description="归属用户 ID (缺省为当前管理员)"
    )


class GenerateKeysResult(BaseModel):
    keys: list[str]
    count: int
    days: int


class DelayKeyRequest(BaseModel):
    key: str = Field(..., min_length=1, description="授权码")
    days: int = Field(..., ge=1, le=MAX_KEY_DAYS, description="新的有效天数 (从现在起算)")


class AuthKeyRead(BaseModel):
    id: int
    key_value: str
    owner_user_id: int
    owner_name: str | None = Field(default=None, description="所属用户名")
    days: int
    created_at: datetime
    expires_at: datetime
    is_active: bool
    is_expired: bool

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_row(cls, key: AuthKey, owner_name: str | None = None) -> "AuthKeyRead":
        return cls.model_validate(key).model_copy(update={"owner_name": owner_name})
