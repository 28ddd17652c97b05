"""
File: wxpanel/domains/users/schemas.py
Description: 用户领域 Pydantic 模型 (Schema)

本模块定义了用户相关的输入/输出数据结构：
1. UserRead: 用户资料响应 (屏蔽密码哈希)
2. ProfileUpdate / PasswordChange: 本人资料与密码修改
3. AdminUserUpdate / RoleUpdate: 管理员维护用户
4. UserCount: 用户总数 (注册页使用)

规范：
- 严格遵循 Pydantic V2 写法 (ConfigDict)
- 角色取值由 UserRole 枚举校验，非法角色在写库前即被拒绝 (400)
- 响应模型开启 from_attributes=True 以支持 ORM 转换

Created: 2025-11-25
Updated: 2026-03-02 (Role based access)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from wxpanel.db.models.user import UserRole

# ------------------------------------------------------------------------------
# Input Schemas (输入模型)
# ------------------------------------------------------------------------------


class ProfileUpdate(BaseModel):
    """
    本人资料更新 (PUT 语义，仅更新传入的字段)。
    用户名与角色不可自行修改。
    """

    email: EmailStr | None = Field(default=None, description="邮箱 (唯一)")
    phone: str | None = Field(default=None, max_length=32, description="联系电话")


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1, description="当前密码")
    new_password: str = Field(..., min_length=6, max_length=128, description="新密码")


class AdminUserUpdate(BaseModel):
    """
    管理员更新用户信息。
    所有字段均为可选，仅更新传入的字段。
    """

    username: str | None = Field(default=None, min_length=3, max_length=50)
    email: EmailStr | None = Field(default=None)
    role: UserRole | None = Field(default=None, description="角色")
    phone: str | None = Field(default=None, max_length=32)


class RoleUpdate(BaseModel):
    role: UserRole = Field(..., description="新角色 (admin / agent / user)")


# ------------------------------------------------------------------------------
# Output Schemas (输出/响应模型)
# ------------------------------------------------------------------------------


class UserRead(BaseModel):
    """
    用户读取模型 (响应)。
    屏蔽了 hashed_password 字段。
    """

    id: int = Field(..., description="用户 ID")
    username: str = Field(..., description="用户名")
    role: UserRole = Field(..., description="角色")
    email: str | None = Field(default=None, description="邮箱")
    phone: str | None = Field(default=None, description="联系电话")
    created_at: datetime = Field(..., description="创建时间 (UTC)")

    # Pydantic V2 配置：允许从 ORM 对象读取数据
    model_config = ConfigDict(from_attributes=True)


class UserCount(BaseModel):
    count: int = Field(..., description="用户总数")
