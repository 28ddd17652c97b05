"""
File: wxpanel/domains/auth/schemas.py
Description: 认证领域 Pydantic 模型 (Schema)

本模块定义了认证相关的输入/输出数据结构：
1. RegisterRequest / RegisterResult: 注册
2. LoginRequest / LoginResult: 用户名密码登录，返回 JWT 与用户摘要

Created: 2025-12-05
Updated: 2026-03-02
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from wxpanel.db.models.user import UserRole


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, description="用户名 (唯一)")
    password: str = Field(..., min_length=6, max_length=128, description="明文密码")
    email: EmailStr | None = Field(default=None, description="邮箱 (可选, 唯一)")
    role: UserRole | None = Field(
        default=None,
        description=(
            "角色 (可选，默认 user；首个注册用户按引导策略可能成为 admin)。"
            "传入 admin 会直接创建管理员账号"
        ),
    )


class RegisterResult(BaseModel):
    user_id: int = Field(..., description="新用户 ID")


class LoginRequest(BaseModel):
    """
    用户名密码登录请求参数。
    """

    username: str = Field(..., min_length=1, description="用户名")
    password: str = Field(..., min_length=1, description="用户密码")


class UserBrief(BaseModel):
    id: int
    username: str
    role: UserRole
    email: str | None = None

    model_config = ConfigDict(from_attributes=True)


class LoginResult(BaseModel):
    """
    登录成功响应结构。
    """

    token: str = Field(..., description="访问令牌 (JWT)")
    token_type: str = Field(default="bearer", description="令牌类型")
    expires_in: int = Field(..., description="令牌有效期 (秒)")
    user: UserBrief
