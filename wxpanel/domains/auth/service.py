"""
File: wxpanel/domains/auth/service.py
Description: 认证领域服务 (Service)

本模块封装认证核心业务逻辑：
1. 注册: 唯一性校验、Argon2id 哈希、按管理员引导策略决定角色
2. 登录: 验证用户名与密码，签发 JWT (无状态，无 Refresh Token)

Created: 2025-12-05
Updated: 2026-03-02 (Username login + admin bootstrap policy)
"""

from loguru import logger

from wxpanel.core.config import settings
from wxpanel.core.exceptions import AppException
from wxpanel.core.security import (
    create_access_token,
    get_password_hash_async,
    verify_password_async,
)
from wxpanel.db.models.user import User, UserRole
from wxpanel.domains.auth.constants import AuthError
from wxpanel.domains.auth.schemas import (
    LoginRequest,
    LoginResult,
    RegisterRequest,
    UserBrief,
)
from wxpanel.domains.users.repository import UserRepository


class AuthService:
    """
    认证服务类。

    Args:
        user_repo: 复用 User 领域的 Repository
        bootstrap_policy: 管理员引导策略 (first_registrant / seed)
    """

    def __init__(self, user_repo: UserRepository, bootstrap_policy: str | None = None):
        self.user_repo = user_repo
        self.bootstrap_policy = bootstrap_policy or settings.ADMIN_BOOTSTRAP

    async def register(self, obj_in: RegisterRequest) -> User:
        """
        注册新用户。

        角色规则:
        - first_registrant 策略下，用户表为空时首个注册者成为 admin
        - 其余情况使用调用方传入的角色 (默认 user)
        """
        # 1. 唯一性校验 (Fail Fast)
        if await self.user_repo.get_by_username(obj_in.username):
            raise AppException(AuthError.USERNAME_EXIST)

        if obj_in.email and await self.user_repo.get_by_email(obj_in.email):
            raise AppException(AuthError.EMAIL_EXIST)

        # 2. 决定角色
        role = (obj_in.role or UserRole.USER).value
        if self.bootstrap_policy == "first_registrant" and await self.user_repo.count() == 0:
            role = UserRole.ADMIN.value

        # 3. 密码加密 (使用异步版本，避免阻塞事件循环)
        hashed_password = await get_password_hash_async(obj_in.password)

        user = await self.user_repo.create(
            {
                "username": obj_in.username,
                "hashed_password": hashed_password,
                "email": obj_in.email,
                "role": role,
            }
        )
        await self.user_repo.session.commit()

        logger.bind(user_id=user.id, username=user.username, role=role).info(
            "User registered"
        )
        return user

    async def login(self, login_data: LoginRequest) -> LoginResult:
        """
        用户登录流程。

        用户不存在与密码错误抛出同一个错误，响应完全一致，防止枚举攻击。
        """
        user = await self.user_repo.get_by_username(login_data.username)
        if not user:
            raise AppException(AuthError.INVALID_CREDENTIALS)

        if not await verify_password_async(login_data.password, user.hashed_password):
            raise AppException(AuthError.INVALID_CREDENTIALS)

        token = create_access_token(
            user_id=user.id, username=user.username, role=user.role
        )

        logger.bind(user_id=user.id).info("User logged in")

        return LoginResult(
            token=token,
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserBrief.model_validate(user),
        )
