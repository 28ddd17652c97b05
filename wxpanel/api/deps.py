"""
File: wxpanel/api/deps.py
Description: 全局依赖注入定义 (DB Session + Authentication + Gateway)

本模块负责：
1. 数据库会话管理 (get_db / DBSession)：会话来自 app.state.database
2. JWT 鉴权与用户身份提取 (get_current_user / CurrentUser)
3. 角色控制 (require_roles / AdminUser) 与归属校验 (ensure_owner)
4. 微信网关客户端注入 (get_gateway / GatewayDep)

Created: 2025-12-05
Updated: 2026-03-02 (Role gate + explicit database handle)
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Header, Request
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from wxpanel.core.error_code import SystemErrorCode
from wxpanel.core.exceptions import AppException
from wxpanel.core.security import ACCESS_TOKEN_TYPE, decode_access_token
from wxpanel.db.models.user import User, UserRole
from wxpanel.db.session import Database
from wxpanel.domains.wechat.gateway import WeChatGatewayClient

# ------------------------------------------------------------------------------
# 1. Database Dependencies
# ------------------------------------------------------------------------------


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    获取异步数据库会话依赖。
    数据库句柄由 lifespan 创建并挂载在 app.state.database。
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        yield session


# 数据库会话依赖类型别名
DBSession = Annotated[AsyncSession, Depends(get_db)]


# ------------------------------------------------------------------------------
# 2. Authentication Dependencies (JWT 鉴权)
# ------------------------------------------------------------------------------


async def get_token_from_header(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """
    从 Authorization Header 提取 Bearer Token。
    格式要求: Authorization: Bearer <token>
    """
    if not authorization:
        raise AppException(
            SystemErrorCode.UNAUTHORIZED, message="Missing Authorization Header"
        )

    scheme, _, param = authorization.partition(" ")
    if scheme.lower() != "bearer" or not param:
        raise AppException(
            SystemErrorCode.UNAUTHORIZED, message="Invalid Authentication Scheme"
        )

    return param


async def get_current_user(
    token: Annotated[str, Depends(get_token_from_header)],
    session: DBSession,
) -> User:
    """
    解析 JWT 并获取当前登录用户。

    流程:
    1. 校验 JWT 签名与有效期
    2. 提取 sub (user_id)
    3. 查库确认用户仍然存在
    """
    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise AppException(SystemErrorCode.TOKEN_EXPIRED) from None
    except JWTError:
        # from None 截断异常链，避免暴露底层 jose 异常细节
        raise AppException(
            SystemErrorCode.UNAUTHORIZED, message="Invalid Token"
        ) from None

    sub = payload.get("sub")
    if payload.get("type") != ACCESS_TOKEN_TYPE or not sub or not str(sub).isdigit():
        raise AppException(SystemErrorCode.UNAUTHORIZED, message="Invalid Token")

    # 令牌未过期，但用户可能已被管理员删除
    user = await session.get(User, int(sub))
    if not user:
        raise AppException(SystemErrorCode.UNAUTHORIZED, message="User not found")

    return user


# 已登录用户依赖
# 用法: async def endpoint(user: CurrentUser): ...
CurrentUser = Annotated[User, Depends(get_current_user)]


# ------------------------------------------------------------------------------
# 3. Permission Dependencies (权限控制)
# ------------------------------------------------------------------------------


def require_roles(*roles: str) -> Callable[[User], Awaitable[User]]:
    """
    角色校验依赖工厂。

    用法:
        AgentOrAdmin = Annotated[User, Depends(require_roles("admin", "agent"))]
    """
    allowed = set(roles)

    async def _check_role(current_user: CurrentUser) -> User:
        if current_user.role not in allowed:
            raise AppException(SystemErrorCode.FORBIDDEN)
        return current_user

    return _check_role


# 管理员依赖
AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]


def ensure_owner(requester: User, owner_id: int) -> None:
    """资源归属校验：本人或管理员放行。"""
    if requester.is_admin or requester.id == owner_id:
        return
    raise AppException(SystemErrorCode.FORBIDDEN)


# ------------------------------------------------------------------------------
# 4. External Clients
# ------------------------------------------------------------------------------


async def get_gateway(request: Request) -> WeChatGatewayClient:
    """获取应用级微信网关客户端 (lifespan 中创建)。"""
    return request.app.state.gateway


GatewayDep = Annotated[WeChatGatewayClient, Depends(get_gateway)]
