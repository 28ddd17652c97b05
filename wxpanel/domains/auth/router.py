"""
File: wxpanel/domains/auth/router.py
Description: 认证领域 HTTP 路由层

本模块定义认证相关的 API 端点：
1. POST /register: 注册 (201，返回 user_id)
2. POST /login: 登录 (返回 JWT 与用户摘要)

Created: 2025-12-05
Updated: 2026-03-02 (Username/password + bootstrap policy)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from wxpanel.api.deps import DBSession
from wxpanel.core.response import ResponseModel
from wxpanel.db.models.user import User
from wxpanel.domains.auth.constants import AuthMsg
from wxpanel.domains.auth.schemas import (
    LoginRequest,
    LoginResult,
    RegisterRequest,
    RegisterResult,
)
from wxpanel.domains.auth.service import AuthService
from wxpanel.domains.users.repository import UserRepository

router = APIRouter()

# ------------------------------------------------------------------------------
# 依赖注入构造器 (Dependencies)
# ------------------------------------------------------------------------------


async def get_auth_service(session: DBSession) -> AuthService:
    """
    构造 AuthService 实例 (复用 User 领域的 Repository)。
    """
    user_repo = UserRepository(model=User, session=session)
    return AuthService(user_repo=user_repo)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


# ------------------------------------------------------------------------------
# Endpoints (路由定义)
# ------------------------------------------------------------------------------


@router.post(
    "/register",
    response_model=ResponseModel[RegisterResult],
    status_code=status.HTTP_201_CREATED,
    summary="注册新用户",
    description=(
        "用户名与邮箱必须唯一。无需登录。"
        "请求体中的 role 会被原样采纳 (包括 admin)，与原有注册页的行为一致；"
        "对外部署时应在网关层限制该接口。"
    ),
)
async def register(
    request: Request,
    register_data: RegisterRequest,
    service: AuthServiceDep,
) -> ResponseModel[RegisterResult]:
    """
    注册接口有意接受调用方指定的角色 (含 admin)。
    这是公开接口上的提权通道，属于已知取舍，见 AuthService.register。
    """
    user = await service.register(register_data)
    return ResponseModel.success(
        data=RegisterResult(user_id=user.id),
        message=AuthMsg.REGISTER_SUCCESS,
        request_id=getattr(request.state, "request_id", None),
    )


@router.post(
    "/login",
    response_model=ResponseModel[LoginResult],
    summary="用户登录",
    description="使用用户名密码登录，成功后返回 Access Token (JWT)。",
)
async def login(
    request: Request,
    login_data: LoginRequest,
    service: AuthServiceDep,
) -> ResponseModel[LoginResult]:
    result = await service.login(login_data)
    return ResponseModel.success(
        data=result,
        message=AuthMsg.LOGIN_SUCCESS,
        request_id=getattr(request.state, "request_id", None),
    )
