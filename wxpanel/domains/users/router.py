"""
File: wxpanel/domains/users/router.py
Description: 用户领域 HTTP 路由层

本模块定义两组路由：
1. router (无前缀): 本人资料 /user/*，公开的 /users/count
2. admin_router (挂载于 /admin): 管理员维护用户 /admin/users/*

所有响应使用统一信封 ResponseModel.success。

Created: 2025-12-05
Updated: 2026-03-02 (Admin user management)
"""

from fastapi import APIRouter, Request

from wxpanel.api.deps import AdminUser, CurrentUser
from wxpanel.core.response import ResponseModel
from wxpanel.domains.users.constants import UserMsg
from wxpanel.domains.users.dependencies import UserServiceDep
from wxpanel.domains.users.schemas import (
    AdminUserUpdate,
    PasswordChange,
    ProfileUpdate,
    RoleUpdate,
    UserCount,
    UserRead,
)

router = APIRouter()
admin_router = APIRouter()


# ------------------------------------------------------------------------------
# Public Endpoints (公开接口)
# ------------------------------------------------------------------------------


@router.get(
    "/users/count",
    response_model=ResponseModel[UserCount],
    summary="用户总数",
    description="返回已注册用户数量。注册页据此提示首个用户将成为管理员。无需登录。",
)
async def count_users(request: Request, service: UserServiceDep) -> ResponseModel[UserCount]:
    count = await service.count()
    return ResponseModel.success(
        data=UserCount(count=count),
        request_id=getattr(request.state, "request_id", None),
    )


# ------------------------------------------------------------------------------
# Protected Endpoints (受保护接口 - 需登录)
# ------------------------------------------------------------------------------


@router.get(
    "/user/profile",
    response_model=ResponseModel[UserRead],
    summary="获取我的个人资料",
)
async def read_profile(request: Request, current_user: CurrentUser) -> ResponseModel[UserRead]:
    # current_user 已经在 deps.py 中完成了鉴权与查库
    return ResponseModel.success(
        data=UserRead.model_validate(current_user),
        request_id=getattr(request.state, "request_id", None),
    )


@router.put(
    "/user/profile",
    response_model=ResponseModel[UserRead],
    summary="更新我的个人资料",
    description="可修改邮箱与联系电话。邮箱必须唯一。",
)
async def update_profile(
    request: Request,
    profile_in: ProfileUpdate,
    current_user: CurrentUser,
    service: UserServiceDep,
) -> ResponseModel[UserRead]:
    user = await service.update_profile(current_user, profile_in)
    return ResponseModel.success(
        data=UserRead.model_validate(user),
        message=UserMsg.PROFILE_UPDATED,
        request_id=getattr(request.state, "request_id", None),
    )


@router.put(
    "/user/password",
    response_model=ResponseModel[None],
    summary="修改我的密码",
    description="需提供当前密码。当前密码错误时返回 auth.password_error。",
)
async def change_password(
    request: Request,
    password_in: PasswordChange,
    current_user: CurrentUser,
    service: UserServiceDep,
) -> ResponseModel[None]:
    await service.change_password(current_user, password_in)
    return ResponseModel.success(
        message=UserMsg.PASSWORD_CHANGED,
        request_id=getattr(request.state, "request_id", None),
    )


# ------------------------------------------------------------------------------
# Admin Endpoints (管理员接口)
# ------------------------------------------------------------------------------


@admin_router.get(
    "/users",
    response_model=ResponseModel[list[UserRead]],
    summary="用户列表",
)
async def list_users(
    request: Request, _admin: AdminUser, service: UserServiceDep
) -> ResponseModel[list[UserRead]]:
    users = await service.list_users()
    return ResponseModel.success(
        data=[UserRead.model_validate(u) for u in users],
        request_id=getattr(request.state, "request_id", None),
    )


@admin_router.put(
    "/users/{user_id}",
    response_model=ResponseModel[UserRead],
    summary="更新用户信息",
)
async def update_user(
    request: Request,
    user_id: int,
    user_in: AdminUserUpdate,
    _admin: AdminUser,
    service: UserServiceDep,
) -> ResponseModel[UserRead]:
    user = await service.admin_update(user_id, user_in)
    return ResponseModel.success(
        data=UserRead.model_validate(user),
        message=UserMsg.USER_UPDATED,
        request_id=getattr(request.state, "request_id", None),
    )


@admin_router.put(
    "/users/{user_id}/role",
    response_model=ResponseModel[UserRead],
    summary="修改用户角色",
)
async def update_user_role(
    request: Request,
    user_id: int,
    role_in: RoleUpdate,
    _admin: AdminUser,
    service: UserServiceDep,
) -> ResponseModel[UserRead]:
    user = await service.change_role(user_id, role_in.role)
    return ResponseModel.success(
        data=UserRead.model_validate(user),
        message=UserMsg.ROLE_UPDATED,
        request_id=getattr(request.state, "request_id", None),
    )


@admin_router.delete(
    "/users/{user_id}",
    response_model=ResponseModel[None],
    summary="删除用户",
    description="级联删除该用户的设备、微信账号与授权码。不能删除最后一个管理员。",
)
async def delete_user(
    request: Request,
    user_id: int,
    _admin: AdminUser,
    service: UserServiceDep,
) -> ResponseModel[None]:
    await service.delete_user(user_id)
    return ResponseModel.success(
        message=UserMsg.USER_DELETED,
        request_id=getattr(request.state, "request_id", None),
    )
