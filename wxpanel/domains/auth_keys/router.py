"""
File: wxpanel/domains/auth_keys/router.py
Description: 授权码领域 HTTP 路由层

1. router: GET /auth-keys (当前用户自己的授权码)
2. admin_router (挂载于 /admin): 签发、列表、删除、延期

Created: 2026-03-02
"""

from fastapi import APIRouter, Query, Request

from wxpanel.api.deps import AdminUser, CurrentUser
from wxpanel.core.response import ResponseModel
from wxpanel.domains.auth_keys.constants import AuthKeyMsg
from wxpanel.domains.auth_keys.dependencies import AuthKeyServiceDep
from wxpanel.domains.auth_keys.schemas import (
    AuthKeyRead,
    DelayKeyRequest,
    GenerateKeysRequest,
    GenerateKeysResult,
)
from wxpanel.domains.users.dependencies import UserServiceDep

router = APIRouter()
admin_router = APIRouter()


@router.get(
    "/auth-keys",
    response_model=ResponseModel[list[AuthKeyRead]],
    summary="我的授权码",
)
async def list_my_keys(
    request: Request, current_user: CurrentUser, service: AuthKeyServiceDep
) -> ResponseModel[list[AuthKeyRead]]:
    keys = await service.list_keys(owner_id=current_user.id)
    return ResponseModel.success(
        data=keys, request_id=getattr(request.state, "request_id", None)
    )


# ------------------------------------------------------------------------------
# Admin Endpoints (管理员接口)
# ------------------------------------------------------------------------------


@admin_router.post(
    "/gen-auth-key",
    response_model=ResponseModel[GenerateKeysResult],
    summary="批量生成授权码",
    description="count 取值 1-100，days 取值 1-3650。默认归属当前管理员。",
)
async def generate_keys(
    request: Request,
    gen_in: GenerateKeysRequest,
    admin: AdminUser,
    service: AuthKeyServiceDep,
    user_service: UserServiceDep,
) -> ResponseModel[GenerateKeysResult]:
    owner_id = admin.id
    if gen_in.owner_id is not None:
        owner_id = (await user_service.get(gen_in.owner_id)).id

    keys = await service.mint(owner_id, gen_in.count, gen_in.days)
    return ResponseModel.success(
        data=GenerateKeysResult(keys=keys, count=len(keys), days=gen_in.days),
        message=AuthKeyMsg.GENERATED,
        request_id=getattr(request.state, "request_id", None),
    )


@admin_router.get(
    "/auth-keys",
    response_model=ResponseModel[list[AuthKeyRead]],
    summary="授权码列表",
)
async def list_keys(
    request: Request,
    _admin: AdminUser,
    service: AuthKeyServiceDep,
    owner_id: int | None = Query(default=None, description="按归属用户过滤"),
) -> ResponseModel[list[AuthKeyRead]]:
    keys = await service.list_keys(owner_id=owner_id)
    return ResponseModel.success(
        data=keys, request_id=getattr(request.state, "request_id", None)
    )


@admin_router.delete(
    "/auth-key/{key}",
    response_model=ResponseModel[None],
    summary="删除授权码",
    description="仍绑定微信账号或设备的授权码不可删除 (auth_keys.in_use)。",
)
async def delete_key(
    request: Request, key: str, _admin: AdminUser, service: AuthKeyServiceDep
) -> ResponseModel[None]:
    await service.revoke(key)
    return ResponseModel.success(
        message=AuthKeyMsg.DELETED,
        request_id=getattr(request.state, "request_id", None),
    )


@admin_router.post(
    "/delay-auth-key",
    response_model=ResponseModel[AuthKeyRead],
    summary="授权码延期",
    description="新的过期时间 = 当前时间 + days。",
)
async def delay_key(
    request: Request,
    delay_in: DelayKeyRequest,
    _admin: AdminUser,
    service: AuthKeyServiceDep,
) -> ResponseModel[AuthKeyRead]:
    key = await service.delay(delay_in.key, delay_in.days)
    return ResponseModel.success(
        data=AuthKeyRead.from_row(key),
        message=AuthKeyMsg.DELAYED,
        request_id=getattr(request.state, "request_id", None),
    )
