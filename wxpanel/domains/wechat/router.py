"""
File: wxpanel/domains/wechat/router.py
Description: 微信账号领域 HTTP 路由层

1. router (无前缀):
   - /wechat-accounts/*: 本人账号增删改查 (管理员可访问任意账号)
   - /wechat/*: 登录流程 (二维码、状态轮询、扫码、确认、重试、唤醒)
2. admin_router (挂载于 /admin): /admin/wechat-accounts/* 全量管理

Created: 2026-03-02
"""

from typing import Any

from fastapi import APIRouter, Request

from wxpanel.api.deps import AdminUser, CurrentUser
from wxpanel.core.response import ResponseModel
from wxpanel.domains.wechat.constants import WeChatMsg
from wxpanel.domains.wechat.dependencies import WeChatServiceDep
from wxpanel.domains.wechat.schemas import (
    ConfirmRequest,
    QrLoginRequest,
    QrLoginResult,
    WakeupRequest,
    WakeupResult,
    WeChatAccountCreate,
    WeChatAccountRead,
    WeChatAccountUpdate,
)

router = APIRouter()
admin_router = APIRouter()


def _req_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


# ------------------------------------------------------------------------------
# 账号管理 (本人)
# ------------------------------------------------------------------------------


@router.get(
    "/wechat-accounts",
    response_model=ResponseModel[list[WeChatAccountRead]],
    summary="我的微信账号",
)
async def list_my_accounts(
    request: Request, current_user: CurrentUser, service: WeChatServiceDep
) -> ResponseModel[list[WeChatAccountRead]]:
    accounts = await service.list_accounts(owner_id=current_user.id)
    return ResponseModel.success(data=accounts, request_id=_req_id(request))


@router.post(
    "/wechat-accounts",
    response_model=ResponseModel[WeChatAccountRead],
    summary="创建或更新微信账号",
    description="提供已有 auth_key 时更新或绑定该授权码；不提供时自动签发授权码并创建 waiting 状态账号。",
)
async def create_account(
    request: Request,
    account_in: WeChatAccountCreate,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[WeChatAccountRead]:
    account, created = await service.create_or_update(current_user, account_in)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account),
        message=WeChatMsg.ACCOUNT_CREATED if created else WeChatMsg.ACCOUNT_UPDATED,
        request_id=_req_id(request),
    )


@router.get(
    "/wechat-accounts/{account_id}",
    response_model=ResponseModel[WeChatAccountRead],
    summary="微信账号详情",
)
async def read_account(
    request: Request,
    account_id: int,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[WeChatAccountRead]:
    account = await service.get_account(account_id, current_user)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account), request_id=_req_id(request)
    )


@router.put(
    "/wechat-accounts/{account_id}",
    response_model=ResponseModel[WeChatAccountRead],
    summary="更新微信账号",
)
async def update_account(
    request: Request,
    account_id: int,
    account_in: WeChatAccountUpdate,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[WeChatAccountRead]:
    account = await service.get_account(account_id, current_user)
    account = await service.update_account(account, account_in)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account),
        message=WeChatMsg.ACCOUNT_UPDATED,
        request_id=_req_id(request),
    )


@router.put(
    "/wechat-accounts/{account_id}/status",
    response_model=ResponseModel[WeChatAccountRead],
    summary="更新微信账号状态",
    description="仅 online / offline 状态的账号可显式切换状态；不带 status 时为普通字段更新。",
)
async def update_account_status(
    request: Request,
    account_id: int,
    status_in: WeChatAccountUpdate,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[WeChatAccountRead]:
    account = await service.get_account(account_id, current_user)
    account = await service.update_account(account, status_in)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account),
        message=WeChatMsg.STATUS_UPDATED,
        request_id=_req_id(request),
    )


@router.delete(
    "/wechat-accounts/{account_id}",
    response_model=ResponseModel[None],
    summary="删除微信账号",
)
async def delete_account(
    request: Request,
    account_id: int,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[None]:
    account = await service.get_account(account_id, current_user)
    await service.delete_account(account)
    return ResponseModel.success(
        message=WeChatMsg.ACCOUNT_DELETED, request_id=_req_id(request)
    )


# ------------------------------------------------------------------------------
# 登录流程
# ------------------------------------------------------------------------------


@router.post(
    "/wechat/qr-login",
    response_model=ResponseModel[QrLoginResult],
    summary="获取登录二维码",
)
async def qr_login(
    request: Request,
    qr_in: QrLoginRequest,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[QrLoginResult]:
    account = await service.issue_qr_code(
        current_user, qr_in.auth_key, proxy=qr_in.proxy, check=qr_in.check
    )
    return ResponseModel.success(
        data=QrLoginResult(
            qr_code_url=account.qr_code_url,
            account=WeChatAccountRead.model_validate(account),
        ),
        message=WeChatMsg.QR_ISSUED,
        request_id=_req_id(request),
    )


@router.get(
    "/wechat/login-status/{auth_key}",
    response_model=ResponseModel[dict[str, Any]],
    summary="查询登录状态",
    description="原样返回网关的登录状态 (Data.state: 0 等待 / 1 已扫码 / 2 已确认 / 3 失败)。",
)
async def login_status(
    request: Request,
    auth_key: str,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[dict[str, Any]]:
    payload = await service.login_status(current_user, auth_key)
    return ResponseModel.success(data=payload, request_id=_req_id(request))


@router.post(
    "/wechat/scan/{auth_key}",
    response_model=ResponseModel[WeChatAccountRead],
    summary="标记已扫码",
)
async def scan(
    request: Request,
    auth_key: str,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[WeChatAccountRead]:
    account = await service.scan(current_user, auth_key)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account),
        message=WeChatMsg.SCANNED,
        request_id=_req_id(request),
    )


@router.post(
    "/wechat/confirm/{auth_key}",
    response_model=ResponseModel[WeChatAccountRead],
    summary="确认登录结果",
)
async def confirm(
    request: Request,
    auth_key: str,
    confirm_in: ConfirmRequest,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[WeChatAccountRead]:
    account = await service.confirm(current_user, auth_key, confirm_in)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account),
        message=WeChatMsg.CONFIRMED,
        request_id=_req_id(request),
    )


@router.post(
    "/wechat/retry/{auth_key}",
    response_model=ResponseModel[WeChatAccountRead],
    summary="重新登录",
    description="failed / offline 状态的账号回到 waiting，清空二维码。",
)
async def retry(
    request: Request,
    auth_key: str,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[WeChatAccountRead]:
    account = await service.retry(current_user, auth_key)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account),
        message=WeChatMsg.RETRY,
        request_id=_req_id(request),
    )


@router.post(
    "/wechat/wakeup-login",
    response_model=ResponseModel[WakeupResult],
    summary="唤醒登录",
    description="使用已绑定的设备密钥唤醒登录。未绑定返回 wechat.not_bound。",
)
async def wakeup_login(
    request: Request,
    wakeup_in: WakeupRequest,
    current_user: CurrentUser,
    service: WeChatServiceDep,
) -> ResponseModel[WakeupResult]:
    _, data = await service.wakeup(current_user, wakeup_in.auth_key)
    return ResponseModel.success(
        data=WakeupResult(success=True, data=data),
        message=WeChatMsg.WAKEUP_SUCCESS,
        request_id=_req_id(request),
    )


# ------------------------------------------------------------------------------
# Admin Endpoints (管理员接口)
# ------------------------------------------------------------------------------


@admin_router.get(
    "/wechat-accounts",
    response_model=ResponseModel[list[WeChatAccountRead]],
    summary="全部微信账号",
)
async def admin_list_accounts(
    request: Request, _admin: AdminUser, service: WeChatServiceDep
) -> ResponseModel[list[WeChatAccountRead]]:
    accounts = await service.list_accounts()
    return ResponseModel.success(data=accounts, request_id=_req_id(request))


@admin_router.post(
    "/wechat-accounts",
    response_model=ResponseModel[WeChatAccountRead],
    summary="创建或更新微信账号 (管理员)",
)
async def admin_create_account(
    request: Request,
    account_in: WeChatAccountCreate,
    admin: AdminUser,
    service: WeChatServiceDep,
) -> ResponseModel[WeChatAccountRead]:
    account, created = await service.create_or_update(admin, account_in)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account),
        message=WeChatMsg.ACCOUNT_CREATED if created else WeChatMsg.ACCOUNT_UPDATED,
        request_id=_req_id(request),
    )


@admin_router.get(
    "/wechat-accounts/{account_id}",
    response_model=ResponseModel[WeChatAccountRead],
    summary="微信账号详情 (管理员)",
)
async def admin_read_account(
    request: Request, account_id: int, admin: AdminUser, service: WeChatServiceDep
) -> ResponseModel[WeChatAccountRead]:
    account = await service.get_account(account_id, admin)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account), request_id=_req_id(request)
    )


@admin_router.delete(
    "/wechat-accounts/{account_id}",
    response_model=ResponseModel[None],
    summary="删除微信账号 (管理员)",
)
async def admin_delete_account(
    request: Request, account_id: int, admin: AdminUser, service: WeChatServiceDep
) -> ResponseModel[None]:
    account = await service.get_account(account_id, admin)
    await service.delete_account(account)
    return ResponseModel.success(
        message=WeChatMsg.ACCOUNT_DELETED, request_id=_req_id(request)
    )


@admin_router.put(
    "/wechat-accounts/{account_id}/status",
    response_model=ResponseModel[WeChatAccountRead],
    summary="更新微信账号状态 (管理员)",
)
async def admin_update_status(
    request: Request,
    account_id: int,
    status_in: WeChatAccountUpdate,
    admin: AdminUser,
    service: WeChatServiceDep,
) -> ResponseModel[WeChatAccountRead]:
    account = await service.get_account(account_id, admin)
    account = await service.update_account(account, status_in)
    return ResponseModel.success(
        data=WeChatAccountRead.model_validate(account),
        message=WeChatMsg.STATUS_UPDATED,
        request_id=_req_id(request),
    )
