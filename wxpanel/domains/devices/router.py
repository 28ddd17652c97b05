"""
File: wxpanel/domains/devices/router.py
Description: 设备领域 HTTP 路由层 (挂载于 /admin)

设备表只用于报表展示，没有写接口。
"""

from fastapi import APIRouter, Request

from wxpanel.api.deps import AdminUser
from wxpanel.core.response import ResponseModel
from wxpanel.domains.devices.dependencies import DeviceRepoDep
from wxpanel.domains.devices.schemas import DeviceRead

admin_router = APIRouter()


@admin_router.get(
    "/devices",
    response_model=ResponseModel[list[DeviceRead]],
    summary="设备列表",
)
async def list_devices(
    request: Request, _admin: AdminUser, repo: DeviceRepoDep
) -> ResponseModel[list[DeviceRead]]:
    rows = await repo.list_with_owner()
    return ResponseModel.success(
        data=[DeviceRead.from_row(device, owner_name) for device, owner_name in rows],
        request_id=getattr(request.state, "request_id", None),
    )
