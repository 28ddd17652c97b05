"""
File: wxpanel/domains/devices/dependencies.py
Description: 设备领域依赖注入 (DI)
"""

from typing import Annotated

from fastapi import Depends

from wxpanel.api.deps import DBSession
from wxpanel.db.models.device import Device
from wxpanel.domains.devices.repository import DeviceRepository


async def get_device_repository(session: DBSession) -> DeviceRepository:
    return DeviceRepository(model=Device, session=session)


DeviceRepoDep = Annotated[DeviceRepository, Depends(get_device_repository)]
