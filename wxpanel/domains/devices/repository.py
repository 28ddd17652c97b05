"""
File: wxpanel/domains/devices/repository.py
Description: 设备领域仓储层 (只读报表)
"""

from sqlalchemy import select

from wxpanel.db.models.device import Device
from wxpanel.db.models.user import User
from wxpanel.db.repositories.base import BaseRepository


class DeviceRepository(BaseRepository[Device]):
    async def list_with_owner(self) -> list[tuple[Device, str | None]]:
        stmt = (
            select(Device, User.username)
            .outerjoin(User, Device.owner_user_id == User.id)
            .order_by(Device.created_at.desc(), Device.id.desc())
        )
        result = await self.session.execute(stmt)
        return [(device, owner_name) for device, owner_name in result.all()]
