"""
File: wxpanel/domains/devices/schemas.py
Description: 设备领域 Pydantic 模型 (Schema)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from wxpanel.db.models.device import Device


class DeviceRead(BaseModel):
    id: int
    device_name: str
    auth_key: str
    owner_user_id: int
    owner_name: str | None = Field(default=None, description="所属用户名")
    status: str
    last_login: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_row(cls, device: Device, owner_name: str | None) -> "DeviceRead":
        return cls.model_validate(device).model_copy(update={"owner_name": owner_name})
