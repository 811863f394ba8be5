from typing import Optional

from app.schemas.common import CamelModel


class DeviceCreate(CamelModel):
    device_name: str
    device_type: Optional[str] = None
    socket_id: Optional[str] = None
    connected_to_user: Optional[str] = None
    owner_alias_id: Optional[str] = None
    visibility: int = 0


class DeviceUpdate(CamelModel):
    device_name: Optional[str] = None
    device_type: Optional[str] = None
    socket_id: Optional[str] = None
    connected_to_user: Optional[str] = None
    owner_alias_id: Optional[str] = None
