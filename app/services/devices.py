from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import AlreadyExists, InvalidData
from app.core.permissions import is_user_allowed
from app.models import Device, DeviceType
from app.services import connector, manager
from app.services.messenger import EmitType, Messenger


def _device_type(value: Optional[str]) -> DeviceType:
    if value is None:
        return DeviceType.USER_DEVICE
    try:
        return DeviceType(value)
    except ValueError as exc:
        raise InvalidData(f"Unknown device type {value}") from exc


def _check_unique(db: Session, *, device_name: Optional[str], connected_to_user: Optional[str], exclude_id: Optional[str] = None) -> None:
    if device_name:
        existing = connector.find_object(db, Device, Device.device_name == device_name)
        if existing is not None and existing.id != exclude_id:
            raise AlreadyExists(f"Device {device_name} already exists")
    if connected_to_user:
        existing = connector.find_object(db, Device, Device.connected_to_user == connected_to_user)
        if existing is not None and existing.id != exclude_id:
            raise AlreadyExists(f"User {connected_to_user} is already connected to a device")


def create_device(
    db: Session,
    messenger: Messenger,
    user,
    *,
    device_name: str,
    device_type: Optional[str] = None,
    socket_id: Optional[str] = None,
    connected_to_user: Optional[str] = None,
    owner_alias_id: Optional[str] = None,
    visibility: int = 0,
) -> Device:
    is_user_allowed("CreateDevice", user)
    manager.check_alias(user, owner_alias_id)
    _check_unique(db, device_name=device_name, connected_to_user=connected_to_user)
    device = connector.save_object(
        db,
        Device(
            device_name=device_name,
            device_type=_device_type(device_type),
            socket_id=socket_id,
            connected_to_user=connected_to_user,
            last_user_id=user.id,
            owner_id=user.id,
            owner_alias_id=owner_alias_id,
            visibility=visibility,
        ),
    )
    manager.emit_created(messenger, EmitType.DEVICE, "device", device)
    return device


def get_device(db: Session, device_id: str, user) -> dict:
    is_user_allowed("GetDevices", user)
    device, access = manager.get_object_by_id(db, Device, device_id, user)
    return manager.present(device, access)


def get_devices(db: Session, user) -> list[dict]:
    is_user_allowed("GetDevices", user)
    return manager.present_many(connector.get_objects(db, Device, order_by=Device.device_name), user)


def update_device(db: Session, messenger: Messenger, device_id: str, user, updates: dict) -> Device:
    """Owners update socket/user binding; renaming needs UpdateDeviceName."""
    is_user_allowed("UpdateDevice", user)
    allowed = {
        key: value
        for key, value in updates.items()
        if key in {"device_name", "device_type", "socket_id", "connected_to_user", "owner_alias_id", "visibility"}
    }
    if "device_name" in allowed:
        is_user_allowed("UpdateDeviceName", user)
    if "device_type" in allowed:
        allowed["device_type"] = _device_type(allowed["device_type"])
    _check_unique(
        db,
        device_name=allowed.get("device_name"),
        connected_to_user=allowed.get("connected_to_user"),
        exclude_id=device_id,
    )
    if not getattr(user, "is_anonymous", False):
        allowed["last_user_id"] = user.id
    return manager.update_object(db, messenger, Device, device_id, allowed, user, event=EmitType.DEVICE, key="device")


def update_device_access(db: Session, messenger: Messenger, device_id: str, user, **kwargs) -> Device:
    is_user_allowed("UpdateDevice", user)
    return manager.update_access(db, messenger, Device, device_id, user, event=EmitType.DEVICE, key="device", **kwargs)


def remove_device(db: Session, messenger: Messenger, device_id: str, user) -> dict:
    is_user_allowed("RemoveDevice", user)
    return manager.remove_object(db, messenger, Device, device_id, user, event=EmitType.DEVICE, key="device")
