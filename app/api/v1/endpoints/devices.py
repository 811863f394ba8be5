from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import AccessUpdate, DataRequest, envelope
from app.schemas.device import DeviceCreate, DeviceUpdate
from app.services import devices
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_device(
    payload: DataRequest[DeviceCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    device = devices.create_device(db, messenger, user, **payload.data.model_dump())
    return envelope({"device": device.to_dict()})


@router.get("")
def list_devices(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"devices": devices.get_devices(db, user)})


@router.get("/{device_id}")
def get_device(device_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"device": devices.get_device(db, device_id, user)})


@router.put("/{device_id}")
def update_device(
    device_id: str,
    payload: DataRequest[DeviceUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    device = devices.update_device(db, messenger, device_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"device": device.to_dict()})


@router.put("/{device_id}/access")
def update_device_access(
    device_id: str,
    payload: DataRequest[AccessUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    device = devices.update_device_access(db, messenger, device_id, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"device": device.to_dict()})


@router.delete("/{device_id}")
def remove_device(
    device_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"device": devices.remove_device(db, messenger, device_id, user)})
