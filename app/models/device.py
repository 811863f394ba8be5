import enum
from sqlalchemy import Column, String, Enum
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid


class DeviceType(str, enum.Enum):
    USER_DEVICE = "userDevice"
    GPS = "gps"
    CUSTOM = "custom"
    RESTAPI = "restApi"


class Device(Base, TimestampMixin, AccessControlled):
    __tablename__ = "devices"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    device_name = Column(String(64), unique=True, nullable=False)
    socket_id = Column(String(64), nullable=True)
    last_user_id = Column(String(36), nullable=True)
    connected_to_user = Column(String(36), unique=True, nullable=True)
    device_type = Column(Enum(DeviceType, values_callable=lambda items: [item.value for item in items]), default=DeviceType.USER_DEVICE, nullable=False)
