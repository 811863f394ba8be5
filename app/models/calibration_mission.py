from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index
from app.core.database import Base
from app.models.base import SerializerMixin, TimestampMixin, generate_uuid


class CalibrationMission(Base, TimestampMixin, SerializerMixin):
    __tablename__ = "calibration_missions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner = Column(String(36), nullable=False)
    station_id = Column(Integer, nullable=False)
    code = Column(String(8), nullable=False)
    time_completed = Column(DateTime(timezone=True), nullable=True)
    completed = Column(Boolean, default=False, nullable=False)
    cancelled = Column(Boolean, default=False, nullable=False)


Index("ix_calibration_missions_owner_state", CalibrationMission.owner, CalibrationMission.completed, CalibrationMission.cancelled)
