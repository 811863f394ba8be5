from datetime import datetime
from typing import Any, Optional

from app.schemas.common import CamelModel


class TriggerEventIn(CamelModel):
    event_type: Optional[str] = None
    change_type: Optional[str] = None
    trigger_type: Optional[str] = None
    content: Any = None
    start_time: Optional[datetime] = None
    termination_time: Optional[datetime] = None
    duration: Optional[int] = None
    iterations: Optional[int] = None
    is_recurring: Optional[bool] = None
    is_active: Optional[bool] = None
    should_target_single: Optional[bool] = None
    single_use: Optional[bool] = None
    coordinates: Optional[dict] = None
    owner_alias_id: Optional[str] = None
