from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DataRequest(BaseModel, Generic[T]):
    """Request bodies arrive wrapped as {"data": {...}}."""

    data: T


class AccessUpdate(CamelModel):
    user_ids: Optional[list[str]] = None
    team_ids: Optional[list[str]] = None
    user_admin_ids: Optional[list[str]] = None
    team_admin_ids: Optional[list[str]] = None
    banned_ids: Optional[list[str]] = None
    should_remove: bool = False
    is_public: Optional[bool] = None
    visibility: Optional[int] = None
    access_level: Optional[int] = None


def envelope(data) -> dict:
    return {"data": data}
