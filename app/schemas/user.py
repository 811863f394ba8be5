from typing import Optional

from pydantic import EmailStr

from app.schemas.common import CamelModel


class UserUpdate(CamelModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    visibility: Optional[int] = None
    password: Optional[str] = None


class AccessLevelUpdate(CamelModel):
    access_level: int


class AliasCreate(CamelModel):
    alias_name: str
    full_name: Optional[str] = None
    visibility: int = 0


class AliasUpdate(CamelModel):
    full_name: Optional[str] = None
    visibility: Optional[int] = None


class TeamCreate(CamelModel):
    team_name: str
    short_name: str
    owner_alias_id: Optional[str] = None
    visibility: int = 0
    is_public: bool = False


class TeamUpdate(CamelModel):
    team_name: Optional[str] = None
    short_name: Optional[str] = None
    owner_alias_id: Optional[str] = None
    visibility: Optional[int] = None
    is_public: Optional[bool] = None
    is_protected: Optional[bool] = None


class TeamMember(CamelModel):
    member_id: str
