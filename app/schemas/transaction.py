from typing import Optional

from app.schemas.common import CamelModel


class TransactionCreate(CamelModel):
    from_wallet_id: str
    to_wallet_id: str
    amount: int
    note: Optional[str] = None
    coordinates: Optional[dict] = None
    owner_alias_id: Optional[str] = None


class TransactionUpdate(CamelModel):
    note: Optional[str] = None
    owner_alias_id: Optional[str] = None
