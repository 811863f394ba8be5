from typing import Optional

from app.schemas.common import CamelModel


class WalletUpdate(CamelModel):
    amount: Optional[int] = None
    reset_amount: bool = False
    should_decrease_amount: bool = False
    is_protected: Optional[bool] = None
    owner_alias_id: Optional[str] = None
