from sqlalchemy import Column, Integer, String, Boolean, Index
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin


class Wallet(Base, TimestampMixin, AccessControlled):
    __tablename__ = "wallets"

    # Same id as the owning user or team.
    id = Column(String(36), primary_key=True)
    amount = Column(Integer, default=0, nullable=False)
    is_protected = Column(Boolean, default=False, nullable=False)


Index("ix_wallets_amount", Wallet.amount)
