from sqlalchemy import Column, Integer, String, JSON, Index
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid


class Transaction(Base, TimestampMixin, AccessControlled):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    amount = Column(Integer, nullable=False)
    from_wallet_id = Column(String(36), nullable=False)
    to_wallet_id = Column(String(36), nullable=False)
    note = Column(String(1000), nullable=True)
    coordinates = Column(JSON, nullable=True)


Index("ix_transactions_from_wallet", Transaction.from_wallet_id)
Index("ix_transactions_to_wallet", Transaction.to_wallet_id)
