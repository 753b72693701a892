"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from identity_server.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Identity(Base):
    __tablename__ = "identities"

    wallet_key = Column(String(64), primary_key=True)
    current_nonce = Column(String(64), nullable=True)
    username = Column(String(50))
    email = Column(String(255))
    bio = Column(String(500))
    avatar = Column(String(500))
    preferences = Column(Text)  # JSON: {"theme": "dark", "notifications": true}
    is_active = Column(Boolean, nullable=False, default=True)
    last_authenticated_at = Column(DateTime(timezone=True))
    transaction_count = Column(Integer, nullable=False, default=0)
    total_volume = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    transactions = relationship("LedgerTransaction", back_populates="identity")


class LedgerTransaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_wallet_block_time", "wallet_key", "block_time"),
        Index("ix_transactions_category_created_at", "category", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    signature = Column(String(128), unique=True, nullable=False, index=True)
    wallet_key = Column(String(64), ForeignKey("identities.wallet_key"), nullable=False, index=True)
    category = Column(String(20), nullable=False, default="other")
    amount = Column(Float, nullable=False, default=0.0)
    fee = Column(Float, nullable=False, default=0.0)
    token_mint = Column(String(64))
    block_time = Column(DateTime(timezone=True), nullable=False)
    slot = Column(BigInteger, nullable=False)
    status = Column(String(20), nullable=False, default="confirmed")  # confirmed, finalized, failed
    meta = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    identity = relationship("Identity", back_populates="transactions")
