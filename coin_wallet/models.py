from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from coin_wallet.config import ClaimStatus, WithdrawalStatus
from coin_wallet.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Player(Base):
    __tablename__ = "players"
    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, index=True, nullable=False)
    balance = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    withdrawals = relationship("Withdrawal", back_populates="player", order_by="Withdrawal.id")

class Withdrawal(Base):
    __tablename__ = "withdrawals"
    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey("players.id"), index=True, nullable=False)
    coins = Column(Integer, nullable=False)
    amount = Column(String, nullable=False)  # two-decimal currency string
    upi_id = Column(String, nullable=False)
    status = Column(String, nullable=False, default=WithdrawalStatus.PENDING.value)
    txn_id = Column(String, nullable=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    player = relationship("Player", back_populates="withdrawals")

class ManualPayment(Base):
    __tablename__ = "manual_payments"
    id = Column(Integer, primary_key=True)
    player_name = Column(String, index=True, nullable=False)
    amount = Column(Float, nullable=False)
    txn_id = Column(String, nullable=False)
    status = Column(String, nullable=False, default=ClaimStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

class ProcessedPayment(Base):
    __tablename__ = "processed_payments"
    id = Column(Integer, primary_key=True)
    order_id = Column(String, unique=True, index=True, nullable=False)
    payment_id = Column(String, nullable=False)
    player_name = Column(String, nullable=False)
    coins = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
