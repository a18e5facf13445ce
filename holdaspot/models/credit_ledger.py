from sqlalchemy import Column, Integer, ForeignKey, Text, Enum, Uuid
from sqlalchemy.orm import relationship
import enum

from holdaspot.core.database import Base


class CreditReason(str, enum.Enum):
    WEEKLY_RESET = "weekly_reset"
    RESERVATION = "reservation"
    REFUND = "refund"
    ADMIN_ADJUSTMENT = "admin_adjustment"


class CreditLedger(Base):
    """Append-only audit trail of credit events.

    Balances are never derived from this table: the weekly part comes from
    confirmed reservations and the bonus part from users.bonus_credits.
    The sum of bonus_delta per user always equals users.bonus_credits.
    """
    __tablename__ = "credit_ledger"

    # Foreign key to user
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Credit transaction
    amount = Column(Integer, nullable=False)  # Signed credits of the event
    transaction_type = Column(
        Enum(CreditReason, name="credit_reason", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    # Bonus pool movement and running balance after this transaction
    bonus_delta = Column(Integer, default=0, nullable=False)
    bonus_balance_after = Column(Integer, nullable=False)

    # Optional foreign key to reservation
    reservation_id = Column(Uuid(as_uuid=True), ForeignKey("reservations.id"), nullable=True)

    notes = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="credit_ledger_entries")
    reservation = relationship("Reservation", back_populates="credit_ledger_entries")

    def __repr__(self):
        return f"<CreditLedger(user_id={self.user_id}, amount={self.amount}, type={self.transaction_type}, bonus_balance_after={self.bonus_balance_after})>"
