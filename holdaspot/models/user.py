from sqlalchemy import Column, String, Integer, Boolean, CheckConstraint
from sqlalchemy.orm import relationship

from holdaspot.core.database import Base, UTCDateTime


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("bonus_credits >= 0", name="users_bonus_credits_non_negative"),
    )

    # Core user fields
    email = Column(String, unique=True, index=True, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    # Standing bonus pool, consumed after the weekly allowance
    bonus_credits = Column(Integer, default=0, nullable=False)

    # When the next weekly grant is due (Monday 00:00 local)
    credits_reset_date = Column(UTCDateTime, nullable=False)

    # Relationships
    reservations = relationship("Reservation", back_populates="user")
    credit_ledger_entries = relationship("CreditLedger", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, bonus_credits={self.bonus_credits})>"
