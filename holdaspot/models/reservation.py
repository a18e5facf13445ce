from sqlalchemy import Column, Integer, ForeignKey, Enum, Uuid, CheckConstraint, DDL, event
from sqlalchemy.orm import relationship
import enum

from holdaspot.core.database import Base, UTCDateTime


class ReservationStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class CancelledBy(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


def _enum_values(enum_cls):
    return [m.value for m in enum_cls]


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="reservations_valid_interval"),
    )

    # Who and where
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    facility_id = Column(Uuid(as_uuid=True), ForeignKey("facilities.id"), nullable=False, index=True)

    # Time information
    start_time = Column(UTCDateTime, nullable=False)  # UTC
    end_time = Column(UTCDateTime, nullable=False)  # UTC

    # Fixed at creation; refunds are tracked in the credit ledger
    credits_used = Column(Integer, nullable=False)

    # Status
    status = Column(
        Enum(ReservationStatus, name="reservation_status", values_callable=_enum_values),
        default=ReservationStatus.CONFIRMED,
        nullable=False,
    )
    cancelled_by = Column(
        Enum(CancelledBy, name="cancelled_by", values_callable=_enum_values),
        nullable=True,
    )

    # Relationships
    user = relationship("User", back_populates="reservations")
    facility = relationship("Facility", back_populates="reservations", lazy="joined")
    credit_ledger_entries = relationship("CreditLedger", back_populates="reservation")

    def __repr__(self):
        return f"<Reservation(facility_id={self.facility_id}, start_time={self.start_time}, status={self.status})>"


# Confirmed reservations of a facility may not overlap on [start_time, end_time).
# The store enforces this; the application only translates the violation.
OVERLAP_CONSTRAINT = "reservations_no_overlap"

event.listen(
    Base.metadata,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)

event.listen(
    Reservation.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE reservations ADD CONSTRAINT {OVERLAP_CONSTRAINT} "
        "EXCLUDE USING gist (facility_id WITH =, tstzrange(start_time, end_time, '[)') WITH &&) "
        "WHERE (status = 'confirmed')"
    ).execute_if(dialect="postgresql"),
)

event.listen(
    Reservation.__table__,
    "after_create",
    DDL(
        f"CREATE TRIGGER {OVERLAP_CONSTRAINT} BEFORE INSERT ON reservations "
        "WHEN NEW.status = 'confirmed' AND EXISTS ("
        "SELECT 1 FROM reservations r WHERE r.facility_id = NEW.facility_id "
        "AND r.status = 'confirmed' "
        "AND r.start_time < NEW.end_time AND r.end_time > NEW.start_time) "
        f"BEGIN SELECT RAISE(ABORT, '{OVERLAP_CONSTRAINT}'); END"
    ).execute_if(dialect="sqlite"),
)
