from sqlalchemy import Column, String, Integer, Float, Boolean, ForeignKey, Enum, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
import enum

from holdaspot.core.database import Base


class FacilityType(str, enum.Enum):
    COURT = "court"
    BAY = "bay"


class Sport(Base):
    __tablename__ = "sports"
    __table_args__ = (
        # Grid slots must be bookable, i.e. whole 30-minute credits
        CheckConstraint(
            "slot_duration_minutes > 0 AND slot_duration_minutes = (slot_duration_minutes / 30) * 30",
            name="sports_slot_duration_whole_credits",
        ),
    )

    name = Column(String, unique=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Booking rules
    max_booking_hours = Column(Float, default=4.0, nullable=False)
    slot_duration_minutes = Column(Integer, default=30, nullable=False)

    # Relationships
    facilities = relationship("Facility", back_populates="sport")

    def __repr__(self):
        return f"<Sport(name={self.name}, max_booking_hours={self.max_booking_hours})>"


class Facility(Base):
    __tablename__ = "facilities"

    name = Column(String, nullable=False)
    sport_id = Column(Uuid(as_uuid=True), ForeignKey("sports.id"), nullable=False)
    type = Column(
        Enum(FacilityType, name="facility_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    sport = relationship("Sport", back_populates="facilities", lazy="joined")
    reservations = relationship("Reservation", back_populates="facility")

    def __repr__(self):
        return f"<Facility(name={self.name}, type={self.type})>"
