from holdaspot.core.database import Base
from .user import User
from .facility import Sport, Facility, FacilityType
from .reservation import Reservation, ReservationStatus, CancelledBy, OVERLAP_CONSTRAINT
from .credit_ledger import CreditLedger, CreditReason

__all__ = [
    "Base",

    # Core models
    "User",

    # Reference data
    "Sport",
    "Facility",
    "FacilityType",

    # Booking
    "Reservation",
    "ReservationStatus",
    "CancelledBy",
    "OVERLAP_CONSTRAINT",

    # Credits
    "CreditLedger",
    "CreditReason",
]
