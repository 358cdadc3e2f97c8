"""Pointsman protocols."""

from pointsman.protocols.clients import ClientDirectory
from pointsman.protocols.bookings import BookingCompletion

__all__ = [
    # Enrollment
    "ClientDirectory",
    # Booking events
    "BookingCompletion",
]
