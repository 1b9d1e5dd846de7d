"""
Service layer helpers that orchestrate the store and domain logic.
"""

from .booking import BookingResult, BookingService, OwnerReservations, ReservationRepositoryProtocol

__all__ = ["BookingResult", "BookingService", "OwnerReservations", "ReservationRepositoryProtocol"]
