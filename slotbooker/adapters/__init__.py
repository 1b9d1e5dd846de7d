"""
Adapters layer - Reservation storage implementations.
"""

from .memory_repository import InMemoryReservationRepository

__all__ = ["InMemoryReservationRepository"]
