"""Services layer - Application orchestration.

Available services:
- BookingService: quotes fares, books and cancels trips
"""

from .booking_service import BookingService

__all__ = ["BookingService"]
