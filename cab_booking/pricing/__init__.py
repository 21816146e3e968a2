"""Pricing: tariff selection and fare calculation."""

from .fares import FareCalculator, compute_fare, format_tariff_info
from .tariffs import HOLIDAY, OFF_PEAK, SCHEDULES, STANDARD, select_schedule

__all__ = [
    "FareCalculator",
    "compute_fare",
    "format_tariff_info",
    "select_schedule",
    "SCHEDULES",
    "STANDARD",
    "OFF_PEAK",
    "HOLIDAY",
]
