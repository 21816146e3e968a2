"""Fare calculation under the Jersey tariff rules.

Standard taxis are billed in tenths of a mile or in time units,
whichever is larger; luxury vehicles are billed by the started hour.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import FareConfig, get_config
from ..domain.models import FareBreakdown, FareQuote, TariffSchedule, VehicleClass
from .tariffs import select_schedule

METERS_PER_MILE = 1609.34
UNITS_PER_MILE = 10
SECONDS_PER_HOUR = 3600


def round_half_up(value: float, places: int) -> float:
    """Round like a till does: halves go away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_tariff_info(schedule: TariffSchedule, prebooked: bool = True) -> str:
    """Format a schedule's rates for display."""
    rates = schedule.rates_for(is_flagged_down=not prebooked)
    return (
        f"{schedule.name} - £{rates.initial_charge:.2f} initial"
        f" + £{rates.per_unit_charge:.2f} per {rates.seconds_per_unit}s"
    )


@dataclass
class FareCalculator:
    """Prices trips from distance, duration and booking details.

    The calculator is a pure function of its inputs and configuration;
    it never raises for numeric input and does not validate it.

    Attributes:
        config: Fare constants (surcharges, fees, hourly rate, timezone)
    """

    config: FareConfig = field(default_factory=lambda: get_config().fares)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.config.timezone)

    def compute(
        self,
        distance_meters: float,
        duration_seconds: float,
        passenger_count: int = 1,
        is_flagged_down: bool = False,
        timestamp: Optional[datetime] = None,
        vehicle_class: VehicleClass = VehicleClass.STANDARD,
    ) -> FareQuote:
        """Compute a fare quote.

        Args:
            distance_meters: Trip distance from the mapping provider.
            duration_seconds: Trip duration from the mapping provider.
            passenger_count: Number of passengers.
            is_flagged_down: Use street-hail rates instead of prebooked rates.
            timestamp: Moment of the ride; defaults to now in the tariff zone.
            vehicle_class: Requested vehicle class.

        Returns:
            FareQuote with total and breakdown.
        """
        if vehicle_class.is_hourly:
            return self._hourly(duration_seconds, vehicle_class)

        moment = timestamp if timestamp is not None else datetime.now(self.timezone)
        schedule = select_schedule(moment, self.timezone)
        rates = schedule.rates_for(is_flagged_down)

        units_distance = distance_meters / METERS_PER_MILE * UNITS_PER_MILE
        units_time = duration_seconds / rates.seconds_per_unit
        units = max(units_distance, units_time, 0.0)

        base = rates.initial_charge
        units_cost = units * rates.per_unit_charge
        extra_passengers = max(0, passenger_count - self.config.included_passengers)
        passenger_surcharge = extra_passengers * self.config.extra_passenger_fee
        channel_fee = self.config.channel_fee

        total = round_half_up(base + units_cost + passenger_surcharge + channel_fee, 2)

        self._logger.debug(
            "Fare computed",
            extra={
                "schedule": schedule.name,
                "flagged_down": is_flagged_down,
                "units": units,
                "total": total,
            },
        )

        return FareQuote(
            total=total,
            schedule=schedule,
            vehicle_class=vehicle_class,
            breakdown=FareBreakdown(
                base=base,
                units=round_half_up(units, 1),
                units_cost=round_half_up(units_cost, 2),
                passenger_surcharge=passenger_surcharge,
                channel_fee=channel_fee,
            ),
        )

    def _hourly(self, duration_seconds: float, vehicle_class: VehicleClass) -> FareQuote:
        hours = max(0, math.ceil(duration_seconds / SECONDS_PER_HOUR))
        rate = self.config.hourly_rate
        total = round_half_up(hours * rate, 2)

        self._logger.debug(
            "Hourly fare computed",
            extra={"hours": hours, "hourly_rate": rate, "total": total},
        )

        return FareQuote(
            total=total,
            schedule=None,
            vehicle_class=vehicle_class,
            breakdown=FareBreakdown(
                base=0.0,
                units=0.0,
                units_cost=0.0,
                passenger_surcharge=0.0,
                channel_fee=0.0,
                hours=hours,
                hourly_rate=rate,
            ),
        )


def compute_fare(
    distance_meters: float,
    duration_seconds: float,
    passenger_count: int = 1,
    is_flagged_down: bool = False,
    timestamp: Optional[datetime] = None,
    vehicle_class: VehicleClass = VehicleClass.STANDARD,
) -> FareQuote:
    """Compute a fare with the default fare configuration."""
    return FareCalculator().compute(
        distance_meters,
        duration_seconds,
        passenger_count=passenger_count,
        is_flagged_down=is_flagged_down,
        timestamp=timestamp,
        vehicle_class=vehicle_class,
    )
