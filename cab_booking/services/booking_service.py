"""Booking service - Main orchestrator.

Quotes fares, compiles itineraries and hands compiled orders to the
dispatch system. The pricing and compilation steps are pure; only
``book`` and ``cancel`` touch the network.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..domain.models import FareQuote, Itinerary, OrderReceipt, VehicleClass
from ..orders.compiler import OrderCompiler
from ..ports.dispatch import DispatchPort
from ..pricing.fares import FareCalculator


@dataclass
class BookingService:
    """Main service for quoting and booking trips.

    Attributes:
        fare_calculator: Prices trips
        order_compiler: Turns itineraries into dispatch orders
        dispatch: Submits and cancels orders
    """

    fare_calculator: FareCalculator
    order_compiler: OrderCompiler
    dispatch: DispatchPort

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def quote(
        self,
        distance_meters: float,
        duration_seconds: float,
        passenger_count: int = 1,
        is_flagged_down: bool = False,
        timestamp: Optional[datetime] = None,
        vehicle_class: VehicleClass = VehicleClass.STANDARD,
    ) -> FareQuote:
        quote = self.fare_calculator.compute(
            distance_meters,
            duration_seconds,
            passenger_count=passenger_count,
            is_flagged_down=is_flagged_down,
            timestamp=timestamp,
            vehicle_class=vehicle_class,
        )
        self._logger.info(
            "Fare quoted",
            extra={
                "total": quote.total,
                "vehicle_class": vehicle_class.value,
                "schedule": quote.schedule.name if quote.schedule else None,
            },
        )
        return quote

    def book(self, itinerary: Itinerary) -> OrderReceipt:
        """Compile an itinerary and submit it to the dispatch system.

        Args:
            itinerary: Validated rider itinerary.

        Returns:
            OrderReceipt from the dispatch system.

        Raises:
            DispatchError: If the dispatch system rejects the order.
            AuthError: If no bearer token could be obtained.
        """
        order = self.order_compiler.compile_order(itinerary)
        self._logger.info(
            "Booking trip",
            extra={"stops": len(itinerary.stops), "asap": itinerary.is_asap},
        )
        return self.dispatch.submit_order(order)

    def cancel(self, order_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        self._logger.info("Cancelling booking", extra={"order_id": order_id})
        return self.dispatch.cancel_order(order_id, reason)
