"""Tests for the booking service orchestration."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from cab_booking.config import FareConfig, OrderConfig
from cab_booking.domain.errors import DispatchError
from cab_booking.domain.models import (
    DispatchOrder,
    Itinerary,
    Location,
    OrderReceipt,
    PassengerContact,
    VehicleClass,
)
from cab_booking.orders.compiler import OrderCompiler
from cab_booking.pricing.fares import FareCalculator
from cab_booking.services import BookingService


@pytest.fixture
def dispatch():
    mock = MagicMock()
    mock.submit_order.return_value = OrderReceipt(order_id="5f2a9c", job_id=12)
    return mock


@pytest.fixture
def service(dispatch):
    return BookingService(
        fare_calculator=FareCalculator(FareConfig()),
        order_compiler=OrderCompiler(OrderConfig(company_id=9)),
        dispatch=dispatch,
    )


@pytest.fixture
def itinerary():
    return Itinerary(
        pickup=Location("Jersey Airport", 49.2079, -2.1955),
        dropoff=Location("Elizabeth Harbour", 49.1786, -2.1160),
        passenger=PassengerContact("Ada", "Lovelace", "+44 7700 900123"),
        stops=(Location("St Aubin", 49.1883, -2.1683),),
    )


class TestBookingService:
    def test_quote_delegates_to_calculator(self, service, dispatch):
        quote = service.quote(5000, 600, timestamp=datetime(2026, 3, 10, 10, 0))

        assert quote.total == 17.25
        dispatch.submit_order.assert_not_called()

    def test_luxury_quote(self, service):
        quote = service.quote(0, 5400, vehicle_class=VehicleClass.LUXURY)
        assert quote.total == 160.0

    def test_book_submits_compiled_order(self, service, dispatch, itinerary):
        receipt = service.book(itinerary)

        assert receipt.order_id == "5f2a9c"
        (order,), _ = dispatch.submit_order.call_args
        assert isinstance(order, DispatchOrder)
        assert order.company_id == 9
        assert order.route.node_count == 3
        assert order.passenger.name == "Ada Lovelace"

    def test_book_propagates_dispatch_errors(self, service, dispatch, itinerary):
        dispatch.submit_order.side_effect = DispatchError("rejected", status_code=422)

        with pytest.raises(DispatchError):
            service.book(itinerary)

    def test_cancel_delegates(self, service, dispatch):
        dispatch.cancel_order.return_value = {"status": "cancelled"}

        assert service.cancel("5f2a9c") == {"status": "cancelled"}
        dispatch.cancel_order.assert_called_once_with("5f2a9c", None)
