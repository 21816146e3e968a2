"""Domain layer - Core business models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    AuthError,
    BookingError,
    ConfigurationError,
    DispatchError,
    ExpiredAndUnrefreshable,
    InvalidSigningResponse,
    SigningEndpointUnreachable,
)
from .models import (
    ActionKind,
    CachedCredential,
    DispatchOrder,
    FareBreakdown,
    FareQuote,
    Itinerary,
    Location,
    NodeAction,
    OrderReceipt,
    PassengerContact,
    PassengerItem,
    RateTable,
    RouteGraph,
    RouteLeg,
    RouteNode,
    ScheduleKind,
    TariffSchedule,
    VehicleClass,
)

__all__ = [
    # Pricing
    "ScheduleKind",
    "RateTable",
    "TariffSchedule",
    "VehicleClass",
    "FareBreakdown",
    "FareQuote",
    # Itinerary and route
    "Location",
    "PassengerContact",
    "Itinerary",
    "ActionKind",
    "NodeAction",
    "RouteNode",
    "RouteLeg",
    "RouteGraph",
    "PassengerItem",
    "DispatchOrder",
    "OrderReceipt",
    # Auth
    "CachedCredential",
    # Errors
    "BookingError",
    "AuthError",
    "SigningEndpointUnreachable",
    "InvalidSigningResponse",
    "ExpiredAndUnrefreshable",
    "DispatchError",
    "ConfigurationError",
]
