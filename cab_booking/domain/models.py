"""Immutable domain models for the booking core.

All models are frozen dataclasses with slots. They carry no I/O and
represent the business concepts shared by pricing, route compilation
and the dispatch adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable, Dict, Optional


class ScheduleKind(Enum):
    """Tag of a tariff schedule, in no particular priority."""

    STANDARD = auto()
    OFF_PEAK = auto()
    HOLIDAY = auto()


class VehicleClass(Enum):
    """Vehicle class requested for a trip.

    STANDARD taxis are billed by tariff; LUXURY vehicles by the hour.
    """

    STANDARD = "standard"
    LUXURY = "luxury"

    @property
    def is_hourly(self) -> bool:
        return self is VehicleClass.LUXURY


@dataclass(frozen=True, slots=True)
class RateTable:
    """Charges applied under one booking channel of a schedule.

    Attributes:
        initial_charge: Flat charge at the start of the trip
        per_unit_charge: Charge per billable unit
        seconds_per_unit: Waiting/driving seconds that make one time unit
    """

    initial_charge: float
    per_unit_charge: float
    seconds_per_unit: int


@dataclass(frozen=True, slots=True)
class TariffSchedule:
    """A named, time-activated table of fare rates.

    Attributes:
        kind: Schedule tag
        name: Human-readable name shown to riders
        prebooked: Rates for trips booked in advance
        flagged_down: Rates for trips hailed on the street
        predicate: Activation test over a local wall-clock datetime
    """

    kind: ScheduleKind
    name: str
    prebooked: RateTable
    flagged_down: RateTable
    predicate: Callable[[datetime], bool] = field(compare=False, repr=False)

    def is_active(self, moment: datetime) -> bool:
        return self.predicate(moment)

    def rates_for(self, is_flagged_down: bool) -> RateTable:
        return self.flagged_down if is_flagged_down else self.prebooked


@dataclass(frozen=True, slots=True)
class FareBreakdown:
    """Display breakdown of a fare.

    ``units`` and ``units_cost`` are rounded for display only; the quote
    total is computed from unrounded values.
    """

    base: float
    units: float
    units_cost: float
    passenger_surcharge: float
    channel_fee: float
    hours: Optional[int] = None
    hourly_rate: Optional[float] = None


@dataclass(frozen=True, slots=True)
class FareQuote:
    """Result of one fare computation.

    Attributes:
        total: Price rounded to the penny
        schedule: Selected tariff, or None for hourly-billed classes
        vehicle_class: Vehicle class the quote was made for
        breakdown: Cost breakdown for display
    """

    total: float
    schedule: Optional[TariffSchedule]
    vehicle_class: VehicleClass
    breakdown: FareBreakdown

    @property
    def is_hourly(self) -> bool:
        return self.vehicle_class.is_hourly


@dataclass(frozen=True, slots=True)
class Location:
    """An address with optional decimal-degree coordinates."""

    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True, slots=True)
class PassengerContact:
    """The rider who is the named contact on an order."""

    first_name: str
    last_name: str
    phone: str
    email: Optional[str] = None

    def display_name(self, placeholder: str = "Passenger") -> str:
        """Return "first last" trimmed, or the placeholder if both are blank."""
        parts = [p.strip() for p in (self.first_name or "", self.last_name or "")]
        name = " ".join(p for p in parts if p)
        return name or placeholder


@dataclass(frozen=True, slots=True)
class Itinerary:
    """Rider-supplied trip request.

    Attributes:
        pickup: Where the passenger boards
        dropoff: Where the passenger alights
        passenger: Named contact for the order
        stops: Intermediate stops, kept in the given order
        notes: Free text for the driver
        pickup_time: Requested pickup time, None for "as soon as possible"
        return_trip: Whether a return trip was requested
        return_time: Requested return time
        passenger_count: Seats required
        bags: Bags to carry
        wheelchairs: Wheelchair spaces required
    """

    pickup: Location
    dropoff: Location
    passenger: PassengerContact
    stops: tuple[Location, ...] = field(default_factory=tuple)
    notes: Optional[str] = None
    pickup_time: Optional[datetime] = None
    return_trip: bool = False
    return_time: Optional[datetime] = None
    passenger_count: int = 1
    bags: int = 0
    wheelchairs: int = 0

    @property
    def is_asap(self) -> bool:
        return self.pickup_time is None


class ActionKind(Enum):
    """Passenger action at a route node, valued by its wire name."""

    BOARD = "in"
    ALIGHT = "out"


@dataclass(frozen=True, slots=True)
class NodeAction:
    kind: ActionKind
    info: str = ""
    item_seq: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "@type": "client_action",
            "item_seq": self.item_seq,
            "action": self.kind.value,
            "info": {"all": self.info},
        }


@dataclass(frozen=True, slots=True)
class RouteNode:
    """One stop of a compiled route.

    Attributes:
        seq: Zero-based position in the route
        name: Address shown to the driver
        coords: (longitude, latitude) in micro-degrees, or None if unknown
        actions: Passenger actions performed here
        target: Arrival target as epoch seconds, 0 for no target
        latest: Latest arrival as epoch seconds, 0 for no target
    """

    seq: int
    name: str
    coords: Optional[tuple[int, int]]
    actions: tuple[NodeAction, ...] = field(default_factory=tuple)
    target: int = 0
    latest: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actions": [action.to_dict() for action in self.actions],
            "location": {
                "name": self.name,
                "coords": list(self.coords) if self.coords is not None else None,
            },
            "times": {"arrive": {"target": self.target, "latest": self.latest}},
            "info": {},
            "seq": self.seq,
        }


@dataclass(frozen=True, slots=True)
class RouteLeg:
    """Directed connection between two consecutive nodes.

    Distance and duration are left at 0 so the dispatch system
    recomputes them.
    """

    from_seq: int
    to_seq: int
    points: tuple[int, int, int, int]
    distance: int = 0
    duration: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_seq": self.from_seq,
            "to_seq": self.to_seq,
            "meta": {"dist": self.distance, "est_dur": self.duration},
            "pts": list(self.points),
        }


@dataclass(frozen=True, slots=True)
class RouteGraph:
    """Compiled node/leg structure submitted to the dispatch system."""

    nodes: tuple[RouteNode, ...]
    legs: tuple[RouteLeg, ...]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def leg_count(self) -> int:
        return len(self.legs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "legs": [leg.to_dict() for leg in self.legs],
            "meta": {"dist": 0, "est_dur": 0},
        }


@dataclass(frozen=True, slots=True)
class PassengerItem:
    """The single passenger line-item of an order."""

    name: str
    phone: str
    email: str
    seats: int = 1
    bags: int = 0
    wheelchairs: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "@type": "passengers",
            "seq": 0,
            "passenger": {"name": self.name, "phone": self.phone, "email": self.email},
            "client_id": 0,
            "require": {"seats": self.seats, "wc": self.wheelchairs, "bags": self.bags},
            "pay_info": [],
        }


@dataclass(frozen=True, slots=True)
class DispatchOrder:
    """A compiled order ready for submission.

    Attributes:
        company_id: Requesting company identifier
        external_id: Source-system identifier
        route: Compiled route graph
        passenger: Named contact and requirements
        auto_assign: Whether the dispatch system may assign a provider itself
    """

    company_id: int
    external_id: str
    route: RouteGraph
    passenger: PassengerItem
    auto_assign: bool = False

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the JSON body of the order-creation endpoint."""
        return {
            "order": {
                "order_id": 0,
                "company_id": self.company_id,
                "provider_id": 0,
                "created": 0,
                "external_id": self.external_id,
                "items": [self.passenger.to_dict()],
                "route": self.route.to_dict(),
            },
            "dispatch_options": {"auto_assign": self.auto_assign},
        }


@dataclass(frozen=True, slots=True)
class CachedCredential:
    """A bearer token and the instant it stops being valid.

    Attributes:
        token: Raw bearer token
        expires_at: Expiry as epoch seconds
        subject: Subject the token was signed for
    """

    token: str
    expires_at: float
    subject: str = "*"

    def is_fresh(self, now: float, margin: float) -> bool:
        """True while more than ``margin`` seconds remain before expiry."""
        return now < self.expires_at - margin

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True, slots=True)
class OrderReceipt:
    """Identifiers returned by the dispatch system for a created order.

    Attributes:
        order_id: Hex order identifier, used for cancellation
        job_id: Numeric job number shown in the dispatch console
        raw: Full parsed response body
    """

    order_id: str
    job_id: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)
