"""Compile rider itineraries into dispatch orders.

Stop order is preserved exactly as given: node ``i`` is the i-th point
of the itinerary and leg ``i`` joins node ``i`` to node ``i + 1``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from ..config import OrderConfig, get_config
from ..domain.models import (
    ActionKind,
    DispatchOrder,
    Itinerary,
    Location,
    NodeAction,
    PassengerItem,
    RouteGraph,
    RouteLeg,
    RouteNode,
)

MICRO_DEGREES = 1_000_000

Coords = Tuple[int, int]

logger = logging.getLogger(__name__)


def _micro_degrees(degrees: float) -> int:
    # Halves go away from zero.
    return int(Decimal(repr(degrees * MICRO_DEGREES)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_wire_coords(latitude: Optional[float], longitude: Optional[float]) -> Optional[Coords]:
    """Convert decimal degrees to ``(lng, lat)`` micro-degrees, or None if incomplete."""
    if latitude is None or longitude is None:
        return None
    return _micro_degrees(longitude), _micro_degrees(latitude)


def to_epoch_seconds(moment: Optional[datetime], tz: Optional[ZoneInfo] = None) -> int:
    """Return integer epoch seconds, or 0 (no target) when ``moment`` is None.

    Naive datetimes are interpreted in ``tz`` when given.
    """
    if moment is None:
        return 0
    if moment.tzinfo is None and tz is not None:
        moment = moment.replace(tzinfo=tz)
    return int(moment.timestamp())


def _node(seq: int, location: Location, actions: Tuple[NodeAction, ...] = (), target: int = 0) -> RouteNode:
    return RouteNode(
        seq=seq,
        name=location.address,
        coords=to_wire_coords(location.latitude, location.longitude),
        actions=actions,
        target=target,
        latest=target,
    )


def _leg(origin: RouteNode, destination: RouteNode) -> RouteLeg:
    for node in (origin, destination):
        if node.coords is None:
            logger.warning(
                "Node without coordinates, leg endpoint defaulted to [0, 0]",
                extra={"seq": node.seq, "address": node.name},
            )
    a = origin.coords or (0, 0)
    b = destination.coords or (0, 0)
    return RouteLeg(from_seq=origin.seq, to_seq=destination.seq, points=(a[0], a[1], b[0], b[1]))


def compile_route(itinerary: Itinerary, tz: Optional[ZoneInfo] = None) -> RouteGraph:
    """Compile an itinerary into an ordered route graph.

    Args:
        itinerary: Rider itinerary.
        tz: Zone used to read a naive pickup time.

    Returns:
        RouteGraph with ``len(stops) + 2`` nodes and one leg per
        consecutive node pair.
    """
    board = NodeAction(kind=ActionKind.BOARD, info=itinerary.notes or "")
    alight = NodeAction(kind=ActionKind.ALIGHT)

    nodes: List[RouteNode] = [
        _node(0, itinerary.pickup, (board,), to_epoch_seconds(itinerary.pickup_time, tz))
    ]
    for stop in itinerary.stops:
        nodes.append(_node(len(nodes), stop))
    nodes.append(_node(len(nodes), itinerary.dropoff, (alight,)))

    legs = tuple(_leg(nodes[i], nodes[i + 1]) for i in range(len(nodes) - 1))
    return RouteGraph(nodes=tuple(nodes), legs=legs)


@dataclass
class OrderCompiler:
    """Builds complete dispatch orders from itineraries.

    Attributes:
        config: Caller identity and order defaults
    """

    config: OrderConfig = field(default_factory=lambda: get_config().orders)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def compile_route(self, itinerary: Itinerary) -> RouteGraph:
        return compile_route(itinerary, ZoneInfo(self.config.timezone))

    def compile_order(self, itinerary: Itinerary) -> DispatchOrder:
        """Compile an itinerary into an order with one passenger line-item.

        Args:
            itinerary: Rider itinerary.

        Returns:
            DispatchOrder ready for ``to_payload()``.
        """
        route = self.compile_route(itinerary)
        contact = itinerary.passenger
        passenger = PassengerItem(
            name=contact.display_name(self.config.placeholder_name),
            phone=contact.phone or "",
            email=contact.email or "",
            seats=itinerary.passenger_count,
            bags=itinerary.bags,
            wheelchairs=itinerary.wheelchairs,
        )

        self._logger.debug(
            "Order compiled",
            extra={
                "nodes": route.node_count,
                "legs": route.leg_count,
                "asap": itinerary.is_asap,
            },
        )

        return DispatchOrder(
            company_id=self.config.company_id,
            external_id=self.config.external_id,
            route=route,
            passenger=passenger,
            auto_assign=self.config.auto_assign,
        )
