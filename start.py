"""Command-line launcher for the booking core.

    python start.py quote --distance 5000 --duration 600 --passengers 2
    python start.py compile itinerary.json

``quote`` prints a fare breakdown; ``compile`` prints the dispatch order
payload for an itinerary file, without submitting it.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

from cab_booking.config import get_config
from cab_booking.container import Container
from cab_booking.dates import parse_pickup_time
from cab_booking.domain.models import Itinerary, Location, PassengerContact, VehicleClass
from cab_booking.logging_setup import configure_logging
from cab_booking.orders.compiler import OrderCompiler
from cab_booking.pricing.fares import FareCalculator, format_tariff_info


def _location(raw: Dict[str, Any]) -> Location:
    return Location(
        address=raw.get("address", ""),
        latitude=raw.get("lat"),
        longitude=raw.get("lng"),
    )


def load_itinerary(path: Path, timezone: str) -> Itinerary:
    """Read an itinerary from a JSON file."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    rider = raw.get("rider", {})
    return Itinerary(
        pickup=_location(raw["pickup"]),
        dropoff=_location(raw["dropoff"]),
        passenger=PassengerContact(
            first_name=rider.get("first_name", ""),
            last_name=rider.get("last_name", ""),
            phone=rider.get("phone", ""),
            email=rider.get("email"),
        ),
        stops=tuple(_location(s) for s in raw.get("stops", [])),
        notes=raw.get("notes"),
        pickup_time=parse_pickup_time(raw.get("time"), timezone),
        return_trip=bool(raw.get("return_trip", False)),
        return_time=parse_pickup_time(raw.get("return_time"), timezone),
        passenger_count=int(raw.get("passengers", 1)),
        bags=int(raw.get("bags", 0)),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cab booking core")
    sub = parser.add_subparsers(dest="command", required=True)

    quote = sub.add_parser("quote", help="Price a trip")
    quote.add_argument("--distance", type=float, required=True, help="meters")
    quote.add_argument("--duration", type=float, required=True, help="seconds")
    quote.add_argument("--passengers", type=int, default=1)
    quote.add_argument("--flag", action="store_true", help="street-hail rates")
    quote.add_argument("--at", default=None, help="ride time, default now")
    quote.add_argument("--luxury", action="store_true", help="hourly-billed vehicle")

    compile_ = sub.add_parser("compile", help="Print the dispatch payload")
    compile_.add_argument("itinerary", type=Path)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    configure_logging(config.observability)
    container = Container.create_default(config)

    if args.command == "quote":
        calculator: FareCalculator = container.resolve(FareCalculator)
        quote = calculator.compute(
            args.distance,
            args.duration,
            passenger_count=args.passengers,
            is_flagged_down=args.flag,
            timestamp=parse_pickup_time(args.at, config.fares.timezone),
            vehicle_class=VehicleClass.LUXURY if args.luxury else VehicleClass.STANDARD,
        )
        if quote.schedule is not None:
            print(format_tariff_info(quote.schedule, prebooked=not args.flag))
        print(json.dumps({"total": quote.total, **asdict(quote.breakdown)}, indent=2))
        return 0

    compiler: OrderCompiler = container.resolve(OrderCompiler)
    itinerary = load_itinerary(args.itinerary, config.orders.timezone)
    print(json.dumps(compiler.compile_order(itinerary).to_payload(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
