"""Orders: itinerary to dispatch route compilation."""

from .compiler import OrderCompiler, compile_route, to_epoch_seconds, to_wire_coords

__all__ = ["OrderCompiler", "compile_route", "to_epoch_seconds", "to_wire_coords"]
