"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the booking core and external
adapters. They enable dependency injection and make the system testable.
"""

from .auth import TokenProviderPort, TokenSignerPort
from .dispatch import DispatchPort

__all__ = [
    # Auth
    "TokenSignerPort",
    "TokenProviderPort",
    # Dispatch
    "DispatchPort",
]
