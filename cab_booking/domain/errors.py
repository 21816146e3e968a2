"""Typed domain errors for the booking core.

Pricing and route compilation never raise for well-typed input; these
errors belong to the edges of the system (token signing, order
submission, configuration).

All errors inherit from BookingError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class BookingError(Exception):
    """Root of every error the booking core raises on purpose.

    Attributes:
        message: What went wrong, phrased for logs and operators
        cause: Lower-level exception this error translates, if any
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message if self.cause is None else f"{self.message}: {self.cause}"


@dataclass
class AuthError(BookingError):
    """Failed to obtain a bearer token for the dispatch API."""

    @property
    def retryable(self) -> bool:
        """Whether a caller may retry with backoff before giving up."""
        return False


@dataclass
class SigningEndpointUnreachable(AuthError):
    """The token-for-key endpoint could not be reached.

    Covers timeouts, connection failures and 5xx responses.

    Attributes:
        status_code: HTTP status if a response was received
    """

    status_code: Optional[int] = None

    @property
    def retryable(self) -> bool:
        return True


@dataclass
class InvalidSigningResponse(AuthError):
    """The signing endpoint answered without a usable token.

    Attributes:
        status_code: HTTP status of the response
    """

    status_code: Optional[int] = None

    @property
    def retryable(self) -> bool:
        return True


@dataclass
class ExpiredAndUnrefreshable(AuthError):
    """Refresh failed and no valid cached token remains."""


@dataclass
class DispatchError(BookingError):
    """The dispatch system rejected or failed an order request.

    Attributes:
        status_code: HTTP status if a response was received
        details: Parsed (or truncated raw) response body
    """

    status_code: Optional[int] = None
    details: Any = None


@dataclass
class ConfigurationError(BookingError):
    """A setting required for the requested operation is missing or unusable.

    Attributes:
        setting_name: Environment variable to fix
    """

    setting_name: str = ""
