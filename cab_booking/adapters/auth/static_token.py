"""Static token provider for development.

Hands out a pre-issued developer JWT and never contacts the signing
endpoint. Use it with CAB_AUTH_DEV_JWT against the sandbox API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ...domain.errors import ConfigurationError


@dataclass
class StaticTokenProvider:
    """Token provider that always returns the same token."""

    token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.token:
            raise ConfigurationError(
                "Static token provider needs a token",
                setting_name="CAB_AUTH_DEV_JWT",
            )

    def get_token(self, timeout: Optional[float] = None) -> str:
        return self.token
