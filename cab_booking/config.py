"""Settings for pricing, order compilation, token caching and dispatch.

Every field can be set from the environment, for example:
- CAB_FARE_CHANNEL_FEE=0.75
- CAB_ORDER_COMPANY_ID=8284
- CAB_DISPATCH_API_KEY=...
- CAB_AUTH_SAFETY_MARGIN_SECONDS=120
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FareConfig(BaseSettings):
    """Fare constants that sit outside the tariff rate tables.

    Environment variables prefixed with CAB_FARE_.
    """

    model_config = SettingsConfigDict(env_prefix="CAB_FARE_")

    extra_passenger_fee: float = 2.50
    included_passengers: int = 4
    channel_fee: float = 0.50  # card payment
    hourly_rate: float = 80.0
    timezone: str = "Europe/Jersey"


class OrderConfig(BaseSettings):
    """Caller identity and defaults stamped on compiled orders.

    Environment variables prefixed with CAB_ORDER_.
    """

    model_config = SettingsConfigDict(env_prefix="CAB_ORDER_")

    company_id: int = 0
    external_id: str = "classic-cabs-web"
    placeholder_name: str = "Passenger"
    auto_assign: bool = False
    timezone: str = "Europe/Jersey"


class AuthConfig(BaseSettings):
    """Bearer token caching.

    Environment variables prefixed with CAB_AUTH_.
    """

    model_config = SettingsConfigDict(env_prefix="CAB_AUTH_")

    safety_margin_seconds: float = 60.0
    default_lifetime_seconds: float = 840.0
    refresh_timeout_seconds: float = 10.0
    subject: str = "*"
    dev_jwt: Optional[str] = None


class DispatchConfig(BaseSettings):
    """Dispatch API endpoint and retry settings.

    Environment variables prefixed with CAB_DISPATCH_.
    """

    model_config = SettingsConfigDict(env_prefix="CAB_DISPATCH_")

    api_domain: str = "api-rc.taxicaller.net"
    api_key: Optional[str] = None
    timeout_seconds: float = 15.0
    max_auth_attempts: int = 3
    backoff_base_seconds: float = 0.5

    @property
    def base_url(self) -> str:
        """Root URL of the dispatch API."""
        return f"https://{self.api_domain}"


class ObservabilityConfig(BaseSettings):
    """Log level and output format.

    Environment variables prefixed with CAB_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="CAB_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # one JSON object per line


class AppConfig(BaseSettings):
    """All settings of the booking core, one section per component.

    Usage:
        config = get_config()
        print(config.fares.channel_fee)
        print(config.dispatch.base_url)

    Environment variables prefixed with CAB_.
    """

    model_config = SettingsConfigDict(env_prefix="CAB_")

    fares: FareConfig = Field(default_factory=FareConfig)
    orders: OrderConfig = Field(default_factory=OrderConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Return the process-wide settings, read from the environment once."""
    return AppConfig()


def reset_config() -> None:
    """Drop the cached settings so the next get_config() re-reads the environment."""
    get_config.cache_clear()
