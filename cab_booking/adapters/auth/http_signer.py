"""Token-for-key signer adapter.

Exchanges the dispatch API key for a short-lived JWT:
GET /api/v1/jwt/for-key?key={API_KEY}&sub={SUBJECT}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests

from ...config import AuthConfig, DispatchConfig, get_config
from ...domain.errors import (
    ConfigurationError,
    InvalidSigningResponse,
    SigningEndpointUnreachable,
)

SIGNING_PATH = "/api/v1/jwt/for-key"


@dataclass
class HttpTokenSigner:
    """Signer backed by the dispatch API's token-for-key endpoint.

    This adapter implements TokenSignerPort.

    Attributes:
        config: Dispatch endpoint configuration (domain, API key)
        auth: Token configuration (subject, default timeout)
        session: HTTP session used for the exchange
    """

    config: DispatchConfig = field(default_factory=lambda: get_config().dispatch)
    auth: AuthConfig = field(default_factory=lambda: get_config().auth)
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def url(self) -> str:
        return f"{self.config.base_url}{SIGNING_PATH}"

    def fetch_token(self, timeout: Optional[float] = None) -> str:
        """Obtain a freshly signed bearer token.

        Args:
            timeout: Seconds to wait for the endpoint; defaults to the
                configured refresh timeout.

        Returns:
            The raw token.

        Raises:
            SigningEndpointUnreachable: On timeout, connection error or 5xx.
            InvalidSigningResponse: On 4xx, non-JSON body or missing token.
            ConfigurationError: If no API key is configured.
        """
        if not self.config.api_key:
            raise ConfigurationError(
                "Dispatch API key is not configured",
                setting_name="CAB_DISPATCH_API_KEY",
            )

        timeout = timeout if timeout is not None else self.auth.refresh_timeout_seconds
        params = {"key": self.config.api_key, "sub": self.auth.subject}

        self._logger.debug("Fetching token", extra={"url": self.url, "timeout": timeout})

        try:
            response = self.session.get(self.url, params=params, timeout=timeout)
        except requests.Timeout as e:
            raise SigningEndpointUnreachable(
                f"Signing endpoint timed out after {timeout}s", cause=e
            ) from e
        except requests.RequestException as e:
            raise SigningEndpointUnreachable("Signing endpoint unreachable", cause=e) from e

        if response.status_code >= 500:
            raise SigningEndpointUnreachable(
                f"Signing endpoint error: {response.status_code}",
                status_code=response.status_code,
            )
        if not response.ok:
            self._logger.error(
                "Token request rejected",
                extra={"status": response.status_code, "body": response.text[:200]},
            )
            raise InvalidSigningResponse(
                f"Token request rejected: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidSigningResponse(
                "Signing endpoint returned invalid JSON",
                cause=e,
                status_code=response.status_code,
            ) from e

        token = (data.get("token") or data.get("jwt")) if isinstance(data, dict) else None
        if not token or not isinstance(token, str):
            raise InvalidSigningResponse(
                "No token in signing response", status_code=response.status_code
            )

        self._logger.info("Token obtained", extra={"subject": self.auth.subject})
        return token
