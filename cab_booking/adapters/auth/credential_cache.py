"""Thread-safe bearer token cache with single-flight refresh.

Holds at most one credential. A token is handed out while more than the
safety margin remains before its expiry; otherwise exactly one caller
refreshes it while concurrent callers wait for that refresh's outcome.

Key properties:
- Single in-flight refresh guarded by a Condition
- Expiry read from the token's own ``exp`` claim, with a bounded fallback
- Failed refreshes never replace the cached credential
- Every wait is bounded by the caller's timeout
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ...config import AuthConfig, get_config
from ...domain.errors import (
    ExpiredAndUnrefreshable,
    SigningEndpointUnreachable,
)
from ...domain.models import CachedCredential
from ...ports.auth import TokenSignerPort
from .claims import decode_expiry


@dataclass
class _Refresh:
    """Outcome of one in-flight refresh, shared with waiting callers."""

    done: bool = False
    token: Optional[str] = None
    error: Optional[Exception] = None


@dataclass
class CredentialCache:
    """Caches one bearer token and refreshes it before it expires.

    This cache implements TokenProviderPort. Construct one per process
    (the container does) and pass it to whatever needs authenticated calls.

    Attributes:
        signer: Performs the token-for-key exchange
        config: Safety margin, fallback lifetime and default timeout
        clock: Source of the current epoch time

    Example:
        cache = CredentialCache(signer=HttpTokenSigner())
        headers = {"Authorization": f"Bearer {cache.get_token()}"}
    """

    signer: TokenSignerPort
    config: AuthConfig = field(default_factory=lambda: get_config().auth)
    clock: Callable[[], float] = field(default_factory=lambda: time.time, repr=False)

    _credential: Optional[CachedCredential] = field(default=None, init=False, repr=False)
    _inflight: Optional[_Refresh] = field(default=None, init=False, repr=False)
    _cond: threading.Condition = field(default_factory=threading.Condition, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    # Statistics
    _hits: int = field(default=0, init=False, repr=False)
    _refreshes: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def get_token(self, timeout: Optional[float] = None) -> str:
        """Return a bearer token valid beyond the safety margin.

        Args:
            timeout: Upper bound in seconds for the signing call or for
                waiting on another caller's refresh.

        Returns:
            The bearer token.

        Raises:
            SigningEndpointUnreachable: Endpoint down and nothing cached, or
                the wait for another caller's refresh timed out with no
                unexpired token to fall back on.
            InvalidSigningResponse: Endpoint answered without a usable token.
            ExpiredAndUnrefreshable: Refresh failed and the cached token has
                expired.
        """
        timeout = self.config.refresh_timeout_seconds if timeout is None else timeout

        with self._cond:
            credential = self._credential
            if credential is not None and credential.is_fresh(
                self.clock(), self.config.safety_margin_seconds
            ):
                self._hits += 1
                return credential.token

            if self._inflight is not None:
                return self._await(self._inflight, timeout)

            flight = _Refresh()
            self._inflight = flight
            self._refreshes += 1

        # Only the leader gets here; the signing call runs outside the lock.
        try:
            token = self._refresh(credential, timeout)
        except Exception as e:
            self._settle(flight, error=e)
            raise

        self._settle(flight, token=token)
        return token

    def current(self) -> Optional[CachedCredential]:
        """Return the cached credential, fresh or not."""
        with self._cond:
            return self._credential

    def invalidate(self) -> None:
        """Drop the cached credential so the next call refreshes."""
        with self._cond:
            if self._credential is not None:
                self._logger.debug("Cached token invalidated")
            self._credential = None

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics.

        Returns:
            Dictionary with hit and refresh counts and the current expiry.
        """
        with self._cond:
            return {
                "hits": self._hits,
                "refreshes": self._refreshes,
                "expires_at": self._credential.expires_at if self._credential else None,
            }

    def _await(self, flight: _Refresh, timeout: float) -> str:
        # Called with the condition held.
        if not self._cond.wait_for(lambda: flight.done, timeout=timeout):
            credential = self._credential
            if credential is not None and not credential.is_expired(self.clock()):
                self._logger.warning(
                    "Token refresh still running, reusing current token",
                    extra={"timeout": timeout, "expires_at": credential.expires_at},
                )
                return credential.token
            raise SigningEndpointUnreachable(
                f"Timed out after {timeout}s waiting for token refresh"
            )
        if flight.error is not None:
            raise flight.error
        if flight.token is None:
            raise ExpiredAndUnrefreshable("Token refresh finished without a token")
        return flight.token

    def _settle(
        self,
        flight: _Refresh,
        token: Optional[str] = None,
        error: Optional[Exception] = None,
    ) -> None:
        with self._cond:
            flight.token = token
            flight.error = error
            flight.done = True
            self._inflight = None
            self._cond.notify_all()

    def _refresh(self, previous: Optional[CachedCredential], timeout: float) -> str:
        self._logger.debug("Refreshing token", extra={"timeout": timeout})

        try:
            token = self.signer.fetch_token(timeout)
        except SigningEndpointUnreachable as e:
            return self._fallback(previous, e)

        now = self.clock()
        expiry = decode_expiry(token)
        if expiry is None:
            self._logger.debug(
                "Token has no readable expiry, using default lifetime",
                extra={"lifetime": self.config.default_lifetime_seconds},
            )
            expires_at = now + self.config.default_lifetime_seconds
        else:
            expires_at = float(expiry)

        credential = CachedCredential(
            token=token,
            expires_at=expires_at,
            subject=self.config.subject,
        )
        with self._cond:
            self._credential = credential

        if not credential.is_fresh(now, self.config.safety_margin_seconds):
            self._logger.warning(
                "Signed token expires within the safety margin",
                extra={"expires_in": expires_at - now},
            )
        else:
            self._logger.info("Token refreshed", extra={"expires_in": expires_at - now})
        return token

    def _fallback(
        self, previous: Optional[CachedCredential], error: SigningEndpointUnreachable
    ) -> str:
        if previous is None:
            raise error

        if not previous.is_expired(self.clock()):
            self._logger.warning(
                "Signing endpoint unreachable, reusing current token",
                extra={"expires_at": previous.expires_at, "error": str(error)},
            )
            return previous.token

        raise ExpiredAndUnrefreshable(
            "Token expired and could not be refreshed", cause=error
        ) from error
