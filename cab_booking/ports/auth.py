"""Auth ports - Abstractions for obtaining dispatch API bearer tokens.

The signer performs the raw token-for-key exchange; the provider is
what the rest of the application asks for a usable token.
"""

from __future__ import annotations

from typing import Optional, Protocol


class TokenSignerPort(Protocol):
    """Port for the upstream token-for-key exchange.

    Implementation: adapters/auth/http_signer.py
    """

    def fetch_token(self, timeout: Optional[float] = None) -> str:
        """Obtain a freshly signed bearer token.

        Args:
            timeout: Seconds to wait for the signing endpoint.

        Returns:
            The raw token.

        Raises:
            SigningEndpointUnreachable: On network failure or 5xx.
            InvalidSigningResponse: If the response has no usable token.
        """
        ...


class TokenProviderPort(Protocol):
    """Port for components that need a valid bearer token.

    Implementations:
    - adapters/auth/credential_cache.py (CredentialCache) - Production
    - adapters/auth/static_token.py (StaticTokenProvider) - Development
    """

    def get_token(self, timeout: Optional[float] = None) -> str:
        """Return a token valid for at least the safety margin.

        Args:
            timeout: Upper bound on time spent waiting for a refresh.

        Returns:
            The bearer token.

        Raises:
            AuthError: If no valid token can be produced.
        """
        ...
