"""Auth adapters - Bearer token signing and caching.

Available implementations:
- HttpTokenSigner: token-for-key exchange over HTTP
- CredentialCache: single-flight caching TokenProviderPort
- StaticTokenProvider: fixed developer token
"""

from .claims import decode_expiry
from .credential_cache import CredentialCache
from .http_signer import HttpTokenSigner
from .static_token import StaticTokenProvider

__all__ = ["CredentialCache", "HttpTokenSigner", "StaticTokenProvider", "decode_expiry"]
