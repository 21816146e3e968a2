"""Read the expiry claim of a JWT without verifying its signature.

The token is only inspected to schedule a refresh; the dispatch API
remains the authority on whether it is valid.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
from typing import Optional


def decode_expiry(token: str) -> Optional[int]:
    """Return the ``exp`` claim of ``token`` as epoch seconds.

    Args:
        token: Compact JWT (``header.payload.signature``).

    Returns:
        The expiry, or None if the token or claim is missing or malformed.
    """
    parts = token.split(".") if token else []
    if len(parts) < 2 or not parts[1]:
        return None

    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment))
    except (binascii.Error, ValueError):
        return None

    if not isinstance(payload, dict):
        return None

    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    if not math.isfinite(exp) or exp <= 0:
        return None
    return int(exp)
