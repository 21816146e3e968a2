# dates.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

import dateparser

ASAP_WORDS = {"", "asap", "now", "as soon as possible"}


def parse_pickup_time(text: Optional[str], timezone: str = "Europe/Jersey") -> Optional[datetime]:
    """Parse a rider-supplied pickup time.

    Returns None for "as soon as possible" (empty input included), and an
    aware datetime otherwise. Times without an offset are read in
    ``timezone``.

    Raises:
        ValueError: If the text is not a recognisable date/time.
    """
    if text is None or text.strip().lower() in ASAP_WORDS:
        return None

    dt = dateparser.parse(
        text.strip(),
        languages=["en"],
        settings={
            "TIMEZONE": timezone,
            "RETURN_AS_TIMEZONE_AWARE": True,
            "PREFER_DATES_FROM": "future",
        },
    )
    if dt is None:
        raise ValueError(f"Unrecognised pickup time: {text!r}")
    return dt
