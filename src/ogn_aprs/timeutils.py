"""Small time utilities used by the encoders and formatters."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_hhmmss(now: datetime | None = None) -> str:
    """Return the UTC time of day formatted as ``hhmmss``.

    Naive datetimes are taken to be UTC already.
    """
    moment = now or utc_now()
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%H%M%S")
