# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Datetime normalization utilities for idempotency records.

Idempotency records carry absolute expiry timestamps that are compared
against the current time on every read. Naive datetimes would make those
comparisons depend on the host timezone, so every timestamp entering a
record is normalized to an aware UTC datetime.

Guidelines:
    - All datetimes are timezone-aware UTC
    - Naive datetimes trigger a warning and are interpreted as UTC
    - Stores that persist epoch numbers convert through the helpers below

Example:
    >>> from datetime import datetime, UTC
    >>> from omnibase_idempotency.utils import ensure_timezone_aware
    >>>
    >>> aware_dt = datetime.now(UTC)
    >>> ensure_timezone_aware(aware_dt) == aware_dt
    True
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_timezone_aware(
    dt: datetime,
    *,
    assume_utc: bool = True,
    warn_on_naive: bool = True,
    context: str | None = None,
) -> datetime:
    """Ensure a datetime is timezone-aware, converting naive datetimes to UTC.

    Behavior:
        - Timezone-aware datetimes: converted to UTC
        - Naive datetimes with assume_utc=True: tagged as UTC with a warning
        - Naive datetimes with assume_utc=False: ValueError

    Args:
        dt: The datetime to validate/normalize.
        assume_utc: If True (default), naive datetimes are assumed to be UTC.
            If False, naive datetimes raise ValueError.
        warn_on_naive: If True (default), logs a warning when a naive datetime
            is converted.
        context: Optional context string for the warning message (e.g. field
            name).

    Returns:
        A timezone-aware UTC datetime.

    Raises:
        ValueError: If dt is naive and assume_utc=False.
    """
    if is_timezone_aware(dt):
        return dt.astimezone(UTC)

    if not assume_utc:
        context_msg = f" (context: {context})" if context else ""
        raise ValueError(
            f"Naive datetime not allowed{context_msg}. "
            "Use timezone-aware datetime (e.g., datetime.now(UTC))."
        )

    if warn_on_naive:
        context_msg = f" for '{context}'" if context else ""
        logger.warning(
            "Converting naive datetime to UTC%s",
            context_msg,
            extra={
                "naive_datetime": dt.isoformat(),
                "context": context,
                "action": "converted_to_utc",
            },
        )

    # replace() rather than astimezone(): astimezone() reads naive values as local time
    return dt.replace(tzinfo=UTC)


def is_timezone_aware(dt: datetime) -> bool:
    """Check if a datetime is timezone-aware.

    Args:
        dt: The datetime to check.

    Returns:
        True if datetime is timezone-aware, False if naive.
    """
    return dt.tzinfo is not None and dt.utcoffset() is not None


def to_epoch_seconds(dt: datetime) -> int:
    """Convert a datetime to whole seconds since the UNIX epoch."""
    return int(ensure_timezone_aware(dt).timestamp())


def to_epoch_decimal(dt: datetime) -> Decimal:
    """Convert a datetime to exact fractional seconds since the UNIX epoch.

    Computed from the timedelta rather than a float timestamp, so microseconds
    survive unchanged.
    """
    delta = ensure_timezone_aware(dt) - _EPOCH
    micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    return Decimal(micros).scaleb(-6)


def to_epoch_millis(dt: datetime) -> int:
    """Convert a datetime to whole milliseconds since the UNIX epoch."""
    return int(ensure_timezone_aware(dt).timestamp() * 1000)


def from_epoch_seconds(value: float) -> datetime:
    """Build an aware UTC datetime from seconds since the UNIX epoch."""
    return datetime.fromtimestamp(float(value), tz=UTC)


def from_epoch_millis(value: float) -> datetime:
    """Build an aware UTC datetime from milliseconds since the UNIX epoch."""
    return datetime.fromtimestamp(float(value) / 1000, tz=UTC)


__all__: list[str] = [
    "ensure_timezone_aware",
    "from_epoch_millis",
    "from_epoch_seconds",
    "is_timezone_aware",
    "to_epoch_decimal",
    "to_epoch_millis",
    "to_epoch_seconds",
    "utc_now",
]
