# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Deterministic clock for expiry-dependent tests.

Example usage:
    >>> clock = DeterministicClock()
    >>> t1 = clock.now()
    >>> clock.advance(60)
    >>> (clock.now() - t1).total_seconds()
    60.0
"""

from datetime import UTC, datetime, timedelta

__all__ = ["DeterministicClock"]

DEFAULT_START = datetime(2024, 1, 1, tzinfo=UTC)


class DeterministicClock:
    """Manually advanced clock, usable wherever a ``clock`` callable is accepted.

    Instances are callable, so ``clock=DeterministicClock()`` can be passed
    straight to stores and the persistence layer.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._now: datetime = start or DEFAULT_START

    def __call__(self) -> datetime:
        return self._now

    def now(self) -> datetime:
        """Return the current simulated time."""
        return self._now

    def advance(self, seconds: float) -> None:
        """Move the clock forward (or backward, if negative) by seconds."""
        self._now += timedelta(seconds=seconds)

    def set_time(self, new_time: datetime) -> None:
        self._now = new_time
