# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Invocation context protocol.

The caller's execution environment reports how much time the current
invocation has left. The handler uses it to bound the in-progress deadline
of the record it creates, which is what distinguishes a healthy in-flight
execution from an orphaned lock.

AWS Lambda context objects satisfy ProtocolInvocationContext as-is.
DeadlineInvocationContext covers environments without such an object.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class ProtocolInvocationContext(Protocol):
    """Execution context able to report its remaining time budget."""

    def get_remaining_time_in_millis(self) -> int:
        """Return the milliseconds left before the invocation is cut off."""
        ...


class DeadlineInvocationContext:
    """Invocation context backed by a monotonic deadline.

    Example:
        >>> context = DeadlineInvocationContext.from_timeout(30.0)
        >>> await create_order(payload, context=context)
    """

    __slots__ = ("_deadline",)

    def __init__(self, deadline: float) -> None:
        """Initialize with a deadline on the time.monotonic() clock."""
        self._deadline = deadline

    @classmethod
    def from_timeout(cls, timeout_seconds: float) -> DeadlineInvocationContext:
        """Create a context expiring timeout_seconds from now."""
        return cls(time.monotonic() + timeout_seconds)

    def get_remaining_time_in_millis(self) -> int:
        return max(0, int((self._deadline - time.monotonic()) * 1000))


__all__: list[str] = ["DeadlineInvocationContext", "ProtocolInvocationContext"]
