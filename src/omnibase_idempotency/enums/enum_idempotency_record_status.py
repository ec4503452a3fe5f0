# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Record Status Enumeration.

Defines the lifecycle states of a persisted idempotency record.
"""

from enum import Enum


class EnumIdempotencyRecordStatus(str, Enum):
    """Lifecycle states of an idempotency record.

    Only IN_PROGRESS and COMPLETED are ever written to a store. EXPIRED is
    derived at read time from the record's expiry timestamp and never needs
    a write.

    Attributes:
        IN_PROGRESS: An execution holds exclusivity for the key.
        COMPLETED: The execution finished and its response is stored.
        EXPIRED: The record outlived its TTL and is eligible for a fresh attempt.
    """

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"


__all__ = ["EnumIdempotencyRecordStatus"]
