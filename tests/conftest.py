# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pytest configuration and shared fixtures for omnibase_idempotency tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta

import pytest

from omnibase_idempotency.enums import EnumIdempotencyRecordStatus
from omnibase_idempotency.models import ModelIdempotencyRecord
from omnibase_idempotency.persistence import InMemoryIdempotencyStore
from tests.helpers.deterministic import DeterministicClock

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    """Deterministic clock starting at 2024-01-01T00:00:00Z."""
    return DeterministicClock()


@pytest.fixture
def memory_store(clock: DeterministicClock) -> InMemoryIdempotencyStore:
    """In-memory store driven by the deterministic clock."""
    return InMemoryIdempotencyStore(clock=clock)


@pytest.fixture
def make_record(
    clock: DeterministicClock,
) -> Callable[..., ModelIdempotencyRecord]:
    """Factory for records relative to the deterministic clock.

    Offsets are in seconds from the clock's current time; pass None to leave
    a timestamp unset.
    """

    def _make(
        key: str = "idempotency#abc",
        status: EnumIdempotencyRecordStatus = EnumIdempotencyRecordStatus.IN_PROGRESS,
        *,
        expires_in: float | None = 3600,
        in_progress_expires_in: float | None = 30,
        payload_hash: str | None = None,
        response_data: object = None,
    ) -> ModelIdempotencyRecord:
        now = clock.now()
        return ModelIdempotencyRecord(
            idempotency_key=key,
            status=status,
            expiry_timestamp=(
                now + timedelta(seconds=expires_in) if expires_in is not None else None
            ),
            in_progress_expiry_timestamp=(
                now + timedelta(seconds=in_progress_expires_in)
                if in_progress_expires_in is not None
                else None
            ),
            payload_hash=payload_hash,
            response_data=response_data,
        )

    return _make
