# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared pytest fixtures for idempotency handler tests.

RecordingIdempotencyStore wraps the in-memory store with call counters and
queued failure injection, so coordinator behavior can be tested against
real create-if-absent semantics. With attach_conflict_record off, conflicts
carry no record, like stores whose conditional write cannot return the
existing row, which forces the coordinator to read it back.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from datetime import datetime

import pytest

from omnibase_idempotency.errors import IdempotencyItemAlreadyExistsError
from omnibase_idempotency.handler import IdempotencyHandler
from omnibase_idempotency.models import ModelIdempotencyConfig, ModelIdempotencyRecord
from omnibase_idempotency.persistence import (
    IdempotencyPersistenceLayer,
    InMemoryIdempotencyStore,
)
from tests.helpers.deterministic import DeterministicClock


class RecordingIdempotencyStore(InMemoryIdempotencyStore):
    """In-memory store that counts calls and raises queued failures."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        super().__init__(clock=clock)
        self.calls: dict[str, int] = defaultdict(int)
        self._failures: dict[str, list[BaseException]] = defaultdict(list)
        self.attach_conflict_record = True

    def fail_next(self, operation: str, error: BaseException) -> None:
        """Raise error on the next call of operation."""
        self._failures[operation].append(error)

    def _record_call(self, operation: str) -> None:
        self.calls[operation] += 1
        if self._failures[operation]:
            raise self._failures[operation].pop(0)

    async def create(self, record: ModelIdempotencyRecord) -> None:
        self._record_call("create")
        try:
            await super().create(record)
        except IdempotencyItemAlreadyExistsError as e:
            if self.attach_conflict_record:
                raise
            raise IdempotencyItemAlreadyExistsError(e.message, record=None) from None

    async def read(self, idempotency_key: str) -> ModelIdempotencyRecord:
        self._record_call("read")
        return await super().read(idempotency_key)

    async def update(self, record: ModelIdempotencyRecord) -> None:
        self._record_call("update")
        await super().update(record)

    async def delete(self, idempotency_key: str) -> None:
        self._record_call("delete")
        await super().delete(idempotency_key)


@pytest.fixture
def recording_store(clock: DeterministicClock) -> RecordingIdempotencyStore:
    return RecordingIdempotencyStore(clock=clock)


@pytest.fixture
def handler_config() -> ModelIdempotencyConfig:
    """Keyed on order_id, no retry delay."""
    return ModelIdempotencyConfig(
        key_extraction_expression="order_id",
        retry_delay_seconds=0,
    )


@pytest.fixture
def make_handler(
    recording_store: RecordingIdempotencyStore,
    handler_config: ModelIdempotencyConfig,
    clock: DeterministicClock,
) -> Callable[..., IdempotencyHandler]:
    """Factory building a handler over the recording store."""

    def _make(
        function: Callable[..., object],
        config: ModelIdempotencyConfig | None = None,
        **handler_kwargs: object,
    ) -> IdempotencyHandler:
        resolved = config or handler_config
        persistence = IdempotencyPersistenceLayer(
            recording_store, resolved, key_prefix="test", clock=clock
        )
        return IdempotencyHandler(function, persistence, resolved, **handler_kwargs)  # type: ignore[arg-type]

    return _make
