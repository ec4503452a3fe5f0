# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""In-memory idempotency record store.

Records live in a dict guarded by an asyncio.Lock, which makes create
atomic between coroutines of one event loop. Nothing is shared between
processes, so this store is for tests and single-process deployments only.

WARNING: Records are lost on process restart.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from omnibase_idempotency.enums import EnumPersistenceBackend
from omnibase_idempotency.errors import (
    IdempotencyItemAlreadyExistsError,
    IdempotencyItemNotFoundError,
    ModelIdempotencyErrorContext,
)
from omnibase_idempotency.models.model_idempotency_record import (
    ModelIdempotencyRecord,
)
from omnibase_idempotency.utils.util_datetime import utc_now

logger = logging.getLogger(__name__)


class InMemoryIdempotencyStore:
    """In-memory implementation of ProtocolIdempotencyRecordStore.

    Example:
        >>> store = InMemoryIdempotencyStore()
        >>> await store.create(record)
        >>> await store.get_record_count()
        1
    """

    __slots__ = ("_clock", "_lock", "_records")

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        """Initialize the in-memory store.

        Args:
            clock: Source of the current time for expiry-aware creates
                (default: aware UTC now).
        """
        self._records: dict[str, ModelIdempotencyRecord] = {}
        self._lock = asyncio.Lock()
        self._clock = clock or utc_now

    async def create(self, record: ModelIdempotencyRecord) -> None:
        """Create the record unless a live record exists for its key.

        Raises:
            IdempotencyItemAlreadyExistsError: If a live record exists.
        """
        async with self._lock:
            existing = self._records.get(record.idempotency_key)
            if existing is not None and not existing.is_expired(self._clock()):
                raise IdempotencyItemAlreadyExistsError(
                    f"Failed to put record for already existing idempotency key: "
                    f"{record.idempotency_key}",
                    record=existing,
                    context=ModelIdempotencyErrorContext(
                        backend=EnumPersistenceBackend.MEMORY,
                        operation="create",
                        idempotency_key=record.idempotency_key,
                    ),
                )
            self._records[record.idempotency_key] = record
            logger.debug(
                "Created idempotency record",
                extra={
                    "idempotency_key": record.idempotency_key,
                    "status": record.status.value,
                    "replaced_expired": existing is not None,
                },
            )

    async def read(self, idempotency_key: str) -> ModelIdempotencyRecord:
        """Return the stored record.

        Raises:
            IdempotencyItemNotFoundError: If no record exists.
        """
        async with self._lock:
            record = self._records.get(idempotency_key)
        if record is None:
            raise IdempotencyItemNotFoundError(
                "Idempotency record not found",
                context=ModelIdempotencyErrorContext(
                    backend=EnumPersistenceBackend.MEMORY,
                    operation="read",
                    idempotency_key=idempotency_key,
                ),
            )
        return record

    async def update(self, record: ModelIdempotencyRecord) -> None:
        """Overwrite the stored record."""
        async with self._lock:
            self._records[record.idempotency_key] = record

    async def delete(self, idempotency_key: str) -> None:
        """Remove the record if present."""
        async with self._lock:
            self._records.pop(idempotency_key, None)

    async def get_record_count(self) -> int:
        """Return the number of stored records (for testing)."""
        async with self._lock:
            return len(self._records)

    async def clear(self) -> None:
        """Remove all records (for testing)."""
        async with self._lock:
            self._records.clear()


__all__: list[str] = ["InMemoryIdempotencyStore"]
