# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol definition for idempotency record stores.

This module defines the ProtocolIdempotencyRecordStore protocol: the four
raw operations a key-value medium must offer to back the idempotency
engine. Hashing, caching, expiry computation and payload validation live in
IdempotencyPersistenceLayer above this contract; stores only move records.

Protocol Methods:
    - create: Atomic create-if-absent (the mutual-exclusion primitive)
    - read: Point read by idempotency key
    - update: Unconditional overwrite
    - delete: Idempotent removal

Retries are not implemented at this layer. Retry policy belongs to
IdempotencyHandler.

Implementations:
    - InMemoryIdempotencyStore: In-process store for tests and single-process use
    - PostgresIdempotencyStore: PostgreSQL table via asyncpg
    - DynamoDBIdempotencyStore: DynamoDB table via boto3
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from omnibase_idempotency.models.model_idempotency_record import (
    ModelIdempotencyRecord,
)


@runtime_checkable
class ProtocolIdempotencyRecordStore(Protocol):
    """Protocol for idempotency record store implementations.

    Key Properties:
        - Atomic: create must be a single conditional write in the backing
          medium. It is the only serialization point between processes.
        - Expiry-aware: a stored record whose expiry has passed does not
          block create; it is replaced in the same atomic write.
        - Orphan-preserving: an IN_PROGRESS record whose in-progress deadline
          passed but whose expiry has not still blocks create.

    Example:
        >>> store: ProtocolIdempotencyRecordStore = InMemoryIdempotencyStore()
        >>> await store.create(record)
        >>> stored = await store.read(record.idempotency_key)
    """

    async def create(self, record: ModelIdempotencyRecord) -> None:
        """Persist a record only if no live record exists for its key.

        Args:
            record: Record to create, normally IN_PROGRESS.

        Raises:
            IdempotencyItemAlreadyExistsError: If a live record exists.
            IdempotencyPersistenceLayerError: On unexpected store failure.
        """
        ...

    async def read(self, idempotency_key: str) -> ModelIdempotencyRecord:
        """Fetch the record stored under a key.

        Args:
            idempotency_key: Key to read.

        Returns:
            The stored record. Expired records are returned as stored; the
            caller derives the effective status.

        Raises:
            IdempotencyItemNotFoundError: If no record exists.
            IdempotencyPersistenceLayerError: On unexpected store failure.
        """
        ...

    async def update(self, record: ModelIdempotencyRecord) -> None:
        """Overwrite the record stored under record.idempotency_key.

        Raises:
            IdempotencyPersistenceLayerError: On unexpected store failure.
        """
        ...

    async def delete(self, idempotency_key: str) -> None:
        """Remove the record for a key. Deleting a missing key is not an error.

        Raises:
            IdempotencyPersistenceLayerError: On unexpected store failure.
        """
        ...


__all__ = ["ProtocolIdempotencyRecordStore"]
