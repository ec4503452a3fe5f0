# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""ONEX Idempotency - at-most-once execution over a shared record store.

This package guarantees that an operation identified by a request
fingerprint runs its side effects at most once, even when invoked
concurrently or retried after a partial failure. The only coordination
channel is the record store's atomic conditional create.

Key Components:
    - IdempotencyHandler: coordinator state machine with bounded retry
    - make_idempotent / idempotent: wrapping of operations
    - IdempotencyPersistenceLayer: fingerprinting, local cache, validation
    - Record stores: in-memory, PostgreSQL (asyncpg), DynamoDB (boto3)
    - ModelIdempotencyConfig: key extraction, TTL, cache and retry settings
"""

from omnibase_idempotency.errors import (
    IdempotencyAlreadyInProgressError,
    IdempotencyConfigurationError,
    IdempotencyError,
    IdempotencyInconsistentStateError,
    IdempotencyKeyError,
    IdempotencyPersistenceLayerError,
    IdempotencyValidationError,
)
from omnibase_idempotency.handler import (
    IdempotencyHandler,
    idempotent,
    make_idempotent,
)
from omnibase_idempotency.models import ModelIdempotencyConfig, ModelIdempotencyRecord
from omnibase_idempotency.persistence import (
    DynamoDBIdempotencyStore,
    IdempotencyPersistenceLayer,
    InMemoryIdempotencyStore,
    PostgresIdempotencyStore,
)

__all__: list[str] = [
    "DynamoDBIdempotencyStore",
    "IdempotencyAlreadyInProgressError",
    "IdempotencyConfigurationError",
    "IdempotencyError",
    "IdempotencyHandler",
    "IdempotencyInconsistentStateError",
    "IdempotencyKeyError",
    "IdempotencyPersistenceLayer",
    "IdempotencyPersistenceLayerError",
    "IdempotencyValidationError",
    "InMemoryIdempotencyStore",
    "ModelIdempotencyConfig",
    "ModelIdempotencyRecord",
    "PostgresIdempotencyStore",
    "idempotent",
    "make_idempotent",
]
