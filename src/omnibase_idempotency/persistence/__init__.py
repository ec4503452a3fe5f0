# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency persistence: record stores, local cache and orchestration.

Exports:
    ProtocolIdempotencyRecordStore: Atomic create/read/update/delete contract
    InMemoryIdempotencyStore: Single-process store for tests and development
    PostgresIdempotencyStore: asyncpg-backed store
    DynamoDBIdempotencyStore: boto3-backed store
    IdempotencyPersistenceLayer: Fingerprinting, caching and validation
    LRUCache: Process-local least-recently-used cache
"""

from omnibase_idempotency.persistence.cache_lru import CacheEntry, LRUCache
from omnibase_idempotency.persistence.persistence_layer import (
    DEFAULT_KEY_PREFIX,
    FUNCTION_NAME_ENV,
    IdempotencyPersistenceLayer,
)
from omnibase_idempotency.persistence.protocol_idempotency_record_store import (
    ProtocolIdempotencyRecordStore,
)
from omnibase_idempotency.persistence.store_dynamodb import DynamoDBIdempotencyStore
from omnibase_idempotency.persistence.store_inmemory import InMemoryIdempotencyStore
from omnibase_idempotency.persistence.store_postgres import PostgresIdempotencyStore

__all__: list[str] = [
    "DEFAULT_KEY_PREFIX",
    "FUNCTION_NAME_ENV",
    "CacheEntry",
    "DynamoDBIdempotencyStore",
    "IdempotencyPersistenceLayer",
    "InMemoryIdempotencyStore",
    "LRUCache",
    "PostgresIdempotencyStore",
    "ProtocolIdempotencyRecordStore",
]
