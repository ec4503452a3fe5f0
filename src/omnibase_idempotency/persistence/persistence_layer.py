# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Persistence Layer.

Orchestration that sits between IdempotencyHandler and a raw record store:

    - Fingerprinting: JMESPath extraction, missing-key policy, canonical
      hashing into ``<prefix>#<digest>`` keys
    - Record construction with TTL and in-progress deadlines
    - Optional process-local LRU cache of read records
    - Payload validation against the stored payload hash

The store is reached only through ProtocolIdempotencyRecordStore, so the
same orchestration runs over the in-memory, PostgreSQL and DynamoDB stores.

Cache Rules:
    - IN_PROGRESS records are never cached: their owner may complete them
      in another process, and a cached copy would report "in progress"
      forever.
    - Expired entries are evicted on lookup.
    - Deleted keys are evicted.
    - The cache is a latency optimization for reads only. Exclusivity is
      always decided by the store's conditional create.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from datetime import datetime, timedelta

from pydantic import JsonValue

from omnibase_idempotency.enums import EnumIdempotencyRecordStatus
from omnibase_idempotency.errors import (
    IdempotencyConfigurationError,
    IdempotencyKeyError,
    IdempotencyValidationError,
    ModelIdempotencyErrorContext,
)
from omnibase_idempotency.models.model_idempotency_config import (
    ModelIdempotencyConfig,
)
from omnibase_idempotency.models.model_idempotency_record import (
    ModelIdempotencyRecord,
)
from omnibase_idempotency.persistence.cache_lru import LRUCache
from omnibase_idempotency.persistence.protocol_idempotency_record_store import (
    ProtocolIdempotencyRecordStore,
)
from omnibase_idempotency.utils.util_datetime import utc_now
from omnibase_idempotency.utils.util_hashing import (
    generate_hash,
    is_missing_idempotency_key,
)
from omnibase_idempotency.utils.util_jmespath import KeyExtractor, extract

logger = logging.getLogger(__name__)

FUNCTION_NAME_ENV = "AWS_LAMBDA_FUNCTION_NAME"
DEFAULT_KEY_PREFIX = "idempotency"


class IdempotencyPersistenceLayer:
    """Fingerprinting, caching and validation over a record store.

    Constructed once per wrapped function and held for the process lifetime;
    the local cache lives on the instance.

    Example:
        >>> layer = IdempotencyPersistenceLayer(
        ...     InMemoryIdempotencyStore(),
        ...     ModelIdempotencyConfig(key_extraction_expression="order_id"),
        ...     key_prefix="orders",
        ... )
        >>> layer.configure("create_order")
        >>> layer.get_hashed_idempotency_key({"order_id": 42})
        'orders.create_order#a1d0c6e83f027327d8461063f4ac58a6'
    """

    def __init__(
        self,
        store: ProtocolIdempotencyRecordStore,
        config: ModelIdempotencyConfig,
        *,
        key_prefix: str | None = None,
        clock: Callable[[], datetime] | None = None,
        extractor: KeyExtractor = extract,
    ) -> None:
        """Initialize the persistence layer.

        Args:
            store: Record store providing atomic create-if-absent.
            config: Idempotency configuration.
            key_prefix: Scope prefix for keys. Defaults to the
                AWS_LAMBDA_FUNCTION_NAME environment variable, else "idempotency".
            clock: Source of the current time (default: aware UTC now).
            extractor: Expression evaluator used for key and payload extraction.
        """
        self._store = store
        self._config = config
        self._clock = clock or utc_now
        self._extract = extractor
        self._base_prefix = key_prefix or os.getenv(FUNCTION_NAME_ENV) or DEFAULT_KEY_PREFIX
        self._key_prefix = self._base_prefix
        self._function_name: str | None = None
        self._configured = False
        self._cache: LRUCache[str, ModelIdempotencyRecord] | None = (
            LRUCache(max_size=config.local_cache_max_entries)
            if config.enable_local_cache
            else None
        )

    @property
    def store(self) -> ProtocolIdempotencyRecordStore:
        return self._store

    @property
    def config(self) -> ModelIdempotencyConfig:
        return self._config

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    @property
    def cache(self) -> LRUCache[str, ModelIdempotencyRecord] | None:
        """The local record cache, or None when caching is disabled."""
        return self._cache

    def now(self) -> datetime:
        """Return the current time from the configured clock."""
        return self._clock()

    def configure(self, function_name: str | None = None) -> None:
        """Scope keys to a function name.

        Appends ``.<function_name>`` to the key prefix. Calling again with
        the same name is a no-op.

        Raises:
            IdempotencyConfigurationError: If already configured for a
                different function.
        """
        if self._configured:
            if function_name != self._function_name:
                raise IdempotencyConfigurationError(
                    f"Persistence layer already configured for function "
                    f"{self._function_name!r}; cannot reconfigure for {function_name!r}",
                    context=ModelIdempotencyErrorContext(operation="configure"),
                )
            return

        if function_name:
            self._key_prefix = f"{self._base_prefix}.{function_name}"
        self._function_name = function_name
        self._configured = True

    def get_hashed_idempotency_key(self, data: object) -> str:
        """Derive the idempotency key for a payload.

        Raises:
            IdempotencyKeyError: If extraction selects nothing and
                require_extracted_key is set, or the key data cannot be
                fingerprinted.
        """
        key_data = data
        expression = self._config.key_extraction_expression
        if expression is not None:
            key_data = self._extract(expression, data)

        if is_missing_idempotency_key(key_data):
            if self._config.require_extracted_key:
                raise IdempotencyKeyError(
                    "No data found to create a hashed idempotency key",
                    context=ModelIdempotencyErrorContext(operation="get_hashed_idempotency_key"),
                    expression=expression,
                )
            logger.warning(
                "No value found for idempotency key expression, hashing the full payload",
                extra={"expression": expression, "key_prefix": self._key_prefix},
            )
            key_data = data

        digest = self._hash(key_data, "get_hashed_idempotency_key")
        return f"{self._key_prefix}#{digest}"

    def get_hashed_payload(self, data: object) -> str:
        """Hash the validated sub-document, or return "" when validation is off."""
        expression = self._config.payload_validation_expression
        if expression is None:
            return ""
        return self._hash(self._extract(expression, data), "get_hashed_payload")

    def _hash(self, value: object, operation: str) -> str:
        try:
            return generate_hash(value, self._config.hash_algorithm)
        except TypeError as e:
            raise IdempotencyKeyError(
                f"Idempotency payload cannot be fingerprinted: {e}",
                context=ModelIdempotencyErrorContext(operation=operation),
            ) from e

    def validate_payload(self, data: object, record: ModelIdempotencyRecord) -> None:
        """Check that data matches the payload that created record.

        Raises:
            IdempotencyValidationError: On hash mismatch.
        """
        if not self._config.payload_validation_enabled:
            return
        if record.payload_hash != self.get_hashed_payload(data):
            raise IdempotencyValidationError(
                "Payload does not match stored record for this event key",
                record=record,
                context=ModelIdempotencyErrorContext(
                    operation="validate_payload",
                    idempotency_key=record.idempotency_key,
                ),
            )

    def _expiry(self, now: datetime) -> datetime:
        return now + timedelta(seconds=self._config.ttl_seconds)

    async def save_in_progress(
        self,
        data: object,
        remaining_time_in_millis: int | None = None,
    ) -> ModelIdempotencyRecord:
        """Claim the key for data by creating an IN_PROGRESS record.

        Args:
            data: Idempotency payload.
            remaining_time_in_millis: Execution budget of the caller. Bounds
                the in-progress deadline used for orphan detection.

        Returns:
            The record that was created.

        Raises:
            IdempotencyItemAlreadyExistsError: If a live record exists.
            IdempotencyKeyError: If a required key could not be extracted.
        """
        now = self._clock()
        in_progress_expiry: datetime | None = None
        if remaining_time_in_millis is not None:
            in_progress_expiry = now + timedelta(milliseconds=remaining_time_in_millis)
        else:
            logger.warning(
                "Remaining execution time unknown, in-progress record has no deadline",
                extra={"key_prefix": self._key_prefix},
            )

        record = ModelIdempotencyRecord(
            idempotency_key=self.get_hashed_idempotency_key(data),
            status=EnumIdempotencyRecordStatus.IN_PROGRESS,
            expiry_timestamp=self._expiry(now),
            in_progress_expiry_timestamp=in_progress_expiry,
            payload_hash=self.get_hashed_payload(data),
        )
        await self._store.create(record)
        logger.debug(
            "Saved in-progress idempotency record",
            extra={"idempotency_key": record.idempotency_key},
        )
        return record

    async def save_success(self, data: object, result: JsonValue) -> ModelIdempotencyRecord:
        """Mark the key for data COMPLETED with the serialized result."""
        now = self._clock()
        record = ModelIdempotencyRecord(
            idempotency_key=self.get_hashed_idempotency_key(data),
            status=EnumIdempotencyRecordStatus.COMPLETED,
            expiry_timestamp=self._expiry(now),
            payload_hash=self.get_hashed_payload(data),
            response_data=result,
        )
        await self._store.update(record)
        if self._cache is not None:
            self._cache.add(record.idempotency_key, record)
        logger.debug(
            "Saved completed idempotency record",
            extra={"idempotency_key": record.idempotency_key},
        )
        return record

    async def get_record(self, data: object) -> ModelIdempotencyRecord:
        """Return the validated record for data, from the cache when possible.

        Raises:
            IdempotencyItemNotFoundError: If the store has no record.
            IdempotencyValidationError: If payload validation fails.
        """
        key = self.get_hashed_idempotency_key(data)
        now = self._clock()

        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                if cached.is_expired(now):
                    self._cache.remove(key)
                else:
                    logger.debug("Idempotency cache hit", extra={"idempotency_key": key})
                    self.validate_payload(data, cached)
                    return cached

        record = await self._store.read(key)
        if (
            self._cache is not None
            and record.status != EnumIdempotencyRecordStatus.IN_PROGRESS
            and not record.is_expired(now)
        ):
            self._cache.add(key, record)

        self.validate_payload(data, record)
        return record

    async def delete_record(self, data: object) -> None:
        """Delete the record for data, releasing its key."""
        key = self.get_hashed_idempotency_key(data)
        await self._store.delete(key)
        if self._cache is not None:
            self._cache.remove(key)
        logger.debug("Deleted idempotency record", extra={"idempotency_key": key})


__all__: list[str] = [
    "DEFAULT_KEY_PREFIX",
    "FUNCTION_NAME_ENV",
    "IdempotencyPersistenceLayer",
]
