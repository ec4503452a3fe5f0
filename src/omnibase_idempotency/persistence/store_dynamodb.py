# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""DynamoDB-based Idempotency Record Store.

Records are written with the low-level boto3 DynamoDB client. Exclusivity
comes from a conditional PutItem: the write succeeds when no item exists
for the key or when the stored item's expiry has passed, so an expired
record is replaced in the same request. A failed condition is reported as
IdempotencyItemAlreadyExistsError carrying the existing record.

Item Layout (default attribute names):
    id                      S  idempotency key (or static partition value)
    expiration              N  record expiry, epoch seconds (usable as table TTL)
    in_progress_expiration  N  in-progress deadline, epoch milliseconds
    status                  S  IN_PROGRESS | COMPLETED
    data                    S  JSON-encoded response data
    validation              S  payload hash

boto3 is synchronous; every request runs in a worker thread via
asyncio.to_thread so the event loop is never blocked.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, ReadTimeoutError
from botocore.exceptions import ConnectionError as BotoConnectionError

from omnibase_idempotency.enums import EnumPersistenceBackend
from omnibase_idempotency.errors import (
    IdempotencyItemAlreadyExistsError,
    IdempotencyItemNotFoundError,
    IdempotencyPersistenceConnectionError,
    IdempotencyPersistenceLayerError,
    IdempotencyPersistenceTimeoutError,
    ModelIdempotencyErrorContext,
)
from omnibase_idempotency.models.model_dynamodb_idempotency_store_config import (
    ModelDynamoDBIdempotencyStoreConfig,
)
from omnibase_idempotency.models.model_idempotency_record import (
    ModelIdempotencyRecord,
)
from omnibase_idempotency.utils.util_datetime import (
    from_epoch_millis,
    from_epoch_seconds,
    to_epoch_decimal,
    to_epoch_millis,
    to_epoch_seconds,
    utc_now,
)

logger = logging.getLogger(__name__)

_SER = TypeSerializer()
_DESER = TypeDeserializer()

_CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class DynamoDBIdempotencyStore:
    """DynamoDB implementation of ProtocolIdempotencyRecordStore.

    Example:
        >>> config = ModelDynamoDBIdempotencyStoreConfig(table_name="idempotency")
        >>> store = DynamoDBIdempotencyStore(config)
        >>> await store.create(record)
    """

    def __init__(
        self,
        config: ModelDynamoDBIdempotencyStoreConfig,
        client: Any | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the DynamoDB idempotency store.

        Args:
            config: Table name, attribute names and client settings.
            client: Pre-built boto3 DynamoDB client. Created lazily from the
                config when omitted.
            clock: Source of the current time for expiry-aware creates.
        """
        self._config = config
        self._client = client
        self._clock = clock or utc_now

    def _get_client(self) -> Any:
        """Get (or create) the DynamoDB client."""
        if self._client is None:
            self._client = boto3.client(
                "dynamodb",
                region_name=self._config.region_name,
                endpoint_url=self._config.endpoint_url,
                config=Config(
                    retries={"max_attempts": self._config.max_attempts, "mode": "standard"}
                ),
            )
        return self._client

    def _context(
        self, operation: str, idempotency_key: str | None = None
    ) -> ModelIdempotencyErrorContext:
        return ModelIdempotencyErrorContext(
            backend=EnumPersistenceBackend.DYNAMODB,
            operation=operation,
            target_name=self._config.table_name,
            idempotency_key=idempotency_key,
        )

    def _key(self, idempotency_key: str) -> dict[str, Any]:
        cfg = self._config
        if cfg.sort_key_attr is not None:
            return {
                cfg.key_attr: _SER.serialize(cfg.get_static_pk_value()),
                cfg.sort_key_attr: _SER.serialize(idempotency_key),
            }
        return {cfg.key_attr: _SER.serialize(idempotency_key)}

    def _to_item(self, record: ModelIdempotencyRecord) -> dict[str, Any]:
        cfg = self._config
        item = self._key(record.idempotency_key)
        item[cfg.status_attr] = _SER.serialize(record.status.value)
        if record.expiry_timestamp is not None:
            item[cfg.expiry_attr] = _SER.serialize(to_epoch_seconds(record.expiry_timestamp))
        if record.in_progress_expiry_timestamp is not None:
            item[cfg.in_progress_expiry_attr] = _SER.serialize(
                to_epoch_millis(record.in_progress_expiry_timestamp)
            )
        if record.payload_hash is not None:
            item[cfg.validation_key_attr] = _SER.serialize(record.payload_hash)
        if record.response_data is not None:
            item[cfg.data_attr] = _SER.serialize(json.dumps(record.response_data))
        return item

    def _from_item(self, item: dict[str, Any]) -> ModelIdempotencyRecord:
        cfg = self._config
        values = {k: _DESER.deserialize(v) for k, v in item.items()}
        key_attr = cfg.sort_key_attr or cfg.key_attr

        expiry = values.get(cfg.expiry_attr)
        in_progress_expiry = values.get(cfg.in_progress_expiry_attr)
        data = values.get(cfg.data_attr)

        return ModelIdempotencyRecord(
            idempotency_key=values[key_attr],
            status=values[cfg.status_attr],
            expiry_timestamp=(
                from_epoch_seconds(float(expiry)) if expiry is not None else None
            ),
            in_progress_expiry_timestamp=(
                from_epoch_millis(float(in_progress_expiry))
                if in_progress_expiry is not None
                else None
            ),
            payload_hash=values.get(cfg.validation_key_attr),
            response_data=json.loads(data) if data is not None else None,
        )

    async def _call(
        self,
        operation: str,
        idempotency_key: str | None,
        method_name: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Run one client request in a worker thread and map botocore errors.

        ConditionalCheckFailedException is re-raised untouched for the caller.
        """
        client = self._get_client()
        method = getattr(client, method_name)
        try:
            return await asyncio.to_thread(method, **kwargs)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == _CONDITIONAL_CHECK_FAILED:
                raise
            raise IdempotencyPersistenceLayerError(
                f"DynamoDB {method_name} failed during {operation}",
                context=self._context(operation, idempotency_key),
                aws_error_code=e.response.get("Error", {}).get("Code"),
            ) from e
        except ReadTimeoutError as e:
            raise IdempotencyPersistenceTimeoutError(
                f"DynamoDB {method_name} timed out during {operation}",
                context=self._context(operation, idempotency_key),
            ) from e
        except BotoConnectionError as e:
            raise IdempotencyPersistenceConnectionError(
                f"Could not reach DynamoDB during {operation}",
                context=self._context(operation, idempotency_key),
            ) from e
        except BotoCoreError as e:
            raise IdempotencyPersistenceLayerError(
                f"DynamoDB client error during {operation}: {type(e).__name__}",
                context=self._context(operation, idempotency_key),
            ) from e

    async def create(self, record: ModelIdempotencyRecord) -> None:
        """Put the record unless a live item exists for its key.

        Raises:
            IdempotencyItemAlreadyExistsError: If a live item exists. The
                existing record is attached when DynamoDB returns it.
            IdempotencyPersistenceLayerError: On any other client failure.
        """
        cfg = self._config
        # Stored expiry is whole seconds (DynamoDB TTL format) but :now keeps its
        # fraction, so an item counts as expired exactly when the record read
        # back from it does.
        now_seconds = to_epoch_decimal(self._clock())
        key_attr = cfg.sort_key_attr or cfg.key_attr

        try:
            await self._call(
                "create",
                record.idempotency_key,
                "put_item",
                TableName=cfg.table_name,
                Item=self._to_item(record),
                ConditionExpression="attribute_not_exists(#id) OR #expiry < :now",
                ExpressionAttributeNames={"#id": key_attr, "#expiry": cfg.expiry_attr},
                ExpressionAttributeValues={":now": _SER.serialize(now_seconds)},
                ReturnValuesOnConditionCheckFailure="ALL_OLD",
            )
        except ClientError as e:
            old_item = e.response.get("Item")
            existing = self._from_item(old_item) if old_item else None
            logger.debug(
                "Idempotency record already exists",
                extra={"idempotency_key": record.idempotency_key},
            )
            raise IdempotencyItemAlreadyExistsError(
                f"Failed to put record for already existing idempotency key: "
                f"{record.idempotency_key}",
                record=existing,
                context=self._context("create", record.idempotency_key),
            ) from e

        logger.debug(
            "Created idempotency record",
            extra={
                "idempotency_key": record.idempotency_key,
                "status": record.status.value,
            },
        )

    async def read(self, idempotency_key: str) -> ModelIdempotencyRecord:
        """Fetch the item for a key with a strongly consistent read.

        Raises:
            IdempotencyItemNotFoundError: If no item exists.
        """
        response = await self._call(
            "read",
            idempotency_key,
            "get_item",
            TableName=self._config.table_name,
            Key=self._key(idempotency_key),
            ConsistentRead=True,
        )
        item = response.get("Item")
        if not item:
            raise IdempotencyItemNotFoundError(
                "Idempotency record not found",
                context=self._context("read", idempotency_key),
            )
        return self._from_item(item)

    async def update(self, record: ModelIdempotencyRecord) -> None:
        """Overwrite the item for the record's key."""
        await self._call(
            "update",
            record.idempotency_key,
            "put_item",
            TableName=self._config.table_name,
            Item=self._to_item(record),
        )
        logger.debug(
            "Updated idempotency record",
            extra={
                "idempotency_key": record.idempotency_key,
                "status": record.status.value,
            },
        )

    async def delete(self, idempotency_key: str) -> None:
        """Delete the item for a key. Missing keys are ignored."""
        await self._call(
            "delete",
            idempotency_key,
            "delete_item",
            TableName=self._config.table_name,
            Key=self._key(idempotency_key),
        )
        logger.debug(
            "Deleted idempotency record",
            extra={"idempotency_key": idempotency_key},
        )


__all__: list[str] = ["DynamoDBIdempotencyStore"]
