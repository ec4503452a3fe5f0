# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Handler.

Coordinates one idempotent execution of a wrapped operation:

    1. Derive the key and try to create an IN_PROGRESS record.
    2. If creation succeeded, this call holds the key: run the operation,
       store the result as COMPLETED and return it. If the operation fails,
       delete the record and re-raise the operation's error unchanged.
    3. If a live record already exists, classify it:

       ==========================  =========================================
       Existing record             Outcome
       ==========================  =========================================
       COMPLETED                   stored response replayed, op not invoked
       IN_PROGRESS, before         IdempotencyAlreadyInProgressError
       in-progress deadline
       IN_PROGRESS, deadline       IdempotencyInconsistentStateError
       passed (orphaned lock)
       EXPIRED                     IdempotencyInconsistentStateError
       ==========================  =========================================

The public entry point handle() retries IdempotencyAlreadyInProgressError a
bounded number of times, selected by error code. No other error is retried.

Store calls happen before and after the operation, never during it, so no
store connection is held while the operation runs.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Callable

from pydantic import JsonValue

from omnibase_idempotency.enums import (
    EnumIdempotencyErrorCode,
    EnumIdempotencyRecordStatus,
)
from omnibase_idempotency.errors import (
    IdempotencyAlreadyInProgressError,
    IdempotencyError,
    IdempotencyInconsistentStateError,
    IdempotencyItemAlreadyExistsError,
    IdempotencyItemNotFoundError,
    IdempotencyPersistenceLayerError,
    ModelIdempotencyErrorContext,
)
from omnibase_idempotency.handler.protocol_invocation_context import (
    ProtocolInvocationContext,
)
from omnibase_idempotency.handler.serializer_response import (
    NoOpSerializer,
    ProtocolResponseSerializer,
)
from omnibase_idempotency.models.model_idempotency_config import (
    ModelIdempotencyConfig,
)
from omnibase_idempotency.models.model_idempotency_record import (
    ModelIdempotencyRecord,
)
from omnibase_idempotency.persistence.persistence_layer import (
    IdempotencyPersistenceLayer,
)

logger = logging.getLogger(__name__)

ResponseHook = Callable[[object, ModelIdempotencyRecord], object]


class IdempotencyHandler:
    """Coordinator for idempotent execution of one operation.

    Constructed once per wrapped operation and reused for every call.

    The operation is invoked as ``function(data, *args, **kwargs)``, or with
    the payload passed as ``data_keyword_argument`` when that is set. A
    ``context`` given to handle() is forwarded as a keyword argument.
    Coroutine functions are awaited; plain callables run in the default
    executor.

    Example:
        >>> persistence = IdempotencyPersistenceLayer(store, config)
        >>> handler = IdempotencyHandler(charge_card, persistence)
        >>> await handler.handle({"order_id": 7, "amount": 100})
        {'charged': True}
    """

    def __init__(
        self,
        function: Callable[..., object],
        persistence: IdempotencyPersistenceLayer,
        config: ModelIdempotencyConfig | None = None,
        *,
        serializer: ProtocolResponseSerializer | None = None,
        response_hook: ResponseHook | None = None,
        data_keyword_argument: str | None = None,
        function_name: str | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            function: Operation to protect.
            persistence: Persistence layer for this operation.
            config: Retry settings (defaults to the persistence layer's config).
            serializer: Converts results to and from stored JSON.
            response_hook: Called with (response, record) on every replay; its
                return value replaces the replayed response.
            data_keyword_argument: Pass the payload to the operation under this
                keyword instead of as the first positional argument.
            function_name: Scopes keys to the operation (default: the
                operation's qualified name).
        """
        self._function = function
        self._persistence = persistence
        self._config = config or persistence.config
        self._serializer = serializer or NoOpSerializer()
        self._response_hook = response_hook
        self._data_keyword_argument = data_keyword_argument
        self._is_coroutine = inspect.iscoroutinefunction(function)
        self._persistence.configure(
            function_name or getattr(function, "__qualname__", None)
        )

    @property
    def persistence(self) -> IdempotencyPersistenceLayer:
        return self._persistence

    async def handle(
        self,
        data: object,
        /,
        *args: object,
        context: ProtocolInvocationContext | None = None,
        **kwargs: object,
    ) -> object:
        """Run the operation at most once per idempotency key.

        Args:
            data: Idempotency payload the key is derived from.
            *args: Further positional arguments for the operation.
            context: Invocation context bounding the in-progress deadline.
            **kwargs: Further keyword arguments for the operation.

        Returns:
            The operation's result, or the replayed result of an earlier call.

        Raises:
            IdempotencyAlreadyInProgressError: Another call still holds the
                key after all retry attempts.
            IdempotencyInconsistentStateError: Orphaned lock or expired record.
            IdempotencyValidationError: Payload differs from the stored one.
            IdempotencyKeyError: Required key could not be extracted.
            IdempotencyPersistenceLayerError: The store failed.
        """
        attempt = 0
        while True:
            attempt += 1
            # Re-read each attempt so retry delays shorten the in-progress deadline
            remaining_time_in_millis = (
                context.get_remaining_time_in_millis() if context is not None else None
            )
            try:
                return await self.process_idempotency(
                    data, args, kwargs, context, remaining_time_in_millis
                )
            except IdempotencyError as e:
                if (
                    e.error_code is not EnumIdempotencyErrorCode.ALREADY_IN_PROGRESS
                    or attempt > self._config.retry_attempts
                ):
                    raise
                logger.warning(
                    "Idempotency key in progress, retrying",
                    extra={
                        "attempt": attempt,
                        "max_attempts": 1 + self._config.retry_attempts,
                        "idempotency_key": e.context.get("idempotency_key"),
                    },
                )
                if self._config.retry_delay_seconds > 0:
                    await asyncio.sleep(self._config.retry_delay_seconds)

    async def process_idempotency(
        self,
        data: object,
        args: tuple[object, ...],
        kwargs: dict[str, object],
        context: ProtocolInvocationContext | None,
        remaining_time_in_millis: int | None,
    ) -> object:
        """Run one attempt: claim the key, then execute or replay."""
        try:
            await self._persistence.save_in_progress(
                data, remaining_time_in_millis=remaining_time_in_millis
            )
        except IdempotencyItemAlreadyExistsError as e:
            record = await self._load_existing_record(data, e)
            return self.determine_result_from_record(record)
        except IdempotencyError:
            raise
        except Exception as e:
            raise IdempotencyPersistenceLayerError(
                "Failed to save in progress record to idempotency store",
                context=ModelIdempotencyErrorContext(operation="save_in_progress"),
            ) from e

        return await self._get_function_response(data, args, kwargs, context)

    async def _load_existing_record(
        self,
        data: object,
        conflict: IdempotencyItemAlreadyExistsError,
    ) -> ModelIdempotencyRecord:
        """Fetch the record that blocked create, validating its payload."""
        if conflict.record is not None:
            self._persistence.validate_payload(data, conflict.record)
            return conflict.record

        try:
            return await self._persistence.get_record(data)
        except IdempotencyItemNotFoundError as e:
            # The holder released the key between our create and this read.
            raise IdempotencyAlreadyInProgressError(
                "Idempotency record was released concurrently; exclusivity not acquired",
                context=ModelIdempotencyErrorContext(
                    operation="get_record",
                    idempotency_key=e.context.get("idempotency_key"),  # type: ignore[arg-type]
                ),
            ) from e
        except IdempotencyError:
            raise
        except Exception as e:
            raise IdempotencyPersistenceLayerError(
                "Failed to get record from idempotency store",
                context=ModelIdempotencyErrorContext(operation="get_record"),
            ) from e

    def determine_result_from_record(self, record: ModelIdempotencyRecord) -> object:
        """Classify an existing record and replay its response when COMPLETED.

        Raises:
            IdempotencyInconsistentStateError: Record is EXPIRED, or IN_PROGRESS
                past its in-progress deadline.
            IdempotencyAlreadyInProgressError: Record is IN_PROGRESS and its
                holder is still within its deadline.
        """
        now = self._persistence.now()
        status = record.get_status(now)
        key = record.idempotency_key
        context = ModelIdempotencyErrorContext(
            operation="determine_result_from_record",
            idempotency_key=key,
        )

        if status == EnumIdempotencyRecordStatus.EXPIRED:
            raise IdempotencyInconsistentStateError(
                "Idempotency record is expired but a conditional create still failed",
                record=record,
                context=context,
            )

        if status == EnumIdempotencyRecordStatus.IN_PROGRESS:
            if record.is_in_progress_expired(now):
                raise IdempotencyInconsistentStateError(
                    "Idempotency record is in progress past its deadline (orphaned lock)",
                    record=record,
                    context=context,
                )
            raise IdempotencyAlreadyInProgressError(
                f"Execution already in progress with idempotency key: {key}",
                record=record,
                context=context,
            )

        logger.debug("Replaying stored idempotent response", extra={"idempotency_key": key})
        response = self._serializer.from_dict(record.get_response())
        if self._response_hook is not None:
            return self._response_hook(response, record)
        return response

    async def _get_function_response(
        self,
        data: object,
        args: tuple[object, ...],
        kwargs: dict[str, object],
        context: ProtocolInvocationContext | None,
    ) -> object:
        try:
            result = await self._invoke(data, args, kwargs, context)
        except BaseException:
            await self._release(data)
            raise

        try:
            stored: JsonValue = self._serializer.to_dict(result)
            await self._persistence.save_success(data, stored)
        except IdempotencyPersistenceLayerError:
            raise
        except Exception as e:
            raise IdempotencyPersistenceLayerError(
                "Failed to update success record to idempotency store",
                context=ModelIdempotencyErrorContext(operation="save_success"),
            ) from e

        return result

    async def _invoke(
        self,
        data: object,
        args: tuple[object, ...],
        kwargs: dict[str, object],
        context: ProtocolInvocationContext | None,
    ) -> object:
        call_kwargs = dict(kwargs)
        if context is not None:
            call_kwargs["context"] = context
        if self._data_keyword_argument is not None:
            call_kwargs[self._data_keyword_argument] = data
            call_args = args
        else:
            call_args = (data, *args)

        if self._is_coroutine:
            return await self._function(*call_args, **call_kwargs)  # type: ignore[misc]

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, functools.partial(self._function, *call_args, **call_kwargs)
        )

    async def _release(self, data: object) -> None:
        """Delete the record after a failed operation.

        Shielded so that cancellation of the caller does not abandon the
        delete. A failed delete is logged; the operation's error wins.
        """
        try:
            await asyncio.shield(self._persistence.delete_record(data))
        except Exception:
            logger.exception(
                "Failed to delete idempotency record after operation failure",
                extra={"key_prefix": self._persistence.key_prefix},
            )


__all__: list[str] = ["IdempotencyHandler", "ResponseHook"]
