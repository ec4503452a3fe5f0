# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotent wrapping of operations.

make_idempotent() turns an operation into an idempotent coroutine function;
@idempotent(...) is the decorator form. The wrapped function is always a
coroutine function, also when the original is synchronous.

Payload selection:
    - By default the first positional argument is the idempotency payload.
    - With ``data_keyword_argument="order"`` the keyword argument ``order``
      is the payload.

A ``context`` keyword argument (ProtocolInvocationContext) bounds the
in-progress deadline and is still passed through to the operation.

Setting the environment variable IDEMPOTENCY_DISABLED (1/true/yes/on)
bypasses the store entirely; the operation runs on every call.

Example:
    >>> store = InMemoryIdempotencyStore()
    >>> @idempotent(
    ...     persistence_store=store,
    ...     config=ModelIdempotencyConfig(key_extraction_expression="order_id"),
    ... )
    ... async def create_order(order: dict) -> dict:
    ...     return {"order_id": order["order_id"], "status": "created"}
    >>> await create_order({"order_id": 7})
    {'order_id': 7, 'status': 'created'}
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

from omnibase_idempotency.errors import (
    IdempotencyConfigurationError,
    ModelIdempotencyErrorContext,
)
from omnibase_idempotency.handler.handler_idempotency import (
    IdempotencyHandler,
    ResponseHook,
)
from omnibase_idempotency.handler.serializer_response import (
    ProtocolResponseSerializer,
)
from omnibase_idempotency.models.model_idempotency_config import (
    ModelIdempotencyConfig,
    is_idempotency_disabled,
)
from omnibase_idempotency.persistence.persistence_layer import (
    IdempotencyPersistenceLayer,
)
from omnibase_idempotency.persistence.protocol_idempotency_record_store import (
    ProtocolIdempotencyRecordStore,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _split_payload(
    args: tuple[object, ...],
    kwargs: dict[str, object],
    data_keyword_argument: str | None,
) -> tuple[object, tuple[object, ...]]:
    """Separate the idempotency payload from the remaining call arguments."""
    if data_keyword_argument is not None:
        if data_keyword_argument not in kwargs:
            raise IdempotencyConfigurationError(
                f"Unable to extract idempotency payload from keyword argument "
                f"{data_keyword_argument!r}",
                context=ModelIdempotencyErrorContext(operation="make_idempotent"),
            )
        return kwargs.pop(data_keyword_argument), args

    if not args:
        raise IdempotencyConfigurationError(
            "Idempotent function called without a positional idempotency payload; "
            "pass it first or set data_keyword_argument",
            context=ModelIdempotencyErrorContext(operation="make_idempotent"),
        )
    return args[0], args[1:]


async def _call_directly(
    function: Callable[..., object],
    args: tuple[object, ...],
    kwargs: dict[str, object],
) -> object:
    if inspect.iscoroutinefunction(function):
        return await function(*args, **kwargs)  # type: ignore[misc]
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(function, *args, **kwargs))


def make_idempotent(
    function: Callable[..., R] | Callable[..., Awaitable[R]],
    *,
    persistence_store: ProtocolIdempotencyRecordStore,
    config: ModelIdempotencyConfig | None = None,
    data_keyword_argument: str | None = None,
    serializer: ProtocolResponseSerializer | None = None,
    response_hook: ResponseHook | None = None,
    key_prefix: str | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Callable[..., Awaitable[R]]:
    """Wrap an operation so it executes at most once per idempotency key.

    A persistence layer and handler are built once here and reused by every
    call of the returned function.

    Args:
        function: Operation to protect (coroutine function or plain callable).
        persistence_store: Record store shared by all callers that must be
            mutually exclusive.
        config: Idempotency configuration (default: ModelIdempotencyConfig()).
        data_keyword_argument: Keyword argument carrying the payload.
        serializer: Result serializer (default: results stored as-is).
        response_hook: Called with (response, record) when a result is replayed.
        key_prefix: Key scope prefix (default: AWS_LAMBDA_FUNCTION_NAME or
            "idempotency"); the function's qualified name is appended.
        clock: Time source for expiry decisions.

    Returns:
        Coroutine function with the same signature as ``function``. The
        handler is exposed as its ``idempotency_handler`` attribute.
    """
    resolved_config = config or ModelIdempotencyConfig()
    persistence = IdempotencyPersistenceLayer(
        persistence_store,
        resolved_config,
        key_prefix=key_prefix,
        clock=clock,
    )
    handler = IdempotencyHandler(
        function,
        persistence,
        resolved_config,
        serializer=serializer,
        response_hook=response_hook,
        data_keyword_argument=data_keyword_argument,
    )

    @functools.wraps(function)
    async def wrapper(*args: object, **kwargs: object) -> R:
        if is_idempotency_disabled():
            logger.debug(
                "Idempotency disabled by environment, invoking directly",
                extra={"function": getattr(function, "__qualname__", None)},
            )
            return await _call_directly(function, args, kwargs)  # type: ignore[return-value]

        context = kwargs.pop("context", None)
        data, rest = _split_payload(args, kwargs, data_keyword_argument)
        return await handler.handle(data, *rest, context=context, **kwargs)  # type: ignore[arg-type,return-value]

    wrapper.idempotency_handler = handler  # type: ignore[attr-defined]
    return wrapper


def idempotent(
    *,
    persistence_store: ProtocolIdempotencyRecordStore,
    config: ModelIdempotencyConfig | None = None,
    data_keyword_argument: str | None = None,
    serializer: ProtocolResponseSerializer | None = None,
    response_hook: ResponseHook | None = None,
    key_prefix: str | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Callable[[Callable[..., object]], Callable[..., Awaitable[object]]]:
    """Decorator form of make_idempotent().

    Example:
        >>> @idempotent(persistence_store=store, data_keyword_argument="event")
        ... async def handle_event(*, event: dict) -> dict:
        ...     ...
    """

    def decorator(func: Callable[..., object]) -> Callable[..., Awaitable[object]]:
        return make_idempotent(
            func,
            persistence_store=persistence_store,
            config=config,
            data_keyword_argument=data_keyword_argument,
            serializer=serializer,
            response_hook=response_hook,
            key_prefix=key_prefix,
            clock=clock,
        )

    return decorator


__all__: list[str] = ["idempotent", "make_idempotent"]
