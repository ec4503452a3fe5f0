# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotent execution: coordinator, wrapping and response serialization.

Exports:
    IdempotencyHandler: Coordinator for one wrapped operation
    make_idempotent: Wrap an operation for idempotent execution
    idempotent: Decorator form of make_idempotent
    ProtocolInvocationContext: Remaining-time reporting of the caller
    DeadlineInvocationContext: Monotonic-deadline invocation context
    ProtocolResponseSerializer: Result <-> stored JSON conversion
    NoOpSerializer: Identity serializer (default)
    PydanticResponseSerializer: Serializer for pydantic model results
"""

from omnibase_idempotency.handler.decorator_idempotent import (
    idempotent,
    make_idempotent,
)
from omnibase_idempotency.handler.handler_idempotency import (
    IdempotencyHandler,
    ResponseHook,
)
from omnibase_idempotency.handler.protocol_invocation_context import (
    DeadlineInvocationContext,
    ProtocolInvocationContext,
)
from omnibase_idempotency.handler.serializer_response import (
    NoOpSerializer,
    ProtocolResponseSerializer,
    PydanticResponseSerializer,
)

__all__: list[str] = [
    "DeadlineInvocationContext",
    "IdempotencyHandler",
    "NoOpSerializer",
    "ProtocolInvocationContext",
    "ProtocolResponseSerializer",
    "PydanticResponseSerializer",
    "ResponseHook",
    "idempotent",
    "make_idempotent",
]
