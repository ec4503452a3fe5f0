# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Error Classes.

This module defines the error taxonomy of the idempotency engine. Every
error carries an EnumIdempotencyErrorCode so callers (and the bounded retry
in IdempotencyHandler) can branch on the failure kind without inspecting
exception types.

Error Hierarchy:
    IdempotencyError (base)
    ├── IdempotencyItemAlreadyExistsError   (internal, never surfaced)
    ├── IdempotencyItemNotFoundError        (internal, never surfaced)
    ├── IdempotencyAlreadyInProgressError   (retried, then surfaced)
    ├── IdempotencyInconsistentStateError
    ├── IdempotencyValidationError
    ├── IdempotencyKeyError
    ├── IdempotencyConfigurationError
    └── IdempotencyPersistenceLayerError
        ├── IdempotencyPersistenceConnectionError
        └── IdempotencyPersistenceTimeoutError

All errors:
    - Support proper error chaining with `raise ... from e`
    - Accept ModelIdempotencyErrorContext for bundled context parameters
    - Accept extra keyword context stored on `.context`
    - Never carry credentials (DSNs, tokens) in messages or context
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from omnibase_idempotency.enums import EnumIdempotencyErrorCode
from omnibase_idempotency.errors.model_idempotency_error_context import (
    ModelIdempotencyErrorContext,
)

if TYPE_CHECKING:
    from omnibase_idempotency.models.model_idempotency_record import (
        ModelIdempotencyRecord,
    )


class IdempotencyError(Exception):
    """Base error class for the idempotency engine.

    Structured Fields (via ModelIdempotencyErrorContext):
        backend: Storage backend involved
        operation: Operation being performed
        target_name: Target resource name
        idempotency_key: Key involved in the failure
        correlation_id: Request correlation ID for tracking

    Example:
        >>> context = ModelIdempotencyErrorContext(operation="save_success")
        >>> raise IdempotencyError("Operation failed", context=context)
    """

    default_error_code: EnumIdempotencyErrorCode = (
        EnumIdempotencyErrorCode.PERSISTENCE_FAILURE
    )

    def __init__(
        self,
        message: str,
        error_code: EnumIdempotencyErrorCode | None = None,
        context: ModelIdempotencyErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        """Initialize IdempotencyError with structured fields.

        Args:
            message: Human-readable error message
            error_code: Error code (defaults to the class default)
            context: Bundled idempotency context
            **extra_context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code

        structured_context: dict[str, object] = dict(extra_context)
        correlation_id: UUID | None = None
        if context is not None:
            if context.backend is not None:
                structured_context["backend"] = context.backend
            if context.operation is not None:
                structured_context["operation"] = context.operation
            if context.target_name is not None:
                structured_context["target_name"] = context.target_name
            if context.idempotency_key is not None:
                structured_context["idempotency_key"] = context.idempotency_key
            correlation_id = context.correlation_id

        self.context = structured_context
        self.correlation_id = correlation_id

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"error_code={self.error_code.value!r})"
        )


class _RecordCarryingError(IdempotencyError):
    """Idempotency error that may reference the record that triggered it."""

    def __init__(
        self,
        message: str,
        record: ModelIdempotencyRecord | None = None,
        context: ModelIdempotencyErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        super().__init__(message, context=context, **extra_context)
        self.record = record


class IdempotencyItemAlreadyExistsError(_RecordCarryingError):
    """Raised by a store when create-if-absent finds a live record.

    Internal control-flow signal between the persistence layer and the
    handler; it is never surfaced to callers of an idempotent function.
    """

    default_error_code = EnumIdempotencyErrorCode.ALREADY_EXISTS


class IdempotencyItemNotFoundError(IdempotencyError):
    """Raised by a store when no record exists for a key."""

    default_error_code = EnumIdempotencyErrorCode.NOT_FOUND


class IdempotencyAlreadyInProgressError(_RecordCarryingError):
    """Raised when another execution currently holds the idempotency key.

    This is a legitimate concurrent duplicate. The handler retries it a
    bounded number of times before surfacing it; callers should retry the
    whole call later rather than re-running business logic.
    """

    default_error_code = EnumIdempotencyErrorCode.ALREADY_IN_PROGRESS


class IdempotencyInconsistentStateError(_RecordCarryingError):
    """Raised for an orphaned lock or an expired record that blocked create.

    Never recovered automatically: reclaiming the key silently could run the
    operation twice if the presumed-dead holder is still executing.
    """

    default_error_code = EnumIdempotencyErrorCode.INCONSISTENT_STATE


class IdempotencyValidationError(_RecordCarryingError):
    """Raised when the validated payload hash differs from the stored one.

    Indicates two different requests mapped onto the same idempotency key,
    usually because the key extraction expression is too coarse.
    """

    default_error_code = EnumIdempotencyErrorCode.PAYLOAD_VALIDATION_FAILED


class IdempotencyKeyError(IdempotencyError):
    """Raised when key extraction yields nothing and a key is required."""

    default_error_code = EnumIdempotencyErrorCode.MISSING_KEY


class IdempotencyConfigurationError(IdempotencyError):
    """Raised on invalid idempotency configuration or persistence layer misuse."""

    default_error_code = EnumIdempotencyErrorCode.INVALID_CONFIGURATION


class IdempotencyPersistenceLayerError(IdempotencyError):
    """Raised when the backing store fails unexpectedly.

    The underlying driver exception is attached as ``__cause__``.

    Example:
        >>> context = ModelIdempotencyErrorContext(
        ...     backend=EnumPersistenceBackend.DYNAMODB,
        ...     operation="update",
        ...     target_name="idempotency-table",
        ... )
        >>> raise IdempotencyPersistenceLayerError(
        ...     "Failed to update record", context=context
        ... ) from e
    """

    default_error_code = EnumIdempotencyErrorCode.PERSISTENCE_FAILURE


class IdempotencyPersistenceConnectionError(IdempotencyPersistenceLayerError):
    """Raised when the store connection cannot be established or is lost."""

    default_error_code = EnumIdempotencyErrorCode.CONNECTION_ERROR


class IdempotencyPersistenceTimeoutError(IdempotencyPersistenceLayerError):
    """Raised when a store operation exceeds its timeout."""

    default_error_code = EnumIdempotencyErrorCode.TIMEOUT_ERROR


__all__ = [
    "IdempotencyAlreadyInProgressError",
    "IdempotencyConfigurationError",
    "IdempotencyError",
    "IdempotencyInconsistentStateError",
    "IdempotencyItemAlreadyExistsError",
    "IdempotencyItemNotFoundError",
    "IdempotencyKeyError",
    "IdempotencyPersistenceConnectionError",
    "IdempotencyPersistenceLayerError",
    "IdempotencyPersistenceTimeoutError",
    "IdempotencyValidationError",
]
