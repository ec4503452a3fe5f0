# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Errors Module.

Exports:
    ModelIdempotencyErrorContext: Configuration model for bundled error context
    IdempotencyError: Base idempotency error class
    IdempotencyItemAlreadyExistsError: Conditional create lost (internal)
    IdempotencyItemNotFoundError: No record for key (internal)
    IdempotencyAlreadyInProgressError: Concurrent execution holds the key
    IdempotencyInconsistentStateError: Orphaned lock or expired-yet-exclusive record
    IdempotencyValidationError: Payload drift under the same key
    IdempotencyKeyError: Required idempotency key could not be extracted
    IdempotencyConfigurationError: Invalid configuration or persistence misuse
    IdempotencyPersistenceLayerError: Unexpected store failure
    IdempotencyPersistenceConnectionError: Store connection failure
    IdempotencyPersistenceTimeoutError: Store operation timeout

Error Sanitization Guidelines:
    NEVER include in error messages or context:
        - Passwords, API keys, tokens, or secrets
        - Full connection strings with credentials
        - Raw request payloads (they may carry PII; use idempotency keys)

    SAFE to include:
        - Backend names and table names
        - Operation names (create, read, update, delete)
        - Idempotency keys (they are digests, not payloads)
        - Correlation IDs
"""

from omnibase_idempotency.errors.idempotency_errors import (
    IdempotencyAlreadyInProgressError,
    IdempotencyConfigurationError,
    IdempotencyError,
    IdempotencyInconsistentStateError,
    IdempotencyItemAlreadyExistsError,
    IdempotencyItemNotFoundError,
    IdempotencyKeyError,
    IdempotencyPersistenceConnectionError,
    IdempotencyPersistenceLayerError,
    IdempotencyPersistenceTimeoutError,
    IdempotencyValidationError,
)
from omnibase_idempotency.errors.model_idempotency_error_context import (
    ModelIdempotencyErrorContext,
)

__all__: list[str] = [
    # Configuration model
    "ModelIdempotencyErrorContext",
    # Error classes
    "IdempotencyError",
    "IdempotencyItemAlreadyExistsError",
    "IdempotencyItemNotFoundError",
    "IdempotencyAlreadyInProgressError",
    "IdempotencyInconsistentStateError",
    "IdempotencyValidationError",
    "IdempotencyKeyError",
    "IdempotencyConfigurationError",
    "IdempotencyPersistenceLayerError",
    "IdempotencyPersistenceConnectionError",
    "IdempotencyPersistenceTimeoutError",
]
