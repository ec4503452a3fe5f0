# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Error Code Enumeration.

Every idempotency error carries one of these codes. Control flow that reacts
to a specific failure kind (such as the bounded retry on in-progress
conflicts) dispatches on the code rather than on the exception class.
"""

from enum import Enum


class EnumIdempotencyErrorCode(str, Enum):
    """Error codes for the idempotency error taxonomy.

    Attributes:
        ALREADY_EXISTS: Conditional create lost against a live record (internal).
        NOT_FOUND: No record stored for the key (internal).
        ALREADY_IN_PROGRESS: A concurrent execution holds the key.
        INCONSISTENT_STATE: Orphaned lock or expired record that still blocked create.
        PAYLOAD_VALIDATION_FAILED: Same key, different validated payload.
        MISSING_KEY: Key extraction yielded nothing and a key was required.
        INVALID_CONFIGURATION: Persistence layer or config misuse.
        PERSISTENCE_FAILURE: Unexpected store failure.
        CONNECTION_ERROR: Store connection could not be established or was lost.
        TIMEOUT_ERROR: Store operation exceeded its timeout.
    """

    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    ALREADY_IN_PROGRESS = "already_in_progress"
    INCONSISTENT_STATE = "inconsistent_state"
    PAYLOAD_VALIDATION_FAILED = "payload_validation_failed"
    MISSING_KEY = "missing_key"
    INVALID_CONFIGURATION = "invalid_configuration"
    PERSISTENCE_FAILURE = "persistence_failure"
    CONNECTION_ERROR = "connection_error"
    TIMEOUT_ERROR = "timeout_error"


__all__ = ["EnumIdempotencyErrorCode"]
