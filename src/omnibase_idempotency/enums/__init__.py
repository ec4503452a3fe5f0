# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Enumerations Module.

Exports:
    EnumIdempotencyErrorCode: Error codes for the idempotency error taxonomy
    EnumIdempotencyRecordStatus: Record lifecycle states (IN_PROGRESS, COMPLETED, EXPIRED)
    EnumPersistenceBackend: Storage backend identification for error context
"""

from omnibase_idempotency.enums.enum_idempotency_error_code import (
    EnumIdempotencyErrorCode,
)
from omnibase_idempotency.enums.enum_idempotency_record_status import (
    EnumIdempotencyRecordStatus,
)
from omnibase_idempotency.enums.enum_persistence_backend import (
    EnumPersistenceBackend,
)

__all__: list[str] = [
    "EnumIdempotencyErrorCode",
    "EnumIdempotencyRecordStatus",
    "EnumPersistenceBackend",
]
