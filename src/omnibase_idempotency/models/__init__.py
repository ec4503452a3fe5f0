# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Models Module.

Exports:
    ModelIdempotencyRecord: Persisted state of one idempotent execution
    ModelIdempotencyConfig: Key derivation, TTL, cache and retry settings
    ModelPostgresIdempotencyStoreConfig: PostgreSQL store configuration
    ModelDynamoDBIdempotencyStoreConfig: DynamoDB store configuration
"""

from omnibase_idempotency.models.model_dynamodb_idempotency_store_config import (
    ModelDynamoDBIdempotencyStoreConfig,
)
from omnibase_idempotency.models.model_idempotency_config import (
    IDEMPOTENCY_DISABLED_ENV,
    ModelIdempotencyConfig,
    is_idempotency_disabled,
)
from omnibase_idempotency.models.model_idempotency_record import (
    ModelIdempotencyRecord,
)
from omnibase_idempotency.models.model_postgres_idempotency_store_config import (
    ModelPostgresIdempotencyStoreConfig,
)

__all__: list[str] = [
    "IDEMPOTENCY_DISABLED_ENV",
    "ModelDynamoDBIdempotencyStoreConfig",
    "ModelIdempotencyConfig",
    "ModelIdempotencyRecord",
    "ModelPostgresIdempotencyStoreConfig",
    "is_idempotency_disabled",
]
