# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency utility functions.

Exports:
    canonical_json: Deterministic JSON serialization for fingerprinting
    generate_hash: Digest of a payload's canonical serialization
    is_missing_idempotency_key: Detect empty key extraction results
    extract: JMESPath evaluation with envelope-decoding functions
    compile_expression: Memoized JMESPath compilation
    ensure_timezone_aware: Normalize datetimes to aware UTC
    utc_now: Current aware UTC time
"""

from omnibase_idempotency.utils.util_datetime import (
    ensure_timezone_aware,
    from_epoch_millis,
    from_epoch_seconds,
    is_timezone_aware,
    to_epoch_decimal,
    to_epoch_millis,
    to_epoch_seconds,
    utc_now,
)
from omnibase_idempotency.utils.util_hashing import (
    canonical_json,
    generate_hash,
    is_missing_idempotency_key,
)
from omnibase_idempotency.utils.util_jmespath import (
    IdempotencyJMESPathFunctions,
    KeyExtractor,
    compile_expression,
    extract,
)

__all__: list[str] = [
    "IdempotencyJMESPathFunctions",
    "KeyExtractor",
    "canonical_json",
    "compile_expression",
    "ensure_timezone_aware",
    "extract",
    "from_epoch_millis",
    "from_epoch_seconds",
    "generate_hash",
    "is_missing_idempotency_key",
    "is_timezone_aware",
    "to_epoch_decimal",
    "to_epoch_millis",
    "to_epoch_seconds",
    "utc_now",
]
