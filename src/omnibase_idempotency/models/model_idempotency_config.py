# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Configuration Model.

This module provides the Pydantic configuration model that controls how
idempotency keys are derived, how long records live, whether a local cache
is used and how in-progress conflicts are retried.

A configuration is built once per process and handed to the persistence
layer and handler at construction; nothing is read from module-level state
per call.
"""

from __future__ import annotations

import hashlib
import os

from jmespath.exceptions import JMESPathError
from pydantic import BaseModel, ConfigDict, Field, field_validator

from omnibase_idempotency.utils.util_jmespath import compile_expression

IDEMPOTENCY_DISABLED_ENV = "IDEMPOTENCY_DISABLED"

# Variable-length digests need an explicit length and are not usable here
_UNSUPPORTED_HASH_PREFIXES = ("shake_",)


class ModelIdempotencyConfig(BaseModel):
    """Configuration for idempotent execution.

    Attributes:
        key_extraction_expression: JMESPath selecting the sub-document that
            identifies a request. None hashes the whole payload.
        require_extracted_key: Raise IdempotencyKeyError when the expression
            selects nothing, instead of warning and hashing the full payload.
        ttl_seconds: Lifetime of a record (default 3600).
        enable_local_cache: Keep an in-process LRU cache of read records.
        local_cache_max_entries: Capacity of the local cache.
        payload_validation_expression: JMESPath selecting the sub-document whose
            hash must match on replay. None disables payload validation.
        hash_algorithm: hashlib algorithm for keys and payload hashes (default md5).
        retry_attempts: Extra attempts after an in-progress conflict (default 1).
        retry_delay_seconds: Pause before each retry (default 0.1).

    Example:
        >>> config = ModelIdempotencyConfig(
        ...     key_extraction_expression="[user_id, order_id]",
        ...     payload_validation_expression="amount",
        ...     ttl_seconds=600,
        ...     enable_local_cache=True,
        ... )
        >>> config.payload_validation_enabled
        True
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    key_extraction_expression: str | None = Field(
        default=None,
        description="JMESPath expression selecting the idempotency key sub-document",
    )
    require_extracted_key: bool = Field(
        default=False,
        description="Fail instead of hashing the full payload when no key is extracted",
    )
    ttl_seconds: int = Field(
        default=3600,
        ge=1,
        description="Record lifetime in seconds",
    )
    enable_local_cache: bool = Field(
        default=False,
        description="Use an in-process LRU cache for record lookups",
    )
    local_cache_max_entries: int = Field(
        default=256,
        ge=1,
        description="Maximum number of records held in the local cache",
    )
    payload_validation_expression: str | None = Field(
        default=None,
        description="JMESPath expression selecting the sub-document validated on replay",
    )
    hash_algorithm: str = Field(
        default="md5",
        description="hashlib algorithm used for keys and payload hashes",
    )
    retry_attempts: int = Field(
        default=1,
        ge=0,
        le=10,
        description="Additional attempts after an in-progress conflict",
    )
    retry_delay_seconds: float = Field(
        default=0.1,
        ge=0.0,
        le=30.0,
        description="Delay before each in-progress retry",
    )

    @field_validator("key_extraction_expression", "payload_validation_expression")
    @classmethod
    def _validate_expression(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not v.strip():
            raise ValueError("JMESPath expression must not be blank")
        try:
            compile_expression(v)
        except JMESPathError as e:
            raise ValueError(f"Invalid JMESPath expression {v!r}: {e}") from e
        return v

    @field_validator("hash_algorithm")
    @classmethod
    def _validate_hash_algorithm(cls, v: str) -> str:
        name = v.strip().lower()
        if name.startswith(_UNSUPPORTED_HASH_PREFIXES):
            raise ValueError(f"Variable-length digest {v!r} is not supported")
        if name not in {a.lower() for a in hashlib.algorithms_available}:
            raise ValueError(f"Unsupported hash algorithm {v!r}")
        return name

    @property
    def payload_validation_enabled(self) -> bool:
        """True when a payload validation expression is configured."""
        return self.payload_validation_expression is not None


def is_idempotency_disabled() -> bool:
    """Return True when idempotency is switched off via the environment.

    Reads ``IDEMPOTENCY_DISABLED``; ``1``, ``true``, ``yes`` and ``on`` (any
    case) disable idempotency. Intended for local development and tests.
    """
    value = os.getenv(IDEMPOTENCY_DISABLED_ENV, "")
    return value.strip().lower() in {"1", "true", "yes", "on"}


__all__ = [
    "IDEMPOTENCY_DISABLED_ENV",
    "ModelIdempotencyConfig",
    "is_idempotency_disabled",
]
