# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Error Context Configuration Model.

This module defines the configuration model for idempotency error context,
bundling the structured fields shared by every idempotency error so error
constructors stay small and strongly typed.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from omnibase_idempotency.enums import EnumPersistenceBackend


class ModelIdempotencyErrorContext(BaseModel):
    """Configuration model for idempotency error context.

    Attributes:
        backend: Storage backend involved in the failure, if any
        operation: Operation being performed (create, read, save_success, ...)
        target_name: Target resource name (table, store identifier)
        idempotency_key: Idempotency key involved in the failure
        correlation_id: Request correlation ID for distributed tracing

    Example:
        >>> context = ModelIdempotencyErrorContext(
        ...     backend=EnumPersistenceBackend.POSTGRES,
        ...     operation="create",
        ...     target_name="idempotency_records",
        ...     correlation_id=uuid4(),
        ... )
        >>> raise IdempotencyPersistenceLayerError("Create failed", context=context)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    backend: EnumPersistenceBackend | None = Field(
        default=None,
        description="Storage backend involved in the failure",
    )
    operation: str | None = Field(
        default=None,
        description="Operation being performed (create, read, update, delete, ...)",
    )
    target_name: str | None = Field(
        default=None,
        description="Target resource name (table or store identifier)",
    )
    idempotency_key: str | None = Field(
        default=None,
        description="Idempotency key involved in the failure",
    )
    correlation_id: UUID | None = Field(
        default=None,
        description="Request correlation ID for distributed tracing",
    )

    @classmethod
    def with_correlation(
        cls,
        correlation_id: UUID | None = None,
        **kwargs: object,
    ) -> ModelIdempotencyErrorContext:
        """Create a context, generating a correlation ID when none is given."""
        return cls(correlation_id=correlation_id or uuid4(), **kwargs)  # type: ignore[arg-type]


__all__ = ["ModelIdempotencyErrorContext"]
