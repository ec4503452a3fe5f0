# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the idempotency error hierarchy.

Verifies error codes, structured context, record attachment and chaining.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from omnibase_idempotency.enums import (
    EnumIdempotencyErrorCode,
    EnumIdempotencyRecordStatus,
    EnumPersistenceBackend,
)
from omnibase_idempotency.errors import (
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
    ModelIdempotencyErrorContext,
)
from omnibase_idempotency.models import ModelIdempotencyRecord


class TestErrorCodes:
    """Each error class fixes its error code."""

    @pytest.mark.parametrize(
        "error_class,expected_code",
        [
            (IdempotencyItemAlreadyExistsError, EnumIdempotencyErrorCode.ALREADY_EXISTS),
            (IdempotencyItemNotFoundError, EnumIdempotencyErrorCode.NOT_FOUND),
            (
                IdempotencyAlreadyInProgressError,
                EnumIdempotencyErrorCode.ALREADY_IN_PROGRESS,
            ),
            (
                IdempotencyInconsistentStateError,
                EnumIdempotencyErrorCode.INCONSISTENT_STATE,
            ),
            (
                IdempotencyValidationError,
                EnumIdempotencyErrorCode.PAYLOAD_VALIDATION_FAILED,
            ),
            (IdempotencyKeyError, EnumIdempotencyErrorCode.MISSING_KEY),
            (
                IdempotencyConfigurationError,
                EnumIdempotencyErrorCode.INVALID_CONFIGURATION,
            ),
            (
                IdempotencyPersistenceLayerError,
                EnumIdempotencyErrorCode.PERSISTENCE_FAILURE,
            ),
            (
                IdempotencyPersistenceConnectionError,
                EnumIdempotencyErrorCode.CONNECTION_ERROR,
            ),
            (
                IdempotencyPersistenceTimeoutError,
                EnumIdempotencyErrorCode.TIMEOUT_ERROR,
            ),
        ],
    )
    def test_default_error_code(
        self,
        error_class: type[IdempotencyError],
        expected_code: EnumIdempotencyErrorCode,
    ) -> None:
        error = error_class("boom")

        assert error.error_code is expected_code
        assert isinstance(error, IdempotencyError)

    def test_connection_and_timeout_are_persistence_errors(self) -> None:
        assert issubclass(IdempotencyPersistenceConnectionError, IdempotencyPersistenceLayerError)
        assert issubclass(IdempotencyPersistenceTimeoutError, IdempotencyPersistenceLayerError)

    def test_explicit_error_code_overrides_default(self) -> None:
        error = IdempotencyError(
            "boom", error_code=EnumIdempotencyErrorCode.ALREADY_IN_PROGRESS
        )

        assert error.error_code is EnumIdempotencyErrorCode.ALREADY_IN_PROGRESS


class TestErrorContext:
    """Tests for structured context handling."""

    def test_context_fields_flattened(self) -> None:
        correlation_id = uuid4()
        context = ModelIdempotencyErrorContext(
            backend=EnumPersistenceBackend.POSTGRES,
            operation="create",
            target_name="idempotency_records",
            idempotency_key="fn#abc",
            correlation_id=correlation_id,
        )

        error = IdempotencyPersistenceLayerError("failed", context=context, retry_count=2)

        assert error.context == {
            "backend": EnumPersistenceBackend.POSTGRES,
            "operation": "create",
            "target_name": "idempotency_records",
            "idempotency_key": "fn#abc",
            "retry_count": 2,
        }
        assert error.correlation_id == correlation_id

    def test_with_correlation_generates_id(self) -> None:
        context = ModelIdempotencyErrorContext.with_correlation(operation="read")

        assert context.correlation_id is not None
        assert context.operation == "read"

    def test_without_context(self) -> None:
        error = IdempotencyKeyError("missing")

        assert error.context == {}
        assert error.correlation_id is None

    def test_str_and_repr(self) -> None:
        error = IdempotencyValidationError("payload mismatch")

        assert str(error) == "payload mismatch"
        assert "payload_validation_failed" in repr(error)


class TestRecordCarryingErrors:
    """Errors about an existing record expose it as .record."""

    def test_record_attached(self) -> None:
        record = ModelIdempotencyRecord(
            idempotency_key="fn#abc",
            status=EnumIdempotencyRecordStatus.IN_PROGRESS,
        )

        error = IdempotencyAlreadyInProgressError("in progress", record=record)

        assert error.record is record

    def test_record_defaults_to_none(self) -> None:
        assert IdempotencyItemAlreadyExistsError("exists").record is None

    def test_chaining_preserves_cause(self) -> None:
        cause = OSError("connection reset")

        with pytest.raises(IdempotencyPersistenceConnectionError) as exc_info:
            try:
                raise cause
            except OSError as e:
                raise IdempotencyPersistenceConnectionError("lost") from e

        assert exc_info.value.__cause__ is cause
