# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Idempotency Record Model.

The persisted state of one idempotent execution attempt. A record's
effective status is derived at read time: once its expiry has passed it is
EXPIRED regardless of the stored status, so expiry never requires a write.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator, model_validator

from omnibase_idempotency.enums import EnumIdempotencyRecordStatus
from omnibase_idempotency.utils.util_datetime import ensure_timezone_aware, utc_now


class ModelIdempotencyRecord(BaseModel):
    """Persisted state of one idempotent execution attempt.

    Attributes:
        idempotency_key: ``<prefix>#<digest>`` key unique per operation and input.
        status: Stored lifecycle status (see get_status for the effective one).
        expiry_timestamp: Absolute time after which the record is stale.
        in_progress_expiry_timestamp: Deadline of the execution that holds the
            key. Past this point an IN_PROGRESS record is an orphaned lock.
        payload_hash: Hash of the validated payload sub-document.
        response_data: Serialized result, present only once COMPLETED.

    Example:
        >>> record = ModelIdempotencyRecord(
        ...     idempotency_key="orders.create#4b1f...",
        ...     status=EnumIdempotencyRecordStatus.COMPLETED,
        ...     expiry_timestamp=datetime.now(UTC) + timedelta(hours=1),
        ...     response_data={"ok": True},
        ... )
        >>> record.get_status()
        <EnumIdempotencyRecordStatus.COMPLETED: 'COMPLETED'>
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    idempotency_key: str = Field(
        min_length=1,
        description="Idempotency key identifying the record",
    )
    status: EnumIdempotencyRecordStatus = Field(
        description="Stored lifecycle status",
    )
    expiry_timestamp: datetime | None = Field(
        default=None,
        description="Absolute time after which the record is considered expired",
    )
    in_progress_expiry_timestamp: datetime | None = Field(
        default=None,
        description="Deadline of the in-flight execution holding the key",
    )
    payload_hash: str | None = Field(
        default=None,
        description="Hash of the payload sub-document used for validation",
    )
    response_data: JsonValue | None = Field(
        default=None,
        description="Serialized response of a completed execution",
    )

    @field_validator("expiry_timestamp", "in_progress_expiry_timestamp")
    @classmethod
    def _normalize_timestamp(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return None
        return ensure_timezone_aware(v, context="idempotency_record")

    @model_validator(mode="after")
    def _in_progress_has_no_response(self) -> ModelIdempotencyRecord:
        if (
            self.status == EnumIdempotencyRecordStatus.IN_PROGRESS
            and self.response_data is not None
        ):
            raise ValueError("IN_PROGRESS records cannot carry response_data")
        return self

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True once the record's expiry timestamp has passed."""
        if self.expiry_timestamp is None:
            return False
        return (now or utc_now()) > self.expiry_timestamp

    def is_in_progress_expired(self, now: datetime | None = None) -> bool:
        """Return True once the in-progress deadline has been reached.

        Records without an in-progress deadline (the holder could not report
        its remaining time) never count as orphaned.
        """
        if self.in_progress_expiry_timestamp is None:
            return False
        return (now or utc_now()) >= self.in_progress_expiry_timestamp

    def get_status(self, now: datetime | None = None) -> EnumIdempotencyRecordStatus:
        """Return the effective status, deriving EXPIRED from the expiry timestamp."""
        if self.is_expired(now):
            return EnumIdempotencyRecordStatus.EXPIRED
        return self.status

    def get_response(self) -> JsonValue | None:
        """Return the stored response data."""
        return self.response_data


__all__ = ["ModelIdempotencyRecord"]
