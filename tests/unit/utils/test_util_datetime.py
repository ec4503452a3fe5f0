# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for datetime normalization and epoch conversion."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from omnibase_idempotency.utils import (
    ensure_timezone_aware,
    from_epoch_millis,
    from_epoch_seconds,
    is_timezone_aware,
    to_epoch_decimal,
    to_epoch_millis,
    to_epoch_seconds,
    utc_now,
)


class TestEnsureTimezoneAware:
    """Tests for ensure_timezone_aware."""

    def test_aware_datetime_converted_to_utc(self) -> None:
        plus_two = datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

        result = ensure_timezone_aware(plus_two)

        assert result == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        assert result.tzinfo is UTC

    def test_naive_datetime_tagged_utc_with_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            result = ensure_timezone_aware(datetime(2024, 1, 1, 12, 0), context="expiry")

        assert result == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        assert "naive datetime" in caplog.text

    def test_naive_rejected_when_not_assuming_utc(self) -> None:
        with pytest.raises(ValueError, match="Naive datetime not allowed"):
            ensure_timezone_aware(datetime(2024, 1, 1), assume_utc=False)

    def test_utc_now_is_aware(self) -> None:
        assert is_timezone_aware(utc_now())


class TestEpochConversion:
    """Tests for the epoch helpers used by the DynamoDB store."""

    def test_seconds(self) -> None:
        dt = datetime(2024, 1, 1, tzinfo=UTC)

        assert to_epoch_seconds(dt) == 1704067200
        assert from_epoch_seconds(1704067200) == dt

    def test_millis(self) -> None:
        dt = datetime(2024, 1, 1, 0, 0, 1, 500000, tzinfo=UTC)

        assert to_epoch_millis(dt) == 1704067201500
        assert from_epoch_millis(1704067201500) == dt

    def test_seconds_truncate_fractions(self) -> None:
        assert to_epoch_seconds(datetime(2024, 1, 1, 0, 0, 0, 900000, tzinfo=UTC)) == 1704067200

    def test_decimal_keeps_microseconds(self) -> None:
        dt = datetime(2024, 1, 1, 0, 0, 10, 800000, tzinfo=UTC)

        assert to_epoch_decimal(dt) == Decimal("1704067210.8")
        assert to_epoch_decimal(dt) > to_epoch_seconds(dt)
