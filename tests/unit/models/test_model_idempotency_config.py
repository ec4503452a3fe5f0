# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for ModelIdempotencyConfig and the disable switch."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from omnibase_idempotency.models import (
    IDEMPOTENCY_DISABLED_ENV,
    ModelIdempotencyConfig,
    is_idempotency_disabled,
)


class TestDefaults:
    """Tests for default configuration values."""

    def test_defaults(self) -> None:
        config = ModelIdempotencyConfig()

        assert config.key_extraction_expression is None
        assert config.require_extracted_key is False
        assert config.ttl_seconds == 3600
        assert config.enable_local_cache is False
        assert config.local_cache_max_entries == 256
        assert config.payload_validation_expression is None
        assert config.hash_algorithm == "md5"
        assert config.retry_attempts == 1
        assert config.retry_delay_seconds == pytest.approx(0.1)

    def test_payload_validation_enabled_follows_expression(self) -> None:
        assert ModelIdempotencyConfig().payload_validation_enabled is False
        assert (
            ModelIdempotencyConfig(
                payload_validation_expression="amount"
            ).payload_validation_enabled
            is True
        )


class TestValidation:
    """Tests for field validation."""

    def test_invalid_jmespath_rejected_at_construction(self) -> None:
        with pytest.raises(ValidationError, match="Invalid JMESPath"):
            ModelIdempotencyConfig(key_extraction_expression="[user_id, ")

    def test_blank_expression_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ModelIdempotencyConfig(payload_validation_expression="   ")

    def test_hash_algorithm_normalized(self) -> None:
        config = ModelIdempotencyConfig(hash_algorithm="SHA256")

        assert config.hash_algorithm == "sha256"

    def test_unknown_hash_algorithm_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported hash algorithm"):
            ModelIdempotencyConfig(hash_algorithm="not-a-digest")

    def test_variable_length_digest_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Variable-length"):
            ModelIdempotencyConfig(hash_algorithm="shake_128")

    @pytest.mark.parametrize(
        "field,value",
        [
            ("ttl_seconds", 0),
            ("local_cache_max_entries", 0),
            ("retry_attempts", -1),
            ("retry_delay_seconds", -0.5),
        ],
    )
    def test_out_of_range_values_rejected(self, field: str, value: float) -> None:
        with pytest.raises(ValidationError):
            ModelIdempotencyConfig(**{field: value})

    def test_unknown_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            ModelIdempotencyConfig(use_local_cache=True)  # type: ignore[call-arg]


class TestDisableSwitch:
    """Tests for is_idempotency_disabled."""

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on"])
    def test_truthy_values_disable(
        self, monkeypatch: pytest.MonkeyPatch, value: str
    ) -> None:
        monkeypatch.setenv(IDEMPOTENCY_DISABLED_ENV, value)

        assert is_idempotency_disabled() is True

    @pytest.mark.parametrize("value", ["", "0", "false", "off"])
    def test_other_values_keep_enabled(
        self, monkeypatch: pytest.MonkeyPatch, value: str
    ) -> None:
        monkeypatch.setenv(IDEMPOTENCY_DISABLED_ENV, value)

        assert is_idempotency_disabled() is False

    def test_unset_keeps_enabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(IDEMPOTENCY_DISABLED_ENV, raising=False)

        assert is_idempotency_disabled() is False
