# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""DynamoDB Idempotency Store Configuration Model.

Attribute names default to the layout commonly provisioned for idempotency
tables: a string partition key ``id`` and a numeric ``expiration``
attribute that can double as the table's TTL attribute.

When ``sort_key_attr`` is set the table uses a composite key: every record
shares the partition value ``static_pk_value`` and the idempotency key is
stored in the sort key.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ModelDynamoDBIdempotencyStoreConfig(BaseModel):
    """Configuration for DynamoDBIdempotencyStore.

    Attributes:
        table_name: DynamoDB table name
        region_name: AWS region (None uses the boto3 default chain)
        endpoint_url: Override endpoint (e.g. DynamoDB Local)
        key_attr: Partition key attribute name
        sort_key_attr: Optional sort key attribute name
        static_pk_value: Partition value when a sort key is used
        expiry_attr: Record expiry attribute (epoch seconds)
        in_progress_expiry_attr: In-progress deadline attribute (epoch millis)
        status_attr: Status attribute name
        data_attr: Response data attribute name (JSON string)
        validation_key_attr: Payload hash attribute name
        max_attempts: botocore standard-mode retry attempts
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    table_name: str = Field(min_length=3, max_length=255, description="DynamoDB table name")
    region_name: str | None = Field(default=None, description="AWS region")
    endpoint_url: str | None = Field(default=None, description="Endpoint override")
    key_attr: str = Field(default="id", min_length=1)
    sort_key_attr: str | None = Field(default=None)
    static_pk_value: str | None = Field(default=None)
    expiry_attr: str = Field(default="expiration", min_length=1)
    in_progress_expiry_attr: str = Field(default="in_progress_expiration", min_length=1)
    status_attr: str = Field(default="status", min_length=1)
    data_attr: str = Field(default="data", min_length=1)
    validation_key_attr: str = Field(default="validation", min_length=1)
    max_attempts: int = Field(default=5, ge=1, le=20)

    @model_validator(mode="after")
    def _validate_key_layout(self) -> ModelDynamoDBIdempotencyStoreConfig:
        if self.sort_key_attr is not None and self.sort_key_attr == self.key_attr:
            raise ValueError("key_attr and sort_key_attr must differ")
        return self

    def get_static_pk_value(self) -> str:
        """Partition value used when records live under a sort key."""
        if self.static_pk_value:
            return self.static_pk_value
        return f"idempotency#{os.getenv('AWS_LAMBDA_FUNCTION_NAME', '')}"


__all__ = ["ModelDynamoDBIdempotencyStoreConfig"]
