# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Persistence Backend Enumeration.

Identifies the storage medium behind an idempotency record store. Used in
error context so failures can be attributed to a backend.
"""

from enum import Enum


class EnumPersistenceBackend(str, Enum):
    """Storage backends for idempotency records.

    Attributes:
        MEMORY: Process-local in-memory store
        POSTGRES: PostgreSQL table via asyncpg
        DYNAMODB: Amazon DynamoDB table via boto3
    """

    MEMORY = "memory"
    POSTGRES = "postgres"
    DYNAMODB = "dynamodb"


__all__ = ["EnumPersistenceBackend"]
