# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Deterministic serialization and hashing for idempotency fingerprints.

Two logically identical payloads must always produce the same idempotency
key, across processes and hosts. Payloads are therefore rendered to a
canonical JSON form (sorted keys, compact separators) before hashing, and
values JSON cannot represent natively are reduced to stable primitives.
"""

from __future__ import annotations

import base64
import dataclasses
import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel


def _canonical_default(value: object) -> object:
    """Reduce values unknown to json.dumps to stable primitives."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    # str() of arbitrary objects may embed memory addresses, which would make
    # keys differ between processes.
    raise TypeError(
        f"Cannot fingerprint value of type {type(value).__name__}; "
        "pass JSON-compatible data or a pydantic model"
    )


def canonical_json(data: object) -> str:
    """Serialize data to canonical JSON.

    Args:
        data: Any JSON-like value. Pydantic models, dataclasses, datetimes,
            UUIDs, decimals, enums and sets are reduced to primitives; bytes
            are base64 encoded.

    Returns:
        JSON text with sorted keys and no insignificant whitespace.

    Raises:
        TypeError: If data contains a value of any other type.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_canonical_default,
    )


def generate_hash(data: object, algorithm: str = "md5") -> str:
    """Hash the canonical JSON form of data.

    Digests are used for fingerprinting, not for security, so algorithms
    such as md5 remain usable on FIPS-restricted interpreters.

    Args:
        data: Value to fingerprint.
        algorithm: Any name accepted by hashlib.new.

    Returns:
        Hex digest of the canonical serialization.
    """
    digest = hashlib.new(algorithm, usedforsecurity=False)
    digest.update(canonical_json(data).encode("utf-8"))
    return digest.hexdigest()


def is_missing_idempotency_key(data: object) -> bool:
    """Return True if extracted key data carries no identifying value.

    None, empty strings and empty containers are missing. A container is
    also missing when every value in it is missing, which is what an
    extraction such as ``[user_id, order_id]`` yields when neither field is
    present. Numbers (including zero) and booleans count as present, at the
    top level and inside containers alike.
    """
    if data is None:
        return True
    if isinstance(data, (int, float)):
        return False
    if isinstance(data, dict):
        return all(is_missing_idempotency_key(v) for v in data.values())
    if isinstance(data, (list, tuple, set, frozenset)):
        return all(is_missing_idempotency_key(v) for v in data)
    return not data


__all__: list[str] = [
    "canonical_json",
    "generate_hash",
    "is_missing_idempotency_key",
]
