# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Response serializers.

A completed execution's result is stored as JSON. Serializers convert the
operation's return value to a JSON-compatible value before it is persisted,
and convert the stored value back when a duplicate call is replayed, so the
replayed result has the same type as the original one.
"""

from __future__ import annotations

from typing import Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, JsonValue

M = TypeVar("M", bound=BaseModel)


@runtime_checkable
class ProtocolResponseSerializer(Protocol):
    """Two-way conversion between operation results and stored JSON."""

    def to_dict(self, data: object) -> JsonValue:
        """Convert an operation result to a JSON-compatible value."""
        ...

    def from_dict(self, data: JsonValue) -> object:
        """Rebuild an operation result from its stored value."""
        ...


class NoOpSerializer:
    """Pass results through unchanged. Results must already be JSON-compatible."""

    def to_dict(self, data: object) -> JsonValue:
        return data  # type: ignore[return-value]

    def from_dict(self, data: JsonValue) -> object:
        return data


class PydanticResponseSerializer(Generic[M]):
    """Store pydantic model results and replay them as model instances.

    Example:
        >>> serializer = PydanticResponseSerializer(OrderReceipt)
        >>> stored = serializer.to_dict(OrderReceipt(order_id=7))
        >>> serializer.from_dict(stored)
        OrderReceipt(order_id=7)
    """

    def __init__(self, model: type[M]) -> None:
        self._model = model

    def to_dict(self, data: object) -> JsonValue:
        if not isinstance(data, self._model):
            raise TypeError(
                f"Expected {self._model.__name__} result, got {type(data).__name__}"
            )
        return data.model_dump(mode="json")

    def from_dict(self, data: JsonValue) -> M:
        return self._model.model_validate(data)


__all__: list[str] = [
    "NoOpSerializer",
    "ProtocolResponseSerializer",
    "PydanticResponseSerializer",
]
