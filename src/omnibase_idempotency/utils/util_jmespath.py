# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""JMESPath extraction for idempotency keys and payload validation.

Idempotency keys and validation hashes are computed over a sub-document of
the incoming payload selected with a JMESPath expression. Besides the
standard function set, expressions may decode embedded payloads, which is
common for queue and stream envelopes that carry JSON as a string:

    - ``decode_json(@)``: parse a JSON string
    - ``decode_base64(@)``: decode a base64 string to text
    - ``decode_base64_gzip(@)``: decode a base64 string and gunzip it to text

Example:
    >>> extract("body | decode_json(@).order_id", {"body": '{"order_id": 7}'})
    7
"""

from __future__ import annotations

import base64
import gzip
import json
from collections.abc import Callable
from functools import lru_cache

import jmespath
from jmespath import functions
from jmespath.parser import ParsedResult

# Signature of the extraction capability consumed by the persistence layer
KeyExtractor = Callable[[str, object], object]


class IdempotencyJMESPathFunctions(functions.Functions):
    """JMESPath functions for decoding embedded envelope payloads."""

    @functions.signature({"types": ["string"]})
    def _func_decode_json(self, value: str) -> object:
        return json.loads(value)

    @functions.signature({"types": ["string"]})
    def _func_decode_base64(self, value: str) -> str:
        return base64.b64decode(value).decode("utf-8")

    @functions.signature({"types": ["string"]})
    def _func_decode_base64_gzip(self, value: str) -> str:
        return gzip.decompress(base64.b64decode(value)).decode("utf-8")


_OPTIONS = jmespath.Options(custom_functions=IdempotencyJMESPathFunctions())


@lru_cache(maxsize=256)
def compile_expression(expression: str) -> ParsedResult:
    """Compile and memoize a JMESPath expression.

    Raises:
        jmespath.exceptions.ParseError: If the expression is not valid JMESPath.
    """
    return jmespath.compile(expression)


def extract(expression: str, data: object) -> object:
    """Evaluate a JMESPath expression against data.

    Args:
        expression: JMESPath expression.
        data: JSON-like document.

    Returns:
        The selected value, or None when the expression matches nothing.
    """
    return compile_expression(expression).search(data, options=_OPTIONS)


__all__: list[str] = [
    "IdempotencyJMESPathFunctions",
    "KeyExtractor",
    "compile_expression",
    "extract",
]
