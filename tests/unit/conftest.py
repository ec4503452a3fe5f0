# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared pytest configuration for all unit tests.

Every test under tests/unit/ is marked ``unit`` so that it can be selected
with ``pytest -m unit``. pytestmark in a conftest does not propagate to
other files, so the marker is applied in a collection hook.
"""

import pytest


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Add the unit marker to tests collected from tests/unit."""
    unit_marker = pytest.mark.unit
    for item in items:
        if "tests/unit" in str(item.path) and item.get_closest_marker("unit") is None:
            item.add_marker(unit_marker)
