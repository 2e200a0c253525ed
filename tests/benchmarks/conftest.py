"""conftest.py for benchmarks.

Provides a session-scoped grid of synthetic rows shared by every export
benchmark so row generation stays out of the timed section.
"""

from __future__ import annotations

import datetime as dt

import pytest

from grid_export.application.grid import DataColumn, SerialColumn


@pytest.fixture(scope="session")
def rows():
    """2 000 order-like rows."""
    start = dt.date(2024, 1, 1)
    return [
        {
            "id": i,
            "customer": f"Customer {i % 97}",
            "region": ("North", "South", "East", "West")[i % 4],
            "amount": round(i * 1.37, 2),
            "shipped": i % 3 == 0,
            "ordered_on": start + dt.timedelta(days=i % 365),
        }
        for i in range(2000)
    ]


@pytest.fixture(scope="session")
def columns():
    return [
        SerialColumn(),
        DataColumn(attribute="customer"),
        DataColumn(attribute="region", group=True),
        DataColumn(attribute="amount", format="decimal"),
        DataColumn(attribute="shipped", format="boolean"),
        DataColumn(attribute="ordered_on", format="date"),
    ]
