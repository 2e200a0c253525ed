"""Demo: an export menu for an in-memory order grid served by FastAPI.

Run with::

    pip install "grid-export[fastapi,pdf,xls]" uvicorn
    uvicorn docs.examples.app:app --reload

then open http://localhost:8000/orders/export and pick a format.  Output
defaults (folder, stream, encoding, ...) come from ``GRID_EXPORT_*``
variables or a ``.env`` file in the working directory.
"""

from __future__ import annotations

import datetime as dt
import logging

from fastapi import FastAPI

from grid_export.adapters.fastapi import install_export
from grid_export.application.grid import ActionColumn, ArrayDataProvider, DataColumn, SerialColumn
from grid_export.application.menu import ExportMenu
from grid_export.config.settings import DotenvSettingsLoader, EnvSettingsLoader, ExportSettings, SettingsFactory
from grid_export.observability import JsonLoggerFactory

JsonLoggerFactory.configure(logging.INFO)

settings = SettingsFactory.create(ExportSettings, [EnvSettingsLoader(), DotenvSettingsLoader()])

ORDERS = [
    {
        "id": 1000 + i,
        "customer": ("Acme", "Globex", "Initech", "Umbrella")[i % 4],
        "region": ("North", "South")[i % 2],
        "amount": round(125.5 * (i + 1), 2),
        "paid": i % 3 != 0,
        "ordered_on": dt.date(2024, 1, 1) + dt.timedelta(days=7 * i),
    }
    for i in range(40)
]

COLUMNS = [
    SerialColumn(),
    DataColumn(attribute="id", label="Order #", format="raw"),
    DataColumn(attribute="customer"),
    DataColumn(attribute="region", group=True),
    DataColumn(attribute="amount", format=["decimal", 2], footer="Total"),
    DataColumn(attribute="paid", format="boolean"),
    DataColumn(attribute="ordered_on", format="date"),
    ActionColumn(),
]


def orders_menu() -> ExportMenu:
    return ExportMenu.from_settings(
        settings,
        COLUMNS,
        ArrayDataProvider(ORDERS, key="id"),
        id="orders",
        filename="orders",
        export_config={"Pdf": {"pdf_config": {"orientation": "landscape"}}},
        caption="Orders",
        hidden_columns=[1],
    )


app = FastAPI(title="grid-export demo")
install_export(app, orders_menu, "/orders/export")
