"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from bizsight.core.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings so env overrides in one test never leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def root_logging():
    """Restore root handlers and level after a test reconfigures logging."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in saved_handlers:
            handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


@pytest.fixture
def monthly_points():
    """Six months of revenue with an upward trend."""
    values = [1000, 1200, 1100, 1300, 1250, 1400]
    return [{"period": f"2024-{m:02d}", "value": v} for m, v in zip(range(1, 7), values)]


@pytest.fixture
def snapshot():
    """Small record store snapshot: three customers, four items, sales in 2024."""
    sales = [
        {
            "id": "INV-1",
            "date": "2024-04-10",
            "customer_id": "C1",
            "total": 60000.0,
            "items": [
                {"item_id": "rice", "quantity": 10, "rate": 5000.0},
                {"item_id": "wheat", "quantity": 2, "rate": 5000.0},
            ],
        },
        {
            "id": "INV-2",
            "date": "2024-05-02",
            "customer_id": "C2",
            "total": 1500.0,
            "items": [
                {"item_id": "rice", "quantity": 1, "rate": 500.0},
                {"item_id": "dal", "quantity": 4, "rate": 250.0},
            ],
        },
        {
            "id": "INV-3",
            "date": "2024-06-20",
            "customer_id": "C1",
            "total": 4000.0,
            "items": [{"item_id": "rice", "quantity": 3, "rate": 1000.0}],
        },
        {
            "id": "INV-4",
            "date": "2024-06-25",
            "customer_id": "C3",
            "total": 800.0,
            "items": [
                {"item_id": "wheat", "quantity": 1, "rate": 400.0},
                {"item_id": "oil", "quantity": 2, "rate": 200.0},
            ],
        },
    ]
    items = [
        {"id": "rice", "quantity_on_hand": 40, "min_quantity": 50,
         "average_daily_sales": 5, "lead_time_days": 7, "value": 500},
        {"id": "wheat", "quantity_on_hand": 0, "min_quantity": 20,
         "average_daily_sales": 1, "lead_time_days": 3, "value": 300},
        {"id": "dal", "quantity_on_hand": 500, "min_quantity": 10,
         "average_daily_sales": 2, "lead_time_days": 5, "value": 100},
        {"id": "oil", "quantity_on_hand": 5, "min_quantity": 10,
         "average_daily_sales": 1, "lead_time_days": 2, "value": 100},
    ]
    customers = [{"id": "C1", "name": "Anand Traders"}, {"id": "C2", "name": "Bala Stores"},
                 {"id": "C3", "name": "Chetan Agro"}]
    return {
        "as_of": datetime(2024, 6, 30, 12, 0),
        "items": items,
        "sales": sales,
        "customers": customers,
    }
