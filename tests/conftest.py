"""
Test Suite Configuration
"""
import json
import pytest
from typing import Dict, List

import polars as pl

from salesdash.config import Settings
from salesdash.config.settings import AggregationSettings
from salesdash.transformation.normalizer import normalize_rows


def raw_row(
    date: str,
    country: str = "France",
    provider: str = "DHL",
    warehouse: str = "London",
    quantity: str = "1",
    unit_price: str = "10",
    discount: str = "0",
    shipping_cost: str = "5",
    return_status: str = "Not Returned",
    priority: str = "High",
    customer_id: str = "12345",
) -> Dict[str, str]:
    """Build one raw CSV row; every value is a string as in the export"""
    return {
        "InvoiceNo": "INV-1",
        "InvoiceDate": date,
        "CustomerID": customer_id,
        "Country": country,
        "ShipmentProvider": provider,
        "WarehouseLocation": warehouse,
        "Quantity": quantity,
        "UnitPrice": unit_price,
        "Discount": discount,
        "ShippingCost": shipping_cost,
        "ReturnStatus": return_status,
        "OrderPriority": priority,
    }


@pytest.fixture
def make_row():
    """Factory for raw CSV rows"""
    return raw_row


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        APP_ENV="testing",
        DEBUG=True,
    )


@pytest.fixture
def aggregation_settings() -> AggregationSettings:
    """Default aggregation policies"""
    return AggregationSettings()


@pytest.fixture
def raw_rows() -> List[Dict[str, str]]:
    """Raw sales rows spanning two years, three countries and two providers"""
    return [
        raw_row("2024-01-05 09:30", "France", "DHL", "London", "2", "50", "0", "10"),
        raw_row("2024-01-05 15:10", "Spain", "UPS", "London", "1", "50", "0", "6", "Returned", "Low"),
        raw_row("2024-02-29 11:00", "France", "UPS", "Paris", "3", "10", "0.5", "4", "", "Medium"),
        raw_row("2025-01-05 08:00", "Spain", "DHL", "Paris", "3", "10", "0", "7"),
        raw_row("2025-03-10 13:45", "Germany", "DHL", "London", "-1", "20", "0", "3"),
        raw_row("2025-03-10 18:20", "France", "DHL", "London", "4", "5", "0.1", "8", "Returned", ""),
    ]


@pytest.fixture
def records(raw_rows) -> pl.DataFrame:
    """Normalized record set built from raw_rows"""
    return normalize_rows(raw_rows).records


@pytest.fixture
def boundaries() -> Dict:
    """Minimal GeoJSON with one aliased and one sales-less country"""
    def feature(name: str) -> Dict:
        return {
            "type": "Feature",
            "properties": {"name": name},
            "geometry": {"type": "Point", "coordinates": [0, 0]},
        }

    return {
        "type": "FeatureCollection",
        "features": [
            feature("France"),
            feature("Spain"),
            feature("Germany"),
            feature("England"),
            feature("Italy"),
        ],
    }


@pytest.fixture
def sales_csv(tmp_path, raw_rows):
    """raw_rows written as a CSV export"""
    path = tmp_path / "online_sales_dataset.csv"
    pl.DataFrame(raw_rows).write_csv(path)
    return path


@pytest.fixture
def boundaries_file(tmp_path, boundaries):
    """boundaries written as a GeoJSON file"""
    path = tmp_path / "world.geojson"
    path.write_text(json.dumps(boundaries), encoding="utf-8")
    return path
