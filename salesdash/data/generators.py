"""
Synthetic Data Generator

Generates sales rows in the raw CSV export format for development,
demos and tests. Values are strings, exactly as the export ships them,
including the noise the dashboard has to tolerate:
- negative quantities (returns keyed in as sales)
- blank return status and priority
- optionally, unparseable invoice dates
"""

from datetime import datetime
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np
import polars as pl
import structlog
from faker import Faker

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

COUNTRIES = [
    "United States", "United Kingdom", "France", "Germany", "Spain", "Italy",
    "Netherlands", "Belgium", "Portugal", "Sweden", "Norway", "Australia",
]

PROVIDERS = ["DHL", "FedEx", "UPS", "Royal Mail"]

WAREHOUSES = ["London", "Amsterdam", "Berlin", "Paris", "Rome"]

RETURN_STATUSES: List[Tuple[str, float]] = [
    ("Not Returned", 0.85),
    ("Returned", 0.10),
    ("", 0.05),
]

ORDER_PRIORITIES: List[Tuple[str, float]] = [
    ("High", 0.20),
    ("Medium", 0.50),
    ("Low", 0.25),
    ("", 0.05),
]

CSV_COLUMNS = [
    "InvoiceNo", "InvoiceDate", "CustomerID", "Country", "ShipmentProvider",
    "WarehouseLocation", "Quantity", "UnitPrice", "Discount", "ShippingCost",
    "ReturnStatus", "OrderPriority",
]


# =============================================================================
# GENERATORS
# =============================================================================

class SalesDatasetGenerator:
    """Generate raw online sales rows"""

    def __init__(
        self,
        seed: int = 42,
        start_year: int = 2020,
        end_year: int = 2025,
        negative_rate: float = 0.01,
        malformed_date_rate: float = 0.0,
    ):
        self.rng = np.random.default_rng(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self.start = datetime(start_year, 1, 1)
        self.end = datetime(end_year, 12, 31, 23, 59)
        self.negative_rate = negative_rate
        self.malformed_date_rate = malformed_date_rate

    def _choice(self, options: List[Tuple[str, float]], n: int) -> np.ndarray:
        values, weights = zip(*options)
        return self.rng.choice(values, size=n, p=weights)

    def generate(self, n: int = 1000) -> pl.DataFrame:
        """Generate n rows, every column a string"""
        dates = [
            self.fake.date_time_between(start_date=self.start, end_date=self.end).strftime("%Y-%m-%d %H:%M")
            for _ in range(n)
        ]
        malformed = self.rng.random(n) < self.malformed_date_rate
        dates = ["not-a-date" if bad else d for d, bad in zip(dates, malformed)]

        quantity = self.rng.integers(1, 50, n)
        quantity = np.where(self.rng.random(n) < self.negative_rate, -quantity, quantity)

        customer_ids = self.rng.integers(10000, 99999, n)
        has_customer = self.rng.random(n) > 0.1

        df = pl.DataFrame({
            "InvoiceNo": [f"INV-{i:08d}" for i in range(n)],
            "InvoiceDate": dates,
            "CustomerID": [str(c) if keep else "" for c, keep in zip(customer_ids, has_customer)],
            "Country": self.rng.choice(COUNTRIES, n),
            "ShipmentProvider": self.rng.choice(PROVIDERS, n),
            "WarehouseLocation": self.rng.choice(WAREHOUSES, n),
            "Quantity": [str(q) for q in quantity],
            "UnitPrice": [f"{p:.2f}" for p in self.rng.uniform(1, 100, n)],
            "Discount": [f"{d:.2f}" for d in self.rng.uniform(0, 0.5, n)],
            "ShippingCost": [f"{c:.2f}" for c in self.rng.uniform(5, 30, n)],
            "ReturnStatus": self._choice(RETURN_STATUSES, n),
            "OrderPriority": self._choice(ORDER_PRIORITIES, n),
        })

        logger.info(f"Generated {n} sales rows", malformed_dates=int(malformed.sum()))
        return df.select(CSV_COLUMNS)


def write_sales_csv(df: pl.DataFrame, path: Union[str, Path]) -> Path:
    """Write generated rows to CSV, creating parent directories"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.write_csv(path)
    return path
