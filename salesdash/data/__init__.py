"""
Data Generation Module
"""
from .generators import CSV_COLUMNS, SalesDatasetGenerator, write_sales_csv

__all__ = [
    "CSV_COLUMNS",
    "SalesDatasetGenerator",
    "write_sales_csv",
]
