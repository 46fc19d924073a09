"""
Data Ingestion Module
"""
from .loader import Dataset, DatasetLoadError, load_boundaries, load_dataset, load_sales_csv

__all__ = [
    "Dataset",
    "DatasetLoadError",
    "load_boundaries",
    "load_dataset",
    "load_sales_csv",
]
