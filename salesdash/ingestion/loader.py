"""
Dataset Loader

Reads the sales CSV export and the country boundaries GeoJSON from disk,
then runs normalization, validation and geographic reconciliation once
per session. Read failures are the only fatal errors of the dashboard and
surface as DatasetLoadError.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import polars as pl
import structlog

from salesdash.config import Settings, get_settings
from salesdash.quality.validators import ValidationResult, create_sales_validator
from salesdash.transformation.geography import reconcile_geography
from salesdash.transformation.normalizer import NormalizationResult, RecordNormalizer

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


class DatasetLoadError(Exception):
    """Raised when an input file cannot be read"""

    def __init__(self, path: PathLike, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to load {self.path}: {reason}")


@dataclass
class Dataset:
    """Everything a dashboard session needs, loaded once"""
    records: pl.DataFrame
    normalization: NormalizationResult
    validation: ValidationResult
    boundaries: Optional[Dict[str, Any]] = None


def load_sales_csv(path: PathLike) -> pl.DataFrame:
    """Read the sales CSV with every column as a string"""
    path = Path(path)
    if not path.is_file():
        raise DatasetLoadError(path, "file not found")
    try:
        return pl.read_csv(path, infer_schema_length=0)
    except (OSError, pl.exceptions.PolarsError) as e:
        raise DatasetLoadError(path, str(e)) from e


def load_boundaries(path: PathLike) -> Dict[str, Any]:
    """Read a GeoJSON FeatureCollection"""
    path = Path(path)
    if not path.is_file():
        raise DatasetLoadError(path, "file not found")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            boundaries = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise DatasetLoadError(path, str(e)) from e

    if not isinstance(boundaries, dict) or not isinstance(boundaries.get("features"), list):
        raise DatasetLoadError(path, "not a GeoJSON FeatureCollection")
    return boundaries


def load_dataset(
    sales_path: Optional[PathLike] = None,
    boundaries_path: Optional[PathLike] = None,
    with_boundaries: bool = True,
    settings: Optional[Settings] = None,
) -> Dataset:
    """
    Load, normalize and validate the dashboard dataset.

    Args:
        sales_path: Sales CSV; configured path by default
        boundaries_path: Boundaries GeoJSON; configured path by default
        with_boundaries: Skip the boundaries file when False
        settings: Settings override

    Returns:
        Dataset with normalized records and reconciled boundaries
    """
    settings = settings or get_settings()
    sales_path = sales_path or settings.data.sales_csv_path

    logger.info("Loading sales data", path=str(sales_path))
    raw = load_sales_csv(sales_path)

    normalization = RecordNormalizer(settings.data.invoice_date_format).normalize(raw)
    validation = create_sales_validator().validate(normalization.records)

    boundaries = None
    if with_boundaries:
        boundaries_path = boundaries_path or settings.data.boundaries_path
        logger.info("Loading country boundaries", path=str(boundaries_path))
        boundaries = reconcile_geography(
            load_boundaries(boundaries_path),
            settings.geography.country_aliases,
        )

    return Dataset(
        records=normalization.records,
        normalization=normalization,
        validation=validation,
        boundaries=boundaries,
    )
