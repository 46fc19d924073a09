"""
Data Transformation Module
"""
from .normalizer import NormalizationResult, RecordNormalizer, SchemaError, normalize_rows
from .geography import boundary_names, join_quantities, reconcile_geography

__all__ = [
    "NormalizationResult",
    "RecordNormalizer",
    "SchemaError",
    "normalize_rows",
    "boundary_names",
    "join_quantities",
    "reconcile_geography",
]
