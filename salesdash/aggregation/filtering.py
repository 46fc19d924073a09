"""
Record filtering shared by every aggregate.
"""

from typing import Optional

import polars as pl

from salesdash.filters import ALL, FilterState


def filter_records(
    records: pl.DataFrame,
    filters: Optional[FilterState] = None,
    use_year: bool = True,
    use_provider: bool = True,
    use_country: bool = True,
) -> pl.DataFrame:
    """
    Apply the active filters to the record set.

    A filter set to "all" / "All" matches every record. The use_* flags let
    a view ignore filters it does not respond to.
    """
    if filters is None:
        return records

    conditions = []
    if use_year and not filters.is_all_years:
        conditions.append(pl.col("invoice_timestamp").dt.year() == filters.year)
    if use_provider and filters.provider != ALL:
        conditions.append(pl.col("shipment_provider") == filters.provider)
    if use_country and filters.country != ALL:
        conditions.append(pl.col("country") == filters.country)

    if not conditions:
        return records

    combined = conditions[0]
    for cond in conditions[1:]:
        combined = combined & cond
    return records.filter(combined)
