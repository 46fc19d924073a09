"""
Calendar heatmap aggregates.

Two modes:
- a single year: one entry per calendar date of that year
- all years: one entry per month-day, laid out on a reference calendar year
"""

import calendar
from datetime import date
from typing import List, Optional

import polars as pl
import structlog

from salesdash.config.settings import LEAP_DAY_POLICIES
from salesdash.filters import FilterState
from salesdash.models import RECORD_SCHEMA, CalendarDayAggregate, SalesRecord
from .filtering import filter_records

logger = structlog.get_logger(__name__)

DEFAULT_REFERENCE_YEAR = 2025

_DAY_METRICS = [
    pl.col("revenue").sum().alias("total_revenue"),
    pl.len().alias("order_count"),
    pl.struct(list(RECORD_SCHEMA)).alias("details"),
]


def _details(rows: List[dict]) -> List[SalesRecord]:
    return [SalesRecord.from_row(row) for row in rows]


def _aggregate_single_year(df: pl.DataFrame) -> List[CalendarDayAggregate]:
    grouped = (
        df.group_by(pl.col("invoice_timestamp").dt.date().alias("day"), maintain_order=True)
        .agg(_DAY_METRICS)
        .sort("day")
    )
    return [
        CalendarDayAggregate(
            date=row["day"],
            total_revenue=row["total_revenue"],
            order_count=row["order_count"],
            detail_records=_details(row["details"]),
        )
        for row in grouped.iter_rows(named=True)
    ]


def _aggregate_all_years(
    df: pl.DataFrame,
    reference_year: int,
    leap_day_policy: str,
) -> List[CalendarDayAggregate]:
    timestamp = pl.col("invoice_timestamp")
    month = timestamp.dt.month().cast(pl.Int32)
    day = timestamp.dt.day().cast(pl.Int32)

    # Feb 29 has no slot on a non-leap reference calendar
    if not calendar.isleap(reference_year):
        is_leap_day = (month == 2) & (day == 29)
        if leap_day_policy == "drop":
            df = df.filter(~is_leap_day)
        else:
            day = pl.when(is_leap_day).then(pl.lit(28, dtype=pl.Int32)).otherwise(day)

    grouped = (
        df.group_by([month.alias("month"), day.alias("day")], maintain_order=True)
        .agg(_DAY_METRICS)
        .sort(["month", "day"])
    )
    return [
        CalendarDayAggregate(
            date=date(reference_year, row["month"], row["day"]),
            total_revenue=row["total_revenue"],
            order_count=row["order_count"],
            detail_records=_details(row["details"]),
            is_aggregate=True,
        )
        for row in grouped.iter_rows(named=True)
    ]


def aggregate_calendar(
    records: pl.DataFrame,
    filters: Optional[FilterState] = None,
    exclude_negative_revenue: bool = True,
    reference_year: int = DEFAULT_REFERENCE_YEAR,
    leap_day_policy: str = "fold",
) -> List[CalendarDayAggregate]:
    """
    Daily revenue for the calendar heatmap, sorted by date.

    Args:
        records: Normalized record set
        filters: Active filters; year "all" switches to the month-day layout
        exclude_negative_revenue: Leave out rows with negative revenue
        reference_year: Calendar year used for all-years output dates
        leap_day_policy: "fold" moves Feb 29 onto Feb 28 of a non-leap
            reference year, "drop" discards it

    Returns:
        One CalendarDayAggregate per day with at least one order; detail
        records are in timestamp order
    """
    if leap_day_policy not in LEAP_DAY_POLICIES:
        raise ValueError(f"Leap day policy must be one of: {list(LEAP_DAY_POLICIES)}")

    filters = filters or FilterState()
    df = filter_records(records, filters)
    if exclude_negative_revenue:
        df = df.filter(pl.col("revenue") >= 0)
    df = df.sort("invoice_timestamp")

    if filters.is_all_years:
        days = _aggregate_all_years(df, reference_year, leap_day_policy)
    else:
        days = _aggregate_single_year(df)

    logger.debug("Calendar aggregated", days=len(days), orders=df.height, year=str(filters.year))
    return days
