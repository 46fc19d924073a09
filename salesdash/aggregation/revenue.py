"""
Revenue and quantity aggregates for the bar chart and the world map.
"""

from typing import Dict, List, Optional

import polars as pl

from salesdash.filters import FilterState
from salesdash.models import CountryAggregate, CountryQuantity, YearlyAggregate
from .filtering import filter_records

YEAR = pl.col("invoice_timestamp").dt.year().cast(pl.Int32).alias("year")


def aggregate_by_year(
    records: pl.DataFrame,
    filters: Optional[FilterState] = None,
) -> List[YearlyAggregate]:
    """
    Revenue per calendar year, ascending by year.

    Provider and country filters apply; the year filter does not, since the
    bar chart always shows every year.
    """
    df = filter_records(records, filters, use_year=False)
    grouped = (
        df.group_by(YEAR)
        .agg(pl.col("revenue").sum().alias("revenue"))
        .sort("year")
    )
    return [
        YearlyAggregate(year=row["year"], revenue=row["revenue"])
        for row in grouped.iter_rows(named=True)
    ]


def aggregate_by_country_year(records: pl.DataFrame) -> List[CountryAggregate]:
    """Revenue per (country, year), ordered by country then year"""
    grouped = (
        records.filter(pl.col("country").is_not_null())
        .group_by([pl.col("country"), YEAR])
        .agg(pl.col("revenue").sum().alias("revenue"))
        .sort(["country", "year"])
    )
    return [
        CountryAggregate(country=row["country"], year=row["year"], revenue=row["revenue"])
        for row in grouped.iter_rows(named=True)
    ]


def country_ranking(aggregates: List[CountryAggregate], year: int) -> List[CountryAggregate]:
    """Single-year snapshot, highest revenue first"""
    snapshot = [agg for agg in aggregates if agg.year == year]
    return sorted(snapshot, key=lambda agg: (-agg.revenue, agg.country))


def country_series(aggregates: List[CountryAggregate]) -> Dict[str, List[CountryAggregate]]:
    """One year-ordered series per country, for multi-year trend lines"""
    series: Dict[str, List[CountryAggregate]] = {}
    for agg in sorted(aggregates, key=lambda a: (a.country, a.year)):
        series.setdefault(agg.country, []).append(agg)
    return series


def aggregate_quantity_by_country(
    records: pl.DataFrame,
    filters: Optional[FilterState] = None,
) -> List[CountryQuantity]:
    """
    Units sold per country, for the choropleth.

    Provider and year filters apply; the country filter does not, the map
    always shows every country.
    """
    df = filter_records(records, filters, use_country=False)
    grouped = (
        df.filter(pl.col("country").is_not_null())
        .group_by("country")
        .agg(pl.col("quantity").sum().alias("quantity"))
        .sort("country")
    )
    return [
        CountryQuantity(country=row["country"], quantity=row["quantity"])
        for row in grouped.iter_rows(named=True)
    ]


def list_providers(records: pl.DataFrame) -> List[str]:
    """Distinct shipment providers, sorted, for the provider selector"""
    providers = records.get_column("shipment_provider").drop_nulls().unique().sort()
    return [provider for provider in providers.to_list() if provider]
