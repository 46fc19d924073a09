"""
Aggregation Module
"""
from .daily import aggregate_calendar
from .engine import AggregationEngine
from .filtering import filter_records
from .flow import build_flow_graph
from .revenue import (
    aggregate_by_country_year,
    aggregate_by_year,
    aggregate_quantity_by_country,
    country_ranking,
    country_series,
    list_providers,
)

__all__ = [
    "AggregationEngine",
    "aggregate_by_country_year",
    "aggregate_by_year",
    "aggregate_calendar",
    "aggregate_quantity_by_country",
    "build_flow_graph",
    "country_ranking",
    "country_series",
    "filter_records",
    "list_providers",
]
