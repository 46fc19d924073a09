"""
Aggregation Engine

Binds the configured aggregation policies to the pure aggregate functions.
Every call recomputes from the record set; nothing is cached between calls.
"""

from typing import List, Optional

import polars as pl

from salesdash.config import get_settings
from salesdash.config.settings import AggregationSettings
from salesdash.filters import FilterState
from salesdash.models import (
    CalendarDayAggregate,
    CountryAggregate,
    CountryQuantity,
    FlowGraph,
    YearlyAggregate,
)
from .daily import aggregate_calendar
from .flow import build_flow_graph
from .revenue import (
    aggregate_by_country_year,
    aggregate_by_year,
    aggregate_quantity_by_country,
    list_providers,
)


class AggregationEngine:
    """
    Aggregation entry point used by the dashboard session.

    Example:
        engine = AggregationEngine()
        yearly = engine.aggregate_by_year(records, FilterState(provider="DHL"))
    """

    def __init__(self, settings: Optional[AggregationSettings] = None):
        self.settings = settings or get_settings().aggregation

    def aggregate_by_year(self, records: pl.DataFrame, filters: FilterState) -> List[YearlyAggregate]:
        return aggregate_by_year(records, filters)

    def aggregate_by_country_year(self, records: pl.DataFrame) -> List[CountryAggregate]:
        return aggregate_by_country_year(records)

    def aggregate_quantity_by_country(
        self, records: pl.DataFrame, filters: FilterState
    ) -> List[CountryQuantity]:
        return aggregate_quantity_by_country(records, filters)

    def aggregate_calendar(
        self, records: pl.DataFrame, filters: FilterState
    ) -> List[CalendarDayAggregate]:
        return aggregate_calendar(
            records,
            filters,
            exclude_negative_revenue=self.settings.calendar_exclude_negative_revenue,
            reference_year=self.settings.calendar_reference_year,
            leap_day_policy=self.settings.leap_day_policy,
        )

    def build_flow_graph(self, records: pl.DataFrame, filters: FilterState) -> FlowGraph:
        return build_flow_graph(
            records,
            filters,
            namespace_nodes=self.settings.flow_namespace_nodes,
        )

    def list_providers(self, records: pl.DataFrame) -> List[str]:
        return list_providers(records)
