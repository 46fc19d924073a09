"""
Dashboard Session

Owns the filter state of one dashboard session, keeps its query-string
encoding current and broadcasts every change to the attached views.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

import polars as pl
import structlog

from salesdash.aggregation import AggregationEngine
from salesdash.config import get_settings
from salesdash.filters import ALL, ALL_YEARS, FilterState, YearSelection
from salesdash.models import (
    CalendarDayAggregate,
    CountryQuantity,
    FlowGraph,
    YearlyAggregate,
)
from .events import (
    EVENT_TYPES,
    CountrySelected,
    DashboardEvent,
    EventChannel,
    ProviderChanged,
    YearChanged,
)

logger = structlog.get_logger(__name__)


@dataclass
class DashboardSnapshot:
    """Every aggregate for one filter state"""
    filters: FilterState
    revision: int
    yearly: List[YearlyAggregate] = field(default_factory=list)
    quantities: List[CountryQuantity] = field(default_factory=list)
    calendar: List[CalendarDayAggregate] = field(default_factory=list)
    flow: FlowGraph = field(default_factory=FlowGraph)


class DashboardSession:
    """
    Top-level controller for one dashboard session.

    The record set is read-only for the lifetime of the session. Each
    effective filter change bumps revision, updates query_string and
    publishes the matching event; changes that leave the state as it was
    publish nothing.

    Example:
        session = DashboardSession.from_query(records, "year=2024&provider=DHL")
        session.attach(RevenueByYearView())
        session.toggle_country("France")
    """

    def __init__(
        self,
        records: pl.DataFrame,
        filters: Optional[FilterState] = None,
        engine: Optional[AggregationEngine] = None,
        channel: Optional[EventChannel] = None,
        boundaries: Optional[Mapping[str, Any]] = None,
    ):
        self.records = records
        self.boundaries = boundaries
        self.engine = engine or AggregationEngine()
        self.channel = channel or EventChannel()
        self._filters = filters or FilterState(year=get_settings().dashboard.default_year)
        self.revision = 0
        self._subscriptions: Dict[Any, List[Callable[[], None]]] = {}

    @classmethod
    def from_query(cls, records: pl.DataFrame, query: str, **kwargs) -> "DashboardSession":
        """Restore a session from its query-string encoding"""
        return cls(records, filters=FilterState.from_query(query), **kwargs)

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def query_string(self) -> str:
        return self._filters.to_query()

    def _apply(self, filters: FilterState, events: List[DashboardEvent]) -> bool:
        if filters == self._filters:
            return False

        self._filters = filters
        self.revision += 1
        logger.info(
            "Filters changed",
            revision=self.revision,
            year=str(filters.year),
            provider=filters.provider,
            country=filters.country,
        )
        for event in events:
            self.channel.publish(event)
        return True

    def set_year(self, year: YearSelection) -> bool:
        """Select a year, or "all"."""
        filters = self._filters.with_year(year)
        return self._apply(filters, [YearChanged(year=filters.year)])

    def toggle_year(self, year: int) -> bool:
        """Select a year; selecting the active year again shows all years."""
        return self.set_year(ALL_YEARS if self._filters.year == year else year)

    def set_provider(self, provider: str) -> bool:
        filters = self._filters.with_provider(provider)
        return self._apply(filters, [ProviderChanged(provider=filters.provider)])

    def set_country(self, country: str) -> bool:
        filters = self._filters.with_country(country)
        return self._apply(filters, [CountrySelected(country=filters.country)])

    def toggle_country(self, country: str) -> bool:
        """Select a country; selecting the active country again clears it."""
        return self.set_country(ALL if self._filters.country == country else country)

    def reset(self) -> bool:
        """Clear every filter"""
        current = self._filters
        filters = FilterState()
        events: List[DashboardEvent] = []
        if current.year != filters.year:
            events.append(YearChanged(year=filters.year))
        if current.provider != filters.provider:
            events.append(ProviderChanged(provider=filters.provider))
        if current.country != filters.country:
            events.append(CountrySelected(country=filters.country))
        return self._apply(filters, events)

    def attach(self, view) -> None:
        """
        Subscribe a view to every filter event and render it once.

        A change that publishes several events (reset) refreshes the view
        once, on the first event of the new revision.
        """
        if view in self._subscriptions:
            return

        def on_event(event: DashboardEvent) -> None:
            if view.is_stale(self):
                view.refresh(self)

        self._subscriptions[view] = [
            self.channel.subscribe(event_type, on_event) for event_type in EVENT_TYPES
        ]
        view.refresh(self)

    def detach(self, view) -> bool:
        """Stop refreshing a view; returns False if it was not attached"""
        unsubscribes = self._subscriptions.pop(view, None)
        if unsubscribes is None:
            return False
        for unsubscribe in unsubscribes:
            unsubscribe()
        return True

    def providers(self) -> List[str]:
        return self.engine.list_providers(self.records)

    def snapshot(self) -> DashboardSnapshot:
        """Compute every aggregate for the current filters"""
        filters = self._filters
        return DashboardSnapshot(
            filters=filters,
            revision=self.revision,
            yearly=self.engine.aggregate_by_year(self.records, filters),
            quantities=self.engine.aggregate_quantity_by_country(self.records, filters),
            calendar=self.engine.aggregate_calendar(self.records, filters),
            flow=self.engine.build_flow_graph(self.records, filters),
        )
