"""
View models

Renderer-agnostic state behind the four dashboard views. Each view
recomputes its aggregate from the session whenever a filter event arrives
and remembers the session revision it was computed for, so a renderer can
tell a stale result from a current one.
"""

from typing import Dict, List, Optional, Tuple

from salesdash.filters import ALL
from salesdash.models import CalendarDayAggregate, FlowGraph, YearlyAggregate
from salesdash.transformation.geography import join_quantities


class DashboardView:
    """Base class for session-attached views"""

    def __init__(self):
        self.revision = -1

    def refresh(self, session) -> None:
        self._compute(session)
        self.revision = session.revision

    def is_stale(self, session) -> bool:
        return self.revision != session.revision

    def _compute(self, session) -> None:
        raise NotImplementedError

    @property
    def is_empty(self) -> bool:
        raise NotImplementedError


class RevenueByYearView(DashboardView):
    """Bar chart of annual revenue"""

    def __init__(self):
        super().__init__()
        self.data: List[YearlyAggregate] = []
        self.selected_year = None
        self.title = "Annual Revenue Trend"

    def _compute(self, session) -> None:
        filters = session.filters
        self.data = session.engine.aggregate_by_year(session.records, filters)
        self.selected_year = filters.year

        title = "Annual Revenue Trend"
        if filters.country != ALL:
            title += f" for {filters.country}"
        if filters.provider != ALL:
            title += f" ({filters.provider})"
        self.title = title

    @property
    def is_empty(self) -> bool:
        return not self.data

    @property
    def empty_message(self) -> str:
        return "No revenue for the selected filters."


class CountryQuantityView(DashboardView):
    """Choropleth of units sold per country"""

    def __init__(self):
        super().__init__()
        self.quantities: Dict[str, int] = {}
        self.title = "Products sold"

    def _compute(self, session) -> None:
        filters = session.filters
        per_country = session.engine.aggregate_quantity_by_country(session.records, filters)
        if session.boundaries is not None:
            self.quantities = join_quantities(session.boundaries, per_country)
        else:
            self.quantities = {q.country: q.quantity for q in per_country}

        year_text = "All Years" if filters.is_all_years else str(filters.year)
        self.title = f"Products sold ({year_text})"

    @property
    def value_range(self) -> Tuple[int, int]:
        """Color scale domain over countries with sales; (0, 1) when there are none"""
        values = [v for v in self.quantities.values() if v > 0]
        if not values:
            return (0, 1)
        return (min(values), max(values))

    @property
    def is_empty(self) -> bool:
        return not any(v > 0 for v in self.quantities.values())

    @property
    def empty_message(self) -> str:
        return "No products sold for the selected filters."


class CalendarView(DashboardView):
    """Calendar heatmap of daily revenue"""

    def __init__(self):
        super().__init__()
        self.days: List[CalendarDayAggregate] = []
        self.title = ""
        self._empty_message = ""

    def _compute(self, session) -> None:
        filters = session.filters
        self.days = session.engine.aggregate_calendar(session.records, filters)
        self.title = filters.describe()

        year_text = "any year" if filters.is_all_years else str(filters.year)
        via = f" via {filters.provider}" if filters.provider != ALL else ""
        country = filters.country if filters.country != ALL else "all countries"
        self._empty_message = f"No data for {country} in {year_text}{via}."

    @property
    def max_revenue(self) -> float:
        return max((day.total_revenue for day in self.days), default=0.0)

    def day(self, month: int, day: int) -> Optional[CalendarDayAggregate]:
        for entry in self.days:
            if entry.month_day == (month, day):
                return entry
        return None

    @property
    def is_empty(self) -> bool:
        return not self.days

    @property
    def empty_message(self) -> str:
        return self._empty_message


class FlowView(DashboardView):
    """Sankey diagram of the logistics flow"""

    def __init__(self):
        super().__init__()
        self.graph = FlowGraph()
        self._empty_message = ""

    def _compute(self, session) -> None:
        filters = session.filters
        self.graph = session.engine.build_flow_graph(session.records, filters)

        country = filters.country if filters.country != ALL else "selected country"
        via = f" via {filters.provider}" if filters.provider != ALL else ""
        self._empty_message = f"No shipments for {country}{via}."

    @property
    def is_empty(self) -> bool:
        return self.graph.is_empty

    @property
    def empty_message(self) -> str:
        return self._empty_message
