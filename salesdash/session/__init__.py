"""
Dashboard Session Module
"""
from .controller import DashboardSession, DashboardSnapshot
from .events import CountrySelected, EventChannel, ProviderChanged, YearChanged
from .views import CalendarView, CountryQuantityView, FlowView, RevenueByYearView

__all__ = [
    "DashboardSession",
    "DashboardSnapshot",
    "EventChannel",
    "YearChanged",
    "ProviderChanged",
    "CountrySelected",
    "RevenueByYearView",
    "CountryQuantityView",
    "CalendarView",
    "FlowView",
]
