"""
Domain Models

Typed records and aggregate shapes shared by the normalizer, the aggregation
engine and the session layer.

The normalized record set itself is a polars DataFrame with RECORD_SCHEMA;
SalesRecord is the row view handed out where individual orders are needed
(calendar day details).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple

import polars as pl


class ReturnStatus(str, Enum):
    """Return state of an order"""
    RETURNED = "Returned"
    NOT_RETURNED = "NotReturned"
    UNKNOWN = "Unknown"


class OrderPriority(str, Enum):
    """Order priority"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNKNOWN = "Unknown"


class FlowStage(str, Enum):
    """Stages of the logistics flow"""
    WAREHOUSE = "warehouse"
    PROVIDER = "provider"
    COUNTRY = "country"


# Column names of the normalized record set
RECORD_SCHEMA: Dict[str, pl.DataType] = {
    "invoice_timestamp": pl.Datetime("us"),
    "country": pl.Utf8,
    "shipment_provider": pl.Utf8,
    "warehouse_location": pl.Utf8,
    "quantity": pl.Int64,
    "unit_price": pl.Float64,
    "discount": pl.Float64,
    "shipping_cost": pl.Float64,
    "customer_id": pl.Float64,
    "return_status": pl.Utf8,
    "order_priority": pl.Utf8,
    "revenue": pl.Float64,
}


def empty_records() -> pl.DataFrame:
    """An empty record set with the normalized schema"""
    return pl.DataFrame(schema=RECORD_SCHEMA)


@dataclass(frozen=True)
class SalesRecord:
    """One normalized sales row"""
    invoice_timestamp: datetime
    country: str
    shipment_provider: str
    warehouse_location: str
    quantity: int
    unit_price: float
    discount: float
    shipping_cost: float
    customer_id: Optional[float]
    return_status: ReturnStatus
    order_priority: OrderPriority
    revenue: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SalesRecord":
        """Build a record from a row dict of the normalized record set"""
        return cls(
            invoice_timestamp=row["invoice_timestamp"],
            country=row["country"],
            shipment_provider=row["shipment_provider"],
            warehouse_location=row["warehouse_location"],
            quantity=row["quantity"],
            unit_price=row["unit_price"],
            discount=row["discount"],
            shipping_cost=row["shipping_cost"],
            customer_id=row.get("customer_id"),
            return_status=ReturnStatus(row["return_status"]),
            order_priority=OrderPriority(row["order_priority"]),
            revenue=row["revenue"],
        )


@dataclass(frozen=True)
class YearlyAggregate:
    """Revenue for one calendar year"""
    year: int
    revenue: float


@dataclass(frozen=True)
class CountryAggregate:
    """Revenue for one (country, year) pair"""
    country: str
    year: int
    revenue: float

    @property
    def reference_date(self) -> date:
        """Point on the time axis for multi-year trend lines"""
        return date(self.year, 1, 1)


@dataclass(frozen=True)
class CountryQuantity:
    """Units sold to one country"""
    country: str
    quantity: int


@dataclass
class CalendarDayAggregate:
    """Revenue of one calendar day, or of one month-day across all years"""
    date: date
    total_revenue: float
    order_count: int
    detail_records: List[SalesRecord] = field(default_factory=list)
    is_aggregate: bool = False

    @property
    def month_day(self) -> Tuple[int, int]:
        return (self.date.month, self.date.day)

    @property
    def average_quantity(self) -> float:
        if not self.detail_records:
            return 0.0
        return sum(r.quantity for r in self.detail_records) / len(self.detail_records)

    @property
    def average_unit_price(self) -> float:
        if not self.detail_records:
            return 0.0
        return sum(r.unit_price for r in self.detail_records) / len(self.detail_records)

    def hourly_revenue(self) -> List[float]:
        """Revenue of the day's orders binned by hour of day (24 bins)"""
        bins = [0.0] * 24
        for record in self.detail_records:
            bins[record.invoice_timestamp.hour] += record.revenue
        return bins


def empty_return_counts() -> Dict[ReturnStatus, int]:
    return {status: 0 for status in ReturnStatus}


def empty_priority_counts() -> Dict[OrderPriority, int]:
    return {priority: 0 for priority in OrderPriority}


class FlowNodeKey(NamedTuple):
    """Identity of a flow node. stage is None when nodes are not namespaced."""
    stage: Optional[FlowStage]
    name: str


@dataclass
class FlowNode:
    """A warehouse, provider or country in the logistics flow"""
    key: FlowNodeKey
    orders_total: int = 0
    shipping_cost_total: float = 0.0
    return_counts: Dict[ReturnStatus, int] = field(default_factory=empty_return_counts)
    priority_counts: Dict[OrderPriority, int] = field(default_factory=empty_priority_counts)

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def stage(self) -> Optional[FlowStage]:
        return self.key.stage


@dataclass
class FlowEdge:
    """Aggregated shipments between two adjacent stages"""
    source: FlowNodeKey
    target: FlowNodeKey
    orders_total: int
    shipping_cost_total: float
    return_counts: Dict[ReturnStatus, int] = field(default_factory=empty_return_counts)
    priority_counts: Dict[OrderPriority, int] = field(default_factory=empty_priority_counts)

    @property
    def average_shipping_cost(self) -> float:
        """Edge weight used for rendering. orders_total is at least 1."""
        return self.shipping_cost_total / self.orders_total


@dataclass
class FlowGraph:
    """Two-stage flow graph: warehouse -> provider -> country"""
    nodes: List[FlowNode] = field(default_factory=list)
    edges: List[FlowEdge] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.edges

    def node(self, key: FlowNodeKey) -> Optional[FlowNode]:
        for node in self.nodes:
            if node.key == key:
                return node
        return None

    def node_index(self) -> Dict[FlowNodeKey, int]:
        """Position of every node, for renderers that link by index"""
        return {node.key: i for i, node in enumerate(self.nodes)}
