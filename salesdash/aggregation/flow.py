"""
Logistics flow graph for the Sankey view.

Every order contributes to two directed edges:
warehouse -> shipment provider and shipment provider -> destination country.
Edges aggregate order count, shipping cost, return status and priority.
A node's metrics are the sum of all edges it touches, as source or target,
so provider nodes (which sit on both stages) carry each order twice.

Node identity is (stage, name) by default. With namespace_nodes=False nodes
are identified by bare name only; a warehouse and a country that share
a name then merge into one node.
"""

from typing import Dict, List, Optional

import polars as pl
import structlog

from salesdash.filters import FilterState
from salesdash.models import (
    FlowEdge,
    FlowGraph,
    FlowNode,
    FlowNodeKey,
    FlowStage,
    OrderPriority,
    ReturnStatus,
)
from .filtering import filter_records

logger = structlog.get_logger(__name__)

STAGE_TRANSITIONS = [
    (FlowStage.WAREHOUSE, "warehouse_location", FlowStage.PROVIDER, "shipment_provider"),
    (FlowStage.PROVIDER, "shipment_provider", FlowStage.COUNTRY, "country"),
]

EDGE_KEY = ["source_stage", "source", "target_stage", "target"]


def _non_empty(column: str) -> pl.Expr:
    return pl.col(column).is_not_null() & (pl.col(column) != "")


def _stage_pairs(
    df: pl.DataFrame,
    source_stage: FlowStage,
    source_column: str,
    target_stage: FlowStage,
    target_column: str,
    namespace_nodes: bool,
) -> pl.DataFrame:
    def stage_label(stage: FlowStage) -> pl.Expr:
        return pl.lit(stage.value if namespace_nodes else None, dtype=pl.Utf8)

    # Missing or non-numeric shipping cost counts as zero
    shipping_cost = (
        pl.when(pl.col("shipping_cost").is_finite())
        .then(pl.col("shipping_cost"))
        .otherwise(pl.lit(0.0))
    )

    return df.select(
        stage_label(source_stage).alias("source_stage"),
        pl.col(source_column).alias("source"),
        stage_label(target_stage).alias("target_stage"),
        pl.col(target_column).alias("target"),
        shipping_cost.alias("shipping_cost"),
        pl.col("return_status"),
        pl.col("order_priority"),
    )


def _node_key(stage: Optional[str], name: str) -> FlowNodeKey:
    return FlowNodeKey(stage=FlowStage(stage) if stage else None, name=name)


def _add_edge(node: FlowNode, edge: FlowEdge) -> None:
    node.orders_total += edge.orders_total
    node.shipping_cost_total += edge.shipping_cost_total
    for status, count in edge.return_counts.items():
        node.return_counts[status] += count
    for priority, count in edge.priority_counts.items():
        node.priority_counts[priority] += count


def build_flow_graph(
    records: pl.DataFrame,
    filters: Optional[FilterState] = None,
    namespace_nodes: bool = True,
) -> FlowGraph:
    """
    Build the warehouse -> provider -> country flow graph.

    Only records with a warehouse, a provider and a country take part.
    Provider and country filters apply; the year filter does not.

    Args:
        records: Normalized record set
        filters: Active filters
        namespace_nodes: Identify nodes by (stage, name) instead of name

    Returns:
        FlowGraph with nodes in order of first appearance; empty when no
        record qualifies
    """
    df = filter_records(records, filters, use_year=False).filter(
        _non_empty("warehouse_location")
        & _non_empty("shipment_provider")
        & _non_empty("country")
    )
    if df.is_empty():
        return FlowGraph()

    pairs = pl.concat([
        _stage_pairs(df, source_stage, source_column, target_stage, target_column, namespace_nodes)
        for source_stage, source_column, target_stage, target_column in STAGE_TRANSITIONS
    ])

    edge_rows = pairs.group_by(EDGE_KEY, maintain_order=True).agg(
        pl.len().alias("orders_total"),
        pl.col("shipping_cost").sum().alias("shipping_cost_total"),
        *[
            (pl.col("return_status") == status.value).sum().alias(f"return_{status.value}")
            for status in ReturnStatus
        ],
        *[
            (pl.col("order_priority") == priority.value).sum().alias(f"priority_{priority.value}")
            for priority in OrderPriority
        ],
    )

    edges: List[FlowEdge] = []
    nodes: Dict[FlowNodeKey, FlowNode] = {}
    for row in edge_rows.iter_rows(named=True):
        edge = FlowEdge(
            source=_node_key(row["source_stage"], row["source"]),
            target=_node_key(row["target_stage"], row["target"]),
            orders_total=row["orders_total"],
            shipping_cost_total=row["shipping_cost_total"],
            return_counts={status: row[f"return_{status.value}"] for status in ReturnStatus},
            priority_counts={priority: row[f"priority_{priority.value}"] for priority in OrderPriority},
        )
        edges.append(edge)

        for key in (edge.source, edge.target):
            if key not in nodes:
                nodes[key] = FlowNode(key=key)
            _add_edge(nodes[key], edge)

    logger.debug(
        "Flow graph built",
        orders=df.height,
        nodes=len(nodes),
        edges=len(edges),
        namespaced=namespace_nodes,
    )
    return FlowGraph(nodes=list(nodes.values()), edges=edges)
