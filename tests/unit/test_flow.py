"""
Unit Tests - Logistics Flow Graph
"""
import pytest

from salesdash.aggregation import build_flow_graph
from salesdash.filters import FilterState
from salesdash.models import FlowNodeKey, FlowStage, OrderPriority, ReturnStatus
from salesdash.transformation import normalize_rows


def key(stage: FlowStage, name: str) -> FlowNodeKey:
    return FlowNodeKey(stage=stage, name=name)


class TestFlowGraph:
    """Tests for build_flow_graph"""

    def test_edges_per_stage(self, records):
        """Test every order contributes one edge per stage transition"""
        graph = build_flow_graph(records)

        warehouse_edges = [e for e in graph.edges if e.source.stage == FlowStage.WAREHOUSE]
        provider_edges = [e for e in graph.edges if e.source.stage == FlowStage.PROVIDER]

        assert len(graph.edges) == 9
        assert sum(e.orders_total for e in warehouse_edges) == records.height
        assert sum(e.orders_total for e in provider_edges) == records.height

    def test_edge_metrics(self, records):
        """Test orders, shipping cost and average weight of one edge"""
        graph = build_flow_graph(records)

        edge = [
            e for e in graph.edges
            if e.source == key(FlowStage.WAREHOUSE, "London")
            and e.target == key(FlowStage.PROVIDER, "DHL")
        ][0]
        assert edge.orders_total == 3
        assert edge.shipping_cost_total == pytest.approx(21.0)
        assert edge.average_shipping_cost == pytest.approx(7.0)

    def test_histograms_sum_to_orders(self, records):
        """Test return and priority counts add up to orders_total"""
        graph = build_flow_graph(records)

        for edge in graph.edges:
            assert sum(edge.return_counts.values()) == edge.orders_total
            assert sum(edge.priority_counts.values()) == edge.orders_total
        for node in graph.nodes:
            assert sum(node.return_counts.values()) == node.orders_total
            assert sum(node.priority_counts.values()) == node.orders_total

    def test_unknown_categories_counted(self, records):
        """Test blank return status and priority count as Unknown"""
        graph = build_flow_graph(records)

        edge = [
            e for e in graph.edges
            if e.source == key(FlowStage.WAREHOUSE, "Paris")
            and e.target == key(FlowStage.PROVIDER, "UPS")
        ][0]
        assert edge.return_counts[ReturnStatus.UNKNOWN] == 1
        assert edge.priority_counts[OrderPriority.MEDIUM] == 1

    def test_node_totals_sum_incident_edges(self, records):
        """Test node metrics are the sum of every edge touching the node"""
        graph = build_flow_graph(records)

        for node in graph.nodes:
            incident = [e for e in graph.edges if node.key in (e.source, e.target)]
            assert node.orders_total == sum(e.orders_total for e in incident)
            assert node.shipping_cost_total == pytest.approx(sum(e.shipping_cost_total for e in incident))

    def test_provider_nodes_count_orders_twice(self, records):
        """Test provider nodes sit on both stage transitions"""
        graph = build_flow_graph(records)

        dhl = graph.node(key(FlowStage.PROVIDER, "DHL"))
        assert dhl.orders_total == 8
        london = graph.node(key(FlowStage.WAREHOUSE, "London"))
        assert london.orders_total == 4

    def test_nodes_in_first_appearance_order(self, records):
        """Test node order and index map"""
        graph = build_flow_graph(records)

        index = graph.node_index()
        assert graph.nodes[0].key == key(FlowStage.WAREHOUSE, "London")
        assert graph.nodes[1].key == key(FlowStage.PROVIDER, "DHL")
        assert index[key(FlowStage.PROVIDER, "DHL")] == 1
        assert len(index) == len(graph.nodes)

    def test_provider_and_country_filters(self, records):
        """Test provider and country filters apply"""
        graph = build_flow_graph(records, FilterState(provider="UPS", country="France"))

        assert [(e.source.name, e.target.name) for e in graph.edges] == [
            ("Paris", "UPS"),
            ("UPS", "France"),
        ]

    def test_year_filter_ignored(self, records):
        """Test the flow view covers every year"""
        graph = build_flow_graph(records, FilterState(year=2024))

        assert sum(e.orders_total for e in graph.edges) == 2 * records.height

    def test_bad_dates_excluded(self, make_row):
        """Test rows dropped during normalization never reach the graph"""
        records = normalize_rows([
            make_row("2024-03-01 10:00"),
            make_row("garbage"),
        ]).records

        graph = build_flow_graph(records)

        assert sum(e.orders_total for e in graph.edges) == 2

    def test_missing_names_excluded(self, make_row):
        """Test rows without warehouse, provider or country are left out"""
        records = normalize_rows([
            make_row("2024-03-01 10:00"),
            make_row("2024-03-01 11:00", warehouse=""),
            make_row("2024-03-01 12:00", provider=" "),
        ]).records

        graph = build_flow_graph(records)

        assert [e.orders_total for e in graph.edges] == [1, 1]

    def test_non_numeric_shipping_cost_counts_as_zero(self, make_row):
        """Test unusable shipping costs contribute zero"""
        records = normalize_rows([
            make_row("2024-03-01 10:00", shipping_cost="n/a"),
            make_row("2024-03-01 11:00", shipping_cost="4"),
        ]).records

        graph = build_flow_graph(records)

        assert graph.edges[0].shipping_cost_total == pytest.approx(4.0)
        assert graph.edges[0].orders_total == 2

    def test_empty_selection(self, records):
        """Test filters that match nothing yield an empty graph"""
        graph = build_flow_graph(records, FilterState(country="Atlantis"))

        assert graph.is_empty
        assert graph.nodes == []

    def test_namespaced_nodes_keep_same_names_apart(self, make_row):
        """Test a warehouse and a country with the same name stay distinct"""
        records = normalize_rows([make_row("2024-03-01 10:00", country="Paris", warehouse="Paris")]).records

        graph = build_flow_graph(records)

        assert len(graph.nodes) == 3
        assert graph.node(key(FlowStage.WAREHOUSE, "Paris")).orders_total == 1
        assert graph.node(key(FlowStage.COUNTRY, "Paris")).orders_total == 1

    def test_bare_name_nodes_merge(self, make_row):
        """Test bare-name identity merges same-named nodes across stages"""
        records = normalize_rows([make_row("2024-03-01 10:00", country="Paris", warehouse="Paris")]).records

        graph = build_flow_graph(records, namespace_nodes=False)

        assert len(graph.nodes) == 2
        paris = graph.node(FlowNodeKey(stage=None, name="Paris"))
        assert paris.stage is None
        assert paris.orders_total == 2
