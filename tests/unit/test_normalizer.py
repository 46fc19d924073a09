"""
Unit Tests - Record Normalization and Geography
"""
from datetime import datetime

import pytest
import polars as pl

from salesdash.models import RECORD_SCHEMA, CountryQuantity, OrderPriority, ReturnStatus, SalesRecord
from salesdash.transformation import (
    RecordNormalizer,
    SchemaError,
    boundary_names,
    join_quantities,
    normalize_rows,
    reconcile_geography,
)


class TestRecordNormalizer:
    """Tests for RecordNormalizer"""

    def test_schema_and_row_count(self, raw_rows):
        """Test every valid row survives with the normalized schema"""
        result = normalize_rows(raw_rows)

        assert result.input_rows == 6
        assert result.output_rows == 6
        assert result.dropped_rows == 0
        assert dict(result.records.schema) == RECORD_SCHEMA

    def test_revenue_derivation(self, make_row):
        """Test revenue is quantity * unit price * (1 - discount)"""
        result = normalize_rows([make_row("2024-03-01 10:00", quantity="3", unit_price="10", discount="0.25")])

        assert result.records["revenue"][0] == pytest.approx(22.5)

    def test_full_discount_keeps_zero_revenue_row(self, make_row):
        """Test a 100% discount yields a zero-revenue record, not a dropped one"""
        result = normalize_rows([make_row("2024-03-01 10:00", discount="1.0")])

        assert result.output_rows == 1
        assert result.records["revenue"][0] == 0.0

    def test_unparseable_date_is_dropped_and_counted(self, make_row):
        """Test rows with a bad InvoiceDate never reach the record set"""
        rows = [
            make_row("2024-03-01 10:00"),
            make_row("not-a-date"),
            make_row("2024/03/01 10:00"),
        ]

        result = normalize_rows(rows)

        assert result.output_rows == 1
        assert result.dropped_rows == 2

    def test_timestamp_parsed_with_fixed_format(self, make_row):
        """Test InvoiceDate parsing"""
        result = normalize_rows([make_row("2023-12-31 23:59")])

        assert result.records["invoice_timestamp"][0] == datetime(2023, 12, 31, 23, 59)

    def test_custom_date_format(self, make_row):
        """Test an overridden InvoiceDate format"""
        result = normalize_rows([make_row("31/12/2023 23:59")], date_format="%d/%m/%Y %H:%M")

        assert result.output_rows == 1

    def test_non_numeric_price_is_dropped(self, make_row):
        """Test text in a revenue column makes the row unusable"""
        result = normalize_rows([make_row("2024-03-01 10:00", unit_price="n/a")])

        assert result.output_rows == 0
        assert result.dropped_rows == 1

    def test_blank_numeric_cells_count_as_zero(self, make_row):
        """Test blank discount and shipping cost coerce to zero"""
        result = normalize_rows([make_row("2024-03-01 10:00", discount="", shipping_cost="")])

        record = result.records.row(0, named=True)
        assert record["discount"] == 0.0
        assert record["shipping_cost"] == 0.0
        assert record["revenue"] == pytest.approx(10.0)

    def test_blank_customer_id_is_null(self, make_row):
        """Test CustomerID is optional"""
        result = normalize_rows([make_row("2024-03-01 10:00", customer_id="")])

        assert result.records["customer_id"][0] is None

    def test_missing_customer_id_column(self, make_row):
        """Test CustomerID may be absent altogether"""
        row = make_row("2024-03-01 10:00")
        del row["CustomerID"]

        result = normalize_rows([row])

        assert result.output_rows == 1
        assert result.records["customer_id"][0] is None

    def test_category_mapping(self, make_row):
        """Test return status and priority labels map onto enums"""
        rows = [
            make_row("2024-03-01 10:00", return_status="Returned", priority="Low"),
            make_row("2024-03-01 11:00", return_status="Not Returned", priority="Medium"),
            make_row("2024-03-01 12:00", return_status="", priority=""),
            make_row("2024-03-01 13:00", return_status="Lost", priority="Urgent"),
        ]

        result = normalize_rows(rows)

        assert result.records["return_status"].to_list() == [
            ReturnStatus.RETURNED.value,
            ReturnStatus.NOT_RETURNED.value,
            ReturnStatus.UNKNOWN.value,
            ReturnStatus.UNKNOWN.value,
        ]
        assert result.records["order_priority"].to_list() == [
            OrderPriority.LOW.value,
            OrderPriority.MEDIUM.value,
            OrderPriority.UNKNOWN.value,
            OrderPriority.UNKNOWN.value,
        ]

    def test_names_are_trimmed(self, make_row):
        """Test whitespace around country, provider and warehouse is removed"""
        result = normalize_rows([make_row("2024-03-01 10:00", country=" France ", provider="DHL  ")])

        record = result.records.row(0, named=True)
        assert record["country"] == "France"
        assert record["shipment_provider"] == "DHL"

    def test_fractional_quantity_is_dropped(self, make_row):
        """Test a fractional Quantity is malformed; stored quantity and revenue stay consistent"""
        rows = [
            make_row("2024-03-01 10:00", quantity="2.5", unit_price="10"),
            make_row("2024-03-01 11:00", quantity="2.0", unit_price="10"),
        ]

        result = normalize_rows(rows)

        assert result.dropped_rows == 1
        record = result.records.row(0, named=True)
        assert record["quantity"] == 2
        assert record["revenue"] == pytest.approx(record["quantity"] * record["unit_price"] * (1 - record["discount"]))

    def test_negative_quantity_kept(self, make_row):
        """Test negative quantities survive with negative revenue"""
        result = normalize_rows([make_row("2024-03-01 10:00", quantity="-2")])

        assert result.records["quantity"][0] == -2
        assert result.records["revenue"][0] == pytest.approx(-20.0)

    def test_missing_required_column_raises(self, make_row):
        """Test a schema violation is reported by column"""
        row = make_row("2024-03-01 10:00")
        del row["ShippingCost"]
        del row["Country"]

        with pytest.raises(SchemaError) as exc_info:
            normalize_rows([row])

        assert exc_info.value.missing == ["Country", "ShippingCost"]

    def test_empty_input(self):
        """Test empty input yields an empty record set"""
        result = normalize_rows([])

        assert result.output_rows == 0
        assert result.dropped_rows == 0
        assert result.records.columns == list(RECORD_SCHEMA)

    def test_accepts_dataframe(self, raw_rows):
        """Test a string DataFrame (as read from CSV) is accepted"""
        result = RecordNormalizer().normalize(pl.DataFrame(raw_rows))

        assert result.output_rows == len(raw_rows)

    def test_sales_record_view(self, records):
        """Test a record row converts to SalesRecord"""
        record = SalesRecord.from_row(records.row(1, named=True))

        assert record.country == "Spain"
        assert record.return_status == ReturnStatus.RETURNED
        assert record.order_priority == OrderPriority.LOW


class TestGeography:
    """Tests for boundary reconciliation"""

    def test_aliases_rename_features(self, boundaries):
        """Test alias table renames boundary features"""
        reconciled = reconcile_geography(boundaries, {"England": "United Kingdom"})

        assert "United Kingdom" in boundary_names(reconciled)
        assert "England" not in boundary_names(reconciled)

    def test_input_not_modified(self, boundaries):
        """Test reconciliation returns a copy"""
        reconcile_geography(boundaries, {"England": "United Kingdom"})

        assert "England" in boundary_names(boundaries)

    def test_default_aliases(self, boundaries):
        """Test configured aliases apply by default"""
        reconciled = reconcile_geography(boundaries)

        assert "United Kingdom" in boundary_names(reconciled)

    def test_join_fills_missing_countries_with_zero(self, boundaries):
        """Test countries without sales get zero and unmatched sales are left out"""
        quantities = [
            CountryQuantity(country="France", quantity=9),
            CountryQuantity(country="Atlantis", quantity=3),
        ]

        joined = join_quantities(boundaries, quantities)

        assert joined["France"] == 9
        assert joined["Italy"] == 0
        assert "Atlantis" not in joined
