"""
Record Normalizer

Turns raw sales rows (every field a string, as read from the CSV export)
into the typed record set used by the aggregation engine.
Handles:
- Timestamp parsing with a fixed format
- Numeric coercion of quantity, price, discount, shipping cost and customer id
- Mapping of return status and order priority onto their enums
- Revenue derivation
- Dropping (and counting) rows that cannot be aggregated
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import polars as pl
import structlog

from salesdash.config import get_settings
from salesdash.models import RECORD_SCHEMA, OrderPriority, ReturnStatus, empty_records

logger = structlog.get_logger(__name__)


REQUIRED_COLUMNS = [
    "InvoiceDate",
    "Country",
    "ShipmentProvider",
    "WarehouseLocation",
    "Quantity",
    "UnitPrice",
    "Discount",
    "ShippingCost",
    "ReturnStatus",
    "OrderPriority",
]
OPTIONAL_COLUMNS = ["CustomerID"]

NAME_COLUMNS = ["Country", "ShipmentProvider", "WarehouseLocation"]

RETURN_STATUS_VALUES = {
    "Returned": ReturnStatus.RETURNED.value,
    "Not Returned": ReturnStatus.NOT_RETURNED.value,
}

ORDER_PRIORITY_VALUES = {
    "High": OrderPriority.HIGH.value,
    "Medium": OrderPriority.MEDIUM.value,
    "Low": OrderPriority.LOW.value,
}

RawRows = Union[pl.DataFrame, Sequence[Mapping[str, Any]]]


class SchemaError(ValueError):
    """Raised when raw rows lack required columns"""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Sales data is missing required columns: {', '.join(missing)}")


@dataclass
class NormalizationResult:
    """Normalized record set plus ingestion statistics"""
    records: pl.DataFrame
    input_rows: int
    dropped_rows: int

    @property
    def output_rows(self) -> int:
        return self.records.height


class RecordNormalizer:
    """
    Normalizer for raw sales rows.

    Rows with an unparseable InvoiceDate, a fractional Quantity or a
    non-finite revenue are dropped.
    They never reach any aggregate; the number dropped is reported in the
    result instead of raising.

    Example:
        normalizer = RecordNormalizer()
        result = normalizer.normalize(rows)
        records = result.records
    """

    def __init__(self, date_format: Optional[str] = None):
        self.date_format = date_format or get_settings().data.invoice_date_format

    def _to_frame(self, raw_rows: RawRows) -> pl.DataFrame:
        """Bring raw rows into a frame of string columns"""
        if isinstance(raw_rows, pl.DataFrame):
            return raw_rows.with_columns(pl.all().cast(pl.Utf8))

        rows = [
            {key: (None if value is None else str(value)) for key, value in row.items()}
            for row in raw_rows
        ]
        columns: Dict[str, Any] = {}
        for row in rows:
            for key in row:
                columns.setdefault(key, pl.Utf8)

        return pl.from_dicts(rows, schema=columns) if rows else pl.DataFrame()

    def _check_columns(self, df: pl.DataFrame) -> pl.DataFrame:
        missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
        if missing:
            raise SchemaError(missing)

        for col in OPTIONAL_COLUMNS:
            if col not in df.columns:
                df = df.with_columns(pl.lit(None, dtype=pl.Utf8).alias(col))
        return df

    def _trim_strings(self, df: pl.DataFrame, columns: Iterable[str]) -> pl.DataFrame:
        """Trim whitespace from string columns"""
        return df.with_columns([pl.col(col).str.strip_chars().alias(col) for col in columns])

    def _parse_timestamp(self, column: str) -> pl.Expr:
        """Parse with the fixed format; failures become null"""
        return (
            pl.col(column)
            .str.strip_chars()
            .str.strptime(pl.Datetime("us"), self.date_format, strict=False)
        )

    def _coerce_number(self, column: str, blank_as_zero: bool = True) -> pl.Expr:
        """
        Coerce a numeric text column to Float64.

        Blank cells count as zero; text that is not a number becomes null.
        """
        text = pl.col(column).str.strip_chars()
        number = text.cast(pl.Float64, strict=False)
        if not blank_as_zero:
            return number
        return pl.when(text.is_null() | (text == "")).then(pl.lit(0.0)).otherwise(number)

    def _map_category(self, column: str, mapping: Mapping[str, str], unknown: str) -> pl.Expr:
        """Map raw labels onto enum values, anything else onto unknown"""
        text = pl.col(column).str.strip_chars()
        expr = None
        for raw, value in mapping.items():
            if expr is None:
                expr = pl.when(text == raw).then(pl.lit(value))
            else:
                expr = expr.when(text == raw).then(pl.lit(value))
        return expr.otherwise(pl.lit(unknown))

    def normalize(self, raw_rows: RawRows) -> NormalizationResult:
        """
        Normalize raw rows into the typed record set.

        Args:
            raw_rows: polars DataFrame or sequence of string-keyed mappings

        Returns:
            NormalizationResult with records in RECORD_SCHEMA order
        """
        df = self._to_frame(raw_rows)
        input_rows = df.height

        if input_rows == 0 and not df.columns:
            return NormalizationResult(records=empty_records(), input_rows=0, dropped_rows=0)

        df = self._check_columns(df)
        df = self._trim_strings(df, NAME_COLUMNS)

        quantity = self._coerce_number("Quantity")
        unit_price = self._coerce_number("UnitPrice")
        discount = self._coerce_number("Discount")

        records = (
            df.select(
                self._parse_timestamp("InvoiceDate").alias("invoice_timestamp"),
                pl.col("Country").alias("country"),
                pl.col("ShipmentProvider").alias("shipment_provider"),
                pl.col("WarehouseLocation").alias("warehouse_location"),
                quantity.alias("quantity"),
                unit_price.alias("unit_price"),
                discount.alias("discount"),
                self._coerce_number("ShippingCost").alias("shipping_cost"),
                self._coerce_number("CustomerID", blank_as_zero=False).alias("customer_id"),
                self._map_category("ReturnStatus", RETURN_STATUS_VALUES, ReturnStatus.UNKNOWN.value)
                .alias("return_status"),
                self._map_category("OrderPriority", ORDER_PRIORITY_VALUES, OrderPriority.UNKNOWN.value)
                .alias("order_priority"),
                (quantity * unit_price * (1 - discount)).alias("revenue"),
            )
            .filter(
                pl.col("invoice_timestamp").is_not_null()
                & pl.col("revenue").is_finite()
                # Quantities are unit counts; fractional ones are malformed
                & (pl.col("quantity") == pl.col("quantity").floor())
            )
            .with_columns(pl.col("quantity").cast(pl.Int64, strict=False))
            .select([pl.col(name).cast(dtype) for name, dtype in RECORD_SCHEMA.items()])
        )

        dropped_rows = input_rows - records.height
        if dropped_rows:
            logger.warning(
                "Dropped malformed sales rows",
                dropped_rows=dropped_rows,
                input_rows=input_rows,
            )
        logger.info(f"Normalized {records.height} of {input_rows} sales rows")

        return NormalizationResult(
            records=records,
            input_rows=input_rows,
            dropped_rows=dropped_rows,
        )


def normalize_rows(raw_rows: RawRows, date_format: Optional[str] = None) -> NormalizationResult:
    """
    Convenience function to normalize raw sales rows.

    Args:
        raw_rows: Raw rows as read from the sales CSV
        date_format: Override the InvoiceDate format

    Returns:
        NormalizationResult
    """
    return RecordNormalizer(date_format=date_format).normalize(raw_rows)
