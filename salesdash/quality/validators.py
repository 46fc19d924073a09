"""
Data Validation Module

Rule-based quality checks over the normalized sales record set.
Checks report; they never modify or drop records.

Every row-level rule is a polars expression that flags violating rows:
- Null checks
- Range checks
- Allowed-value checks
Frame-level rules are plain callables (custom checks).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from salesdash.models import OrderPriority, ReturnStatus

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Data cannot be trusted
    WARNING = "warning"  # Known noise, kept in the record set


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100


CheckFunc = Callable[[pl.DataFrame], ValidationCheck]


class DataValidator:
    """
    Data validator with a chainable check suite.

    Example:
        validator = (
            DataValidator()
            .add_not_null_check("invoice_timestamp")
            .add_range_check("discount", min_value=0, max_value=1)
        )
        result = validator.validate(records)
    """

    def __init__(self):
        self._checks: List[CheckFunc] = []

    def _add_row_check(
        self,
        name: str,
        column: str,
        violation: pl.Expr,
        severity: ValidationSeverity,
        describe: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> "DataValidator":
        """Register a check that counts rows matching the violation expression"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Column '{column}' not found",
                )

            violations = df.select(violation.fill_null(False).sum()).item()
            return ValidationCheck(
                name=name,
                passed=violations == 0,
                severity=severity,
                message=f"{violations} rows where {describe}" if violations else "Check passed",
                details=details,
                failed_rows=violations,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Flag rows where column is null"""
        return self._add_row_check(
            f"not_null_{column}",
            column,
            pl.col(column).is_null(),
            severity,
            f"'{column}' is null",
        )

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Flag rows outside [min_value, max_value]; either bound may be open"""
        violation = pl.lit(False)
        if min_value is not None:
            violation = violation | (pl.col(column) < min_value)
        if max_value is not None:
            violation = violation | (pl.col(column) > max_value)

        return self._add_row_check(
            f"range_{column}",
            column,
            violation,
            severity,
            f"'{column}' is outside [{min_value}, {max_value}]",
            details={"min": min_value, "max": max_value},
        )

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Flag non-null values outside allowed_values"""
        return self._add_row_check(
            f"enum_{column}",
            column,
            pl.col(column).is_not_null() & ~pl.col(column).is_in(allowed_values),
            severity,
            f"'{column}' is not one of {allowed_values}",
            details={"allowed_values": allowed_values},
        )

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add a frame-level rule"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            passed = bool(check_func(df))
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message="Check passed" if passed else message_on_fail,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run every check on the record set.

        Any failed error-level check fails the suite; failed warnings only
        make it partial.
        """
        started_at = datetime.now()
        checks = [check(df) for check in self._checks]

        failures = [c for c in checks if not c.passed]
        for failure in failures:
            logger.warning(
                "Validation check failed",
                check=failure.name,
                message=failure.message,
                severity=failure.severity.value,
            )

        failed_checks = sum(1 for c in failures if c.severity == ValidationSeverity.ERROR)
        warning_count = len(failures) - failed_checks

        if failed_checks:
            status = ValidationStatus.FAILED
        elif warning_count:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        logger.info(
            f"Validation complete: {status.value}",
            rows=df.height,
            checks=len(checks),
            failed=failed_checks,
            warnings=warning_count,
        )

        return ValidationResult(
            status=status,
            total_checks=len(checks),
            passed_checks=len(checks) - len(failures),
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=checks,
            started_at=started_at,
            completed_at=datetime.now(),
        )


def create_sales_validator() -> DataValidator:
    """
    Create pre-configured validator for normalized sales records.

    Negative quantities and prices occur in the source export and stay in
    the record set, so their range checks only warn.
    """
    return (
        DataValidator()
        .add_not_null_check("invoice_timestamp")
        .add_custom_check(
            name="revenue_finite",
            check_func=lambda df: df.filter(~pl.col("revenue").is_finite()).height == 0,
            message_on_fail="Revenue contains non-finite values",
        )
        .add_range_check("quantity", min_value=0, severity=ValidationSeverity.WARNING)
        .add_range_check("unit_price", min_value=0, severity=ValidationSeverity.WARNING)
        .add_range_check("discount", min_value=0, max_value=1, severity=ValidationSeverity.WARNING)
        .add_range_check("shipping_cost", min_value=0, severity=ValidationSeverity.WARNING)
        .add_not_null_check("country", severity=ValidationSeverity.WARNING)
        .add_enum_check("return_status", [status.value for status in ReturnStatus])
        .add_enum_check("order_priority", [priority.value for priority in OrderPriority])
    )
