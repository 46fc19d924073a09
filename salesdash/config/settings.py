"""
Sales Dashboard
Centralized Configuration Management

Pydantic settings with environment variable support for data locations,
aggregation policies and logging.
"""

from functools import lru_cache
from typing import Dict
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LEAP_DAY_POLICIES = ("fold", "drop")


class DataSettings(BaseSettings):
    """Input dataset locations and formats"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    sales_csv_path: str = Field(default="./data/online_sales_dataset.csv", description="Sales CSV path")
    boundaries_path: str = Field(default="./data/world.geojson", description="Country boundaries GeoJSON path")
    invoice_date_format: str = Field(default="%Y-%m-%d %H:%M", description="InvoiceDate parse format")


class GeographySettings(BaseSettings):
    """Country name reconciliation between sales data and boundaries"""

    model_config = SettingsConfigDict(env_prefix="GEO_")

    country_aliases: Dict[str, str] = Field(
        default={
            "USA": "United States",
            "England": "United Kingdom",
        },
        description="Boundary feature name -> sales country name",
    )


class AggregationSettings(BaseSettings):
    """Aggregation policies"""

    model_config = SettingsConfigDict(env_prefix="AGG_")

    calendar_exclude_negative_revenue: bool = Field(
        default=True,
        description="Drop negative-revenue rows from the calendar view",
    )
    calendar_reference_year: int = Field(
        default=2025,
        description="Year used to lay out the all-years calendar",
    )
    leap_day_policy: str = Field(
        default="fold",
        description="Feb 29 handling when the reference year is not a leap year: fold or drop",
    )
    flow_namespace_nodes: bool = Field(
        default=True,
        description="Identify flow nodes by (stage, name) instead of bare name",
    )

    @field_validator("leap_day_policy")
    @classmethod
    def validate_leap_day_policy(cls, v: str) -> str:
        """Validate leap day policy"""
        if v.lower() not in LEAP_DAY_POLICIES:
            raise ValueError(f"Leap day policy must be one of: {list(LEAP_DAY_POLICIES)}")
        return v.lower()


class DashboardSettings(BaseSettings):
    """Filter defaults"""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    default_year: int = Field(default=2025, description="Year used when the query string has none")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="text", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="sales-dashboard", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode: force DEBUG logging")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    data: DataSettings = Field(default_factory=DataSettings)
    geography: GeographySettings = Field(default_factory=GeographySettings)
    aggregation: AggregationSettings = Field(default_factory=AggregationSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def effective_log_level(self) -> str:
        """DEBUG forces debug logging regardless of LOG_LEVEL"""
        return "DEBUG" if self.debug else self.monitoring.log_level.upper()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
