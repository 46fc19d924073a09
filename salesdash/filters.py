"""
Filter State

The year / provider / country selection shared by every dashboard view,
and its query-string transport.
"""

from typing import Literal, Optional, Union
from urllib.parse import parse_qs, urlencode

from pydantic import BaseModel, ConfigDict, field_validator

from salesdash.config import get_settings

ALL_YEARS = "all"
ALL = "All"

YearSelection = Union[int, Literal["all"]]


class FilterState(BaseModel):
    """
    Active dashboard filters.

    year is a calendar year or "all"; provider and country are a name or "All".
    Instances are immutable, every change produces a new state.
    """

    model_config = ConfigDict(frozen=True)

    year: YearSelection = ALL_YEARS
    provider: str = ALL
    country: str = ALL

    @field_validator("provider", "country")
    @classmethod
    def blank_means_all(cls, v: str) -> str:
        """A blank name selects everything, as in the query string"""
        return v if v.strip() else ALL

    @property
    def is_all_years(self) -> bool:
        return self.year == ALL_YEARS

    @property
    def is_unfiltered(self) -> bool:
        return self.is_all_years and self.provider == ALL and self.country == ALL

    def with_year(self, year: YearSelection) -> "FilterState":
        return FilterState(year=year, provider=self.provider, country=self.country)

    def with_provider(self, provider: str) -> "FilterState":
        return FilterState(year=self.year, provider=provider, country=self.country)

    def with_country(self, country: str) -> "FilterState":
        return FilterState(year=self.year, provider=self.provider, country=country)

    def to_query(self) -> str:
        """Encode as a query string (without the leading '?')"""
        return urlencode({
            "year": str(self.year),
            "provider": self.provider,
            "country": self.country,
        })

    @classmethod
    def from_query(cls, query: str, default_year: Optional[int] = None) -> "FilterState":
        """
        Decode a query string.

        Missing or unparseable years fall back to default_year (the configured
        dashboard default when not given). Missing or empty provider and
        country mean "All". Unknown parameters are ignored.
        """
        if default_year is None:
            default_year = get_settings().dashboard.default_year

        params = parse_qs(query.lstrip("?"), keep_blank_values=True)

        def first(name: str) -> str:
            values = params.get(name)
            return values[0] if values else ""

        raw_year = first("year").strip()
        if raw_year == ALL_YEARS:
            year: YearSelection = ALL_YEARS
        else:
            try:
                year = int(raw_year)
            except ValueError:
                year = default_year

        return cls(
            year=year,
            provider=first("provider") or ALL,
            country=first("country") or ALL,
        )

    def describe(self) -> str:
        """Human-readable summary, e.g. for status lines"""
        year_text = "All Years" if self.is_all_years else str(self.year)
        provider_text = "All shipment providers" if self.provider == ALL else self.provider
        country_text = "All countries" if self.country == ALL else self.country
        return f"{year_text} - {country_text} - {provider_text}"
