"""
Projection time grid and display formatting.

The grid is the simulation clock: every calculator receives the year being
projected from it and nothing in the engine reads the wall-clock date.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class TimeGrid(BaseModel):
    """Inclusive range of calendar years covered by a projection."""

    start_year: int = Field(
        ..., ge=1900, le=2200, description="First projected year"
    )
    end_year: int = Field(..., ge=1900, le=2300, description="Last projected year")

    @field_validator("end_year")
    @classmethod
    def validate_end_year(cls, v: int, info: ValidationInfo) -> int:
        if "start_year" in info.data and v < info.data["start_year"]:
            raise ValueError("End year must be >= start year")
        return v

    @classmethod
    def for_horizon(cls, start_year: int, end_age: int, youngest_age: int) -> "TimeGrid":
        """Grid running until the youngest person reaches ``end_age``."""
        return cls(
            start_year=start_year,
            end_year=start_year + max(0, end_age - youngest_age),
        )

    def get_years(self) -> List[int]:
        return list(range(self.start_year, self.end_year + 1))

    def years_since_start(self, year: int) -> int:
        return year - self.start_year


class CurrencyFormatter(BaseModel):
    """Formats currency and percentage values for messages."""

    currency_symbol: str = Field(default="$")

    def format_thousands(self, amount: float) -> str:
        """Compact form, e.g. $1,250k."""
        return f"{self.currency_symbol}{amount / 1000:,.0f}k"

    def format_percentage(self, rate: float, decimal_places: Optional[int] = 1) -> str:
        return f"{rate * 100:.{decimal_places}f}%"


DEFAULT_FORMATTER = CurrencyFormatter()
