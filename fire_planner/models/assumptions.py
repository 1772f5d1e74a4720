"""
Versioned policy assumptions for Australian retirement projections.

An Assumptions bundle carries every jurisdiction-specific literal the engine
reads: tax brackets, levy and offset parameters, superannuation rules and the
age pension means test. Bundles are immutable; calculators only read them.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaxBracket(BaseModel):
    """A marginal tax bracket. Income above ``min_income`` is taxed at ``rate``."""

    model_config = ConfigDict(frozen=True)

    min_income: float = Field(..., ge=0, description="Lower bound of the bracket")
    max_income: Optional[float] = Field(
        default=None, description="Upper bound of the bracket, None for the top bracket"
    )
    rate: float = Field(..., ge=0, le=1, description="Marginal rate (decimal)")


class MedicareLevy(BaseModel):
    """Income-tested flat levy, shaded in over a band above the threshold."""

    model_config = ConfigDict(frozen=True)

    rate: float = Field(default=0.02, ge=0, le=1)
    threshold: float = Field(default=29207, ge=0)
    shade_in_band: float = Field(default=3040, gt=0)


class TaxOffset(BaseModel):
    """Income-tested offset: flat up to the threshold, then tapered to zero."""

    model_config = ConfigDict(frozen=True)

    maximum: float = Field(default=700, ge=0)
    threshold: float = Field(default=37500, ge=0)
    taper_rate: float = Field(default=0.05, ge=0, le=1)


class DrawdownBand(BaseModel):
    """Minimum pension drawdown rate applying from ``min_age`` upwards."""

    model_config = ConfigDict(frozen=True)

    min_age: int = Field(..., ge=0)
    rate: float = Field(..., ge=0, le=1)


DEFAULT_DRAWDOWN_BANDS = (
    DrawdownBand(min_age=60, rate=0.04),
    DrawdownBand(min_age=65, rate=0.05),
    DrawdownBand(min_age=70, rate=0.06),
    DrawdownBand(min_age=75, rate=0.07),
    DrawdownBand(min_age=80, rate=0.09),
    DrawdownBand(min_age=85, rate=0.11),
    DrawdownBand(min_age=90, rate=0.14),
    DrawdownBand(min_age=95, rate=0.14),
)


class SuperannuationRules(BaseModel):
    """Contribution and drawdown rules for retirement accounts."""

    model_config = ConfigDict(frozen=True)

    superannuation_guarantee_rate: float = Field(default=0.115, ge=0, le=1)
    preservation_age: int = Field(default=60, ge=0)
    concessional_cap: float = Field(default=30000, ge=0)
    non_concessional_cap: float = Field(default=120000, ge=0)
    bring_forward_cap: float = Field(default=360000, ge=0)
    transfer_balance_cap: float = Field(default=1900000, ge=0)
    contribution_age_limit: int = Field(default=67, ge=0)
    minimum_drawdown_rates: List[DrawdownBand] = Field(
        default_factory=lambda: list(DEFAULT_DRAWDOWN_BANDS)
    )

    @field_validator("minimum_drawdown_rates")
    @classmethod
    def sort_bands(cls, v: List[DrawdownBand]) -> List[DrawdownBand]:
        """Keep bands ordered by age so lookups can scan from the top."""
        return sorted(v, key=lambda band: band.min_age)

    def minimum_drawdown_rate(self, age: int) -> float:
        """Minimum drawdown rate for an age, 0 below the first band."""
        rate = 0.0
        for band in self.minimum_drawdown_rates:
            if age >= band.min_age:
                rate = band.rate
        return rate


class AgePensionRules(BaseModel):
    """Means test parameters. Payments and thresholds are annual amounts."""

    model_config = ConfigDict(frozen=True)

    pension_age: int = Field(default=67, ge=0)
    maximum_payment_single: float = Field(default=1144.40 * 26, ge=0)
    maximum_payment_couple: float = Field(
        default=1725.20 * 26, ge=0, description="Combined payment for both partners"
    )
    assets_test_threshold_single: float = Field(default=301750, ge=0)
    assets_test_threshold_couple: float = Field(default=451500, ge=0)
    income_test_threshold_single: float = Field(default=2385.60 * 26, ge=0)
    income_test_threshold_couple: float = Field(
        default=3544.40 * 26, ge=0, description="Combined threshold for both partners"
    )
    assets_taper_single: float = Field(default=0.0075, ge=0)
    assets_taper_couple: float = Field(default=0.00375, ge=0)
    income_taper: float = Field(default=0.5, ge=0)
    deeming_rate_lower: float = Field(default=0.025, ge=0, le=1)
    deeming_rate_upper: float = Field(default=0.0425, ge=0, le=1)
    deeming_threshold: float = Field(default=62600, ge=0)


class PolicySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    homeowner_status: bool = Field(default=True)
    div296_applies: bool = Field(default=True)
    apply_stage3_tax_cuts: bool = Field(default=True)


class Assumptions(BaseModel):
    """Immutable, versioned bundle of policy settings for one financial year."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Bundle identifier, e.g. AUS_2025_26")
    financial_year: str = Field(..., description="Financial year label, e.g. 2025-26")
    tax_brackets: List[TaxBracket] = Field(..., min_length=1)
    medicare_levy: MedicareLevy = Field(default_factory=MedicareLevy)
    tax_offset: TaxOffset = Field(default_factory=TaxOffset)
    superannuation: SuperannuationRules = Field(default_factory=SuperannuationRules)
    age_pension: AgePensionRules = Field(default_factory=AgePensionRules)
    policy_settings: PolicySettings = Field(default_factory=PolicySettings)

    @property
    def preservation_age(self) -> int:
        return self.superannuation.preservation_age
