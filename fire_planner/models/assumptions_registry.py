"""
Registry of published assumption bundles.

The registry is the only place policy literals for a financial year are
written down. Callers look bundles up by id and hand them to the engine as
part of a run request.
"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .assumptions import (
    AgePensionRules,
    Assumptions,
    MedicareLevy,
    PolicySettings,
    SuperannuationRules,
    TaxBracket,
    TaxOffset,
)

TAX_BRACKETS_2025_26 = [
    TaxBracket(min_income=0, max_income=18200, rate=0.0),
    TaxBracket(min_income=18200, max_income=45000, rate=0.16),
    TaxBracket(min_income=45000, max_income=135000, rate=0.30),
    TaxBracket(min_income=135000, max_income=190000, rate=0.37),
    TaxBracket(min_income=190000, max_income=None, rate=0.45),
]

AUS_2025_26 = Assumptions(
    id="AUS_2025_26",
    financial_year="2025-26",
    tax_brackets=TAX_BRACKETS_2025_26,
    medicare_levy=MedicareLevy(rate=0.02, threshold=29207, shade_in_band=3040),
    tax_offset=TaxOffset(maximum=700, threshold=37500, taper_rate=0.05),
    superannuation=SuperannuationRules(
        superannuation_guarantee_rate=0.115,
        preservation_age=60,
        concessional_cap=30000,
        non_concessional_cap=120000,
        bring_forward_cap=360000,
        transfer_balance_cap=1900000,
        contribution_age_limit=67,
    ),
    age_pension=AgePensionRules(),
    policy_settings=PolicySettings(
        homeowner_status=True, div296_applies=True, apply_stage3_tax_cuts=True
    ),
)


class AssumptionsMetadata(BaseModel):
    """Registry entry describing a bundle."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    financial_year: str
    effective_from: date
    effective_to: date
    description: str = ""
    data: Assumptions
    is_current: bool = False
    is_projected: bool = False

    def summary(self) -> Dict[str, object]:
        """Listing view without the full bundle."""
        return self.model_dump(mode="json", exclude={"data"})


ASSUMPTIONS_REGISTRY: List[AssumptionsMetadata] = [
    AssumptionsMetadata(
        id="AUS_2025_26",
        display_name="Australia 2025-26",
        financial_year="2025-26",
        effective_from=date(2025, 7, 1),
        effective_to=date(2026, 6, 30),
        description=(
            "Australian tax rates, super rules and age pension thresholds for "
            "FY 2025-26, including the Stage 3 tax cuts."
        ),
        data=AUS_2025_26,
        is_current=True,
    )
]


def get_assumptions_metadata(assumptions_id: str) -> Optional[AssumptionsMetadata]:
    for entry in ASSUMPTIONS_REGISTRY:
        if entry.id == assumptions_id:
            return entry
    return None


def get_assumptions(assumptions_id: str) -> Optional[Assumptions]:
    """Look up a bundle by id, returning None when it is not registered."""
    entry = get_assumptions_metadata(assumptions_id)
    return entry.data if entry else None


def list_assumptions() -> List[AssumptionsMetadata]:
    return list(ASSUMPTIONS_REGISTRY)


def validate_assumptions(assumptions: Assumptions) -> List[str]:
    """
    Check a bundle for internally inconsistent values.

    Type and range checks are already enforced by the models; this covers the
    relationships between fields.

    Returns:
        List of error messages, empty when the bundle is usable
    """
    errors: List[str] = []

    previous_max: Optional[float] = None
    for index, bracket in enumerate(assumptions.tax_brackets, start=1):
        if bracket.max_income is not None and bracket.max_income <= bracket.min_income:
            errors.append(
                f"Tax bracket {index}: max_income must be greater than min_income"
            )
        if previous_max is not None and bracket.min_income < previous_max:
            errors.append(f"Tax bracket {index}: brackets must not overlap")
        if bracket.max_income is None and index != len(assumptions.tax_brackets):
            errors.append(f"Tax bracket {index}: only the top bracket may be open-ended")
        previous_max = bracket.max_income

    super_rules = assumptions.superannuation
    if super_rules.superannuation_guarantee_rate > 0.2:
        errors.append("Superannuation guarantee rate must be between 0% and 20%")
    if not 55 <= super_rules.preservation_age <= 67:
        errors.append("Preservation age must be between 55 and 67")
    if super_rules.concessional_cap <= 0:
        errors.append("Concessional contribution cap must be positive")

    rates = [band.rate for band in super_rules.minimum_drawdown_rates]
    if rates != sorted(rates):
        errors.append("Minimum drawdown rates must not decrease with age")

    pension = assumptions.age_pension
    if pension.maximum_payment_single <= 0:
        errors.append("Maximum single age pension payment must be positive")
    if pension.deeming_rate_upper < pension.deeming_rate_lower:
        errors.append("Upper deeming rate must not be below the lower deeming rate")

    return errors

