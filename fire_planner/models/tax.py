"""
Personal income tax for a projected year.

Tax is the progressive bracket amount plus the Medicare levy, less the low
income tax offset, floored at zero. Super withdrawals are tax free once the
person reaches access age and fully taxable before it.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from .assumptions import Assumptions, MedicareLevy, TaxBracket, TaxOffset


class TaxResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    taxable_income: Dict[str, float] = Field(default_factory=dict)
    tax_payable: Dict[str, float] = Field(default_factory=dict)


def bracket_tax(income: float, brackets: List[TaxBracket]) -> float:
    """Progressive tax: each bracket taxes only the income that falls inside it."""
    if income <= 0:
        return 0.0

    tax = 0.0
    for bracket in brackets:
        if income <= bracket.min_income:
            break
        upper = income if bracket.max_income is None else min(income, bracket.max_income)
        tax += (upper - bracket.min_income) * bracket.rate
    return tax


def medicare_levy(income: float, levy: MedicareLevy) -> float:
    """Zero up to the threshold, shaded in across the band, then flat."""
    if income <= levy.threshold:
        return 0.0
    if income <= levy.threshold + levy.shade_in_band:
        return income * levy.rate * (income - levy.threshold) / levy.shade_in_band
    return income * levy.rate


def tax_offset(income: float, offset: TaxOffset) -> float:
    """Flat offset up to the threshold, tapered linearly to zero above it."""
    if income <= offset.threshold:
        return offset.maximum
    return max(0.0, offset.maximum - (income - offset.threshold) * offset.taper_rate)


def income_tax(income: float, assumptions: Assumptions) -> float:
    if income <= 0:
        return 0.0
    gross = bracket_tax(income, assumptions.tax_brackets)
    gross += medicare_levy(income, assumptions.medicare_levy)
    return max(0.0, gross - tax_offset(income, assumptions.tax_offset))


def taxable_super_withdrawal(withdrawal: float, age: int, assumptions: Assumptions) -> float:
    if withdrawal <= 0 or age >= assumptions.preservation_age:
        return 0.0
    return withdrawal


def run_tax(
    assumptions: Assumptions,
    ages: Dict[str, int],
    employment_income: Dict[str, float],
    super_withdrawals: Dict[str, float],
) -> TaxResult:
    """Taxable income and tax payable per person.

    Age pension payments are not assessable here.
    """
    taxable: Dict[str, float] = {}
    payable: Dict[str, float] = {}
    for person_id, age in ages.items():
        income = employment_income.get(person_id, 0.0) + taxable_super_withdrawal(
            super_withdrawals.get(person_id, 0.0), age, assumptions
        )
        taxable[person_id] = income
        payable[person_id] = income_tax(income, assumptions)
    return TaxResult(taxable_income=taxable, tax_payable=payable)
