"""
Withdrawal strategies for the consolidated Monte Carlo portfolio.

The base withdrawal is the starting portfolio times the initial withdrawal
rate. Strategies adjust it each year:

- fixed_real: indexed by the inflation realised so far in the trial
- fixed_nominal: the same dollar amount every year
- dynamic: 10% more or less when the portfolio is well ahead of or behind a
  4% growth path, otherwise indexed by this year's inflation
- floor_ceiling: the initial rate applied to the current portfolio, kept
  between 80% and 120% of the base withdrawal
"""

from .config import MonteCarloConfig

DYNAMIC_TARGET_GROWTH = 0.04
DYNAMIC_ADJUSTMENT = 0.10
DYNAMIC_UPPER_RATIO = 1.2
DYNAMIC_LOWER_RATIO = 0.8
FLOOR_RATIO = 0.8
CEILING_RATIO = 1.2


def withdrawal_amount(
    config: MonteCarloConfig,
    portfolio: float,
    year: int,
    inflation_rate: float,
    cumulative_inflation: float,
) -> float:
    """Withdrawal for ``year`` (1-based) of a trial.

    Args:
        config: Run configuration
        portfolio: Portfolio value at the start of the year
        year: Year number within the trial, starting at 1
        inflation_rate: Inflation drawn for this year
        cumulative_inflation: Growth in prices over the years before this one
    """
    base = config.initial_withdrawal
    strategy = config.withdrawal_strategy

    if strategy == "fixed_real":
        return base * cumulative_inflation
    elif strategy == "fixed_nominal":
        return base
    elif strategy == "dynamic":
        target = config.initial_portfolio * (1 + DYNAMIC_TARGET_GROWTH) ** (year - 1)
        ratio = portfolio / target if target > 0 else 0.0
        if ratio > DYNAMIC_UPPER_RATIO:
            return base * (1 + DYNAMIC_ADJUSTMENT)
        if ratio < DYNAMIC_LOWER_RATIO:
            return base * (1 - DYNAMIC_ADJUSTMENT)
        return base * (1 + inflation_rate)
    elif strategy == "floor_ceiling":
        flexible = portfolio * config.initial_withdrawal_rate
        return max(base * FLOOR_RATIO, min(base * CEILING_RATIO, flexible))
    raise ValueError(f"Unsupported withdrawal strategy: {strategy}")
