"""
Monte Carlo stress testing.

Key Components:
- config: market assumptions, run configuration and seed derivation
- returns: correlated return and inflation draws
- withdrawals: withdrawal strategies for the consolidated portfolio
- engine: parallel trial execution and aggregation
- result: per-trial and aggregate result models
"""

from .config import MarketAssumptions, MonteCarloConfig, config_from_request, derive_seed
from .engine import MonteCarloEngine, run_monte_carlo
from .result import MonteCarloResults, MonteCarloSummary, SimulationRun

__all__ = [
    "MarketAssumptions",
    "MonteCarloConfig",
    "MonteCarloEngine",
    "MonteCarloResults",
    "MonteCarloSummary",
    "SimulationRun",
    "config_from_request",
    "derive_seed",
    "run_monte_carlo",
]
