"""
Correlated return and inflation draws for Monte Carlo trials.

Standard normals come from the Box-Muller transform. The second normal is
mixed with the first to give the requested correlation:

    z2' = rho * z1 + sqrt(1 - rho^2) * z2

Every trial owns its own ``numpy.random.Generator`` so results do not depend
on how trials are scheduled across workers.
"""

from typing import List, Tuple

import numpy as np
from numpy.typing import NDArray

from .config import MarketAssumptions


def box_muller(
    rng: np.random.Generator, size: int
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Two independent arrays of standard normal draws."""
    # 1 - U keeps the log argument in (0, 1]
    u1 = 1.0 - rng.random(size)
    u2 = rng.random(size)
    radius = np.sqrt(-2.0 * np.log(u1))
    angle = 2.0 * np.pi * u2
    return radius * np.cos(angle), radius * np.sin(angle)


def correlated_paths(
    rng: np.random.Generator, market: MarketAssumptions, years: int
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Draw a path of annual market returns and inflation rates.

    Args:
        rng: Generator owned by the trial
        market: Distribution parameters
        years: Path length

    Returns:
        Tuple of (returns, inflation), each of shape (years,)
    """
    z1, z2 = box_muller(rng, years)
    rho = market.correlation_coefficient
    z_inflation = rho * z1 + np.sqrt(1.0 - rho * rho) * z2

    returns = market.mean_return + market.volatility * z1
    inflation = market.inflation_mean + market.inflation_volatility * z_inflation
    return returns, inflation


def spawn_generators(seed: int, count: int) -> List[np.random.Generator]:
    """Independent generators, one per trial, from a single root seed."""
    children = np.random.SeedSequence(seed).spawn(count)
    return [np.random.default_rng(child) for child in children]
