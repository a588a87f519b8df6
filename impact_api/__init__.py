"""Asteroid impact simulator: impact and deflection calculators behind a small FastAPI service."""

from .impact_model import AsteroidParameters, ImpactCalculator, ImpactResult, InvalidParameter
from .mitigation_model import MitigationCalculator, MitigationOutcome, MitigationStrategy

__all__ = [
    "AsteroidParameters",
    "ImpactCalculator",
    "ImpactResult",
    "InvalidParameter",
    "MitigationCalculator",
    "MitigationOutcome",
    "MitigationStrategy",
]
