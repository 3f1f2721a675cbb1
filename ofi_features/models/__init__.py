"""
Models module for OFI feature construction.

Price impact regressions on OFI features.
"""

from .cross_impact import (
    CrossImpactModel,
    RegressionModel,
    ZERO_MODEL,
)

__all__ = [
    "CrossImpactModel",
    "RegressionModel",
    "ZERO_MODEL",
]
