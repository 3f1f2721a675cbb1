"""
Configuration Management for OFI Feature Construction
=====================================================

This module provides centralized configuration with:
- Type-safe configuration dataclasses
- Environment-specific presets (research vs backtest)
- Window sizes for PCA training and OLS regression

The defaults follow the setup used in the cross-impact study the features
come from: ten book levels, a 1000-pair window to learn the integrated OFI
projection and a 2000-pair window for the best-level price impact
regression.

Configuration is static. Anything that must change at runtime (window
refresh cadence, checkpointing of trained vectors) belongs to the driver
that owns the snapshot stream.
"""

from dataclasses import dataclass, field
from enum import Enum
import os

from ..errors import ContractViolation


class Environment(Enum):
    """Run environment - affects log verbosity and window defaults."""
    RESEARCH = "research"
    BACKTEST = "backtest"


@dataclass
class FeatureConfig:
    """
    Order book depth used by the feature calculators.

    ``levels`` is the depth requested from multi-level features and must not
    exceed the depth of the snapshots fed in.
    """
    levels: int = 10
    best_level: int = 1


@dataclass
class TrainingConfig:
    """
    Integrated OFI training parameters.

    The covariance estimate divides by (n - 1), so at least two
    observations are required.
    """
    training_window: int = 1000
    min_observations: int = 2


@dataclass
class RegressionConfig:
    """Cross-impact regression parameters."""
    regression_window: int = 2000


@dataclass
class OFIConfig:
    """
    Top-level configuration aggregating all components.
    """
    environment: Environment = Environment.RESEARCH
    features: FeatureConfig = field(default_factory=FeatureConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)
    regression: RegressionConfig = field(default_factory=RegressionConfig)

    # Logging
    log_level: str = field(
        default_factory=lambda: os.environ.get("OFI_LOG_LEVEL", "INFO")
    )
    structured_logs: bool = False

    def validate(self) -> "OFIConfig":
        """Check window and level bounds, raising ContractViolation."""
        if self.features.levels < 1:
            raise ContractViolation(
                f"features.levels must be >= 1, got {self.features.levels}"
            )
        if not 1 <= self.features.best_level <= self.features.levels:
            raise ContractViolation(
                f"features.best_level must be in [1, {self.features.levels}], "
                f"got {self.features.best_level}"
            )
        if self.training.min_observations < 2:
            raise ContractViolation("training.min_observations must be >= 2")
        if self.training.training_window < self.training.min_observations:
            raise ContractViolation(
                f"training.training_window must be >= "
                f"{self.training.min_observations}, got {self.training.training_window}"
            )
        if self.regression.regression_window < 1:
            raise ContractViolation(
                f"regression.regression_window must be >= 1, "
                f"got {self.regression.regression_window}"
            )
        return self


def get_default_config() -> OFIConfig:
    """
    Returns default configuration for research environment.
    """
    return OFIConfig()


def get_backtest_config() -> OFIConfig:
    """
    Returns configuration for long historical replays.

    Larger windows and quieter logging; per-pair feature logs would
    dominate run time otherwise.
    """
    config = OFIConfig(environment=Environment.BACKTEST)
    config.training.training_window = 5000
    config.regression.regression_window = 10000
    config.log_level = "WARNING"
    return config
