"""
OFI Features
============

Order Flow Imbalance feature construction from limit order book snapshots,
following "Cross-impact of order flow imbalance in equity markets"
(Cont, Cucuringu, Zhang 2023).

This package provides:
- Best-level OFI
- Deeper-level (multi-level) OFI with depth normalization
- Integrated OFI via the first principal component of multi-level OFI
- Cross-impact OLS of log returns on best-level OFI

MODULES:
- data: Snapshot and SnapshotPair records
- features: OFI calculators, log returns, batch pipeline
- models: Cross-impact regression
- infra: Configuration, logging, and diagnostics

NOTE: Parsing raw feed files and persisting trained parameters are left to
the driver that owns the snapshot stream.
"""

__version__ = "1.0.0"
__author__ = "OFI Research Team"

from .errors import (
    OFIError,
    ContractViolation,
    NotTrainedError,
    NumericDegeneracy,
)

from .infra import (
    OFIConfig,
    get_default_config,
    get_backtest_config,
    configure_logging,
    logger,
    regression_diagnostics,
)

from .data import (
    Snapshot,
    SnapshotPair,
    consecutive_pairs,
)

from .features import (
    level_delta,
    level_deltas,
    raw_ofi,
    BestLevelOFI,
    DeeperLevelOFI,
    IntegratedOFI,
    ModelState,
    log_return,
    OFIFeaturePipeline,
    OFIFeatures,
)

from .models import (
    CrossImpactModel,
    RegressionModel,
)

__all__ = [
    # Errors
    "OFIError",
    "ContractViolation",
    "NotTrainedError",
    "NumericDegeneracy",
    # Config
    "OFIConfig",
    "get_default_config",
    "get_backtest_config",
    # Logging
    "configure_logging",
    "logger",
    # Diagnostics
    "regression_diagnostics",
    # Data
    "Snapshot",
    "SnapshotPair",
    "consecutive_pairs",
    # Features
    "level_delta",
    "level_deltas",
    "raw_ofi",
    "BestLevelOFI",
    "DeeperLevelOFI",
    "IntegratedOFI",
    "ModelState",
    "log_return",
    "OFIFeaturePipeline",
    "OFIFeatures",
    # Models
    "CrossImpactModel",
    "RegressionModel",
]
