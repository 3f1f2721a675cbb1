"""
Infrastructure module for OFI feature construction.

Provides core infrastructure components:
- Configuration management
- Logging and latency tracking
- Model diagnostics
"""

from .config import (
    OFIConfig,
    FeatureConfig,
    TrainingConfig,
    RegressionConfig,
    Environment,
    get_default_config,
    get_backtest_config,
)

from .logging import (
    OFILogger,
    LogCategory,
    LatencyMeasurement,
    LatencyTracker,
    StructuredFormatter,
    configure_logging,
    get_logger,
    get_latency_stats,
    logger,
)

from .metrics import (
    RegressionStats,
    regression_diagnostics,
    format_model_report,
)

__all__ = [
    # Config
    "OFIConfig",
    "FeatureConfig",
    "TrainingConfig",
    "RegressionConfig",
    "Environment",
    "get_default_config",
    "get_backtest_config",
    # Logging
    "OFILogger",
    "LogCategory",
    "LatencyMeasurement",
    "LatencyTracker",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "get_latency_stats",
    "logger",
    # Metrics
    "RegressionStats",
    "regression_diagnostics",
    "format_model_report",
]
