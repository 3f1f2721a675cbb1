"""
Feature module for OFI feature construction.

Provides order flow features from consecutive book snapshots:
- Per-level bid/ask contributions and raw OFI
- Best-level and deeper-level OFI
- Integrated OFI (PCA projection)
- Log mid-price returns
- Batch pipeline over a snapshot stream
"""

from .order_flow_imbalance import (
    level_delta,
    level_deltas,
    raw_ofi,
    BestLevelOFI,
    DeeperLevelOFI,
)

from .integrated_ofi import (
    IntegratedOFI,
    ModelState,
)

from .returns import log_return

from .pipeline import (
    OFIFeaturePipeline,
    OFIFeatures,
)

__all__ = [
    # OFI
    "level_delta",
    "level_deltas",
    "raw_ofi",
    "BestLevelOFI",
    "DeeperLevelOFI",
    # Integrated
    "IntegratedOFI",
    "ModelState",
    # Returns
    "log_return",
    # Pipeline
    "OFIFeaturePipeline",
    "OFIFeatures",
]
