"""
Logarithmic mid-price returns.

    r = ln(mid_t / mid_{t-1}),   mid = (bid_px[0] + ask_px[0]) / 2

Zero or negative mid prices give a non-finite return (-inf, inf or nan).
Nothing is clamped; a warning is logged and the caller decides whether to
drop the observation.
"""

import numpy as np

from ..data.snapshot import SnapshotPair
from ..infra.logging import get_logger, LogCategory


logger = get_logger()


def log_return(pair: SnapshotPair) -> float:
    mid_prev = pair.previous.mid_price
    mid_curr = pair.current.mid_price

    if mid_prev <= 0 or mid_curr <= 0:
        logger.warning(
            f"Non-positive mid price at {pair.timestamp!r}; log return is non-finite",
            category=LogCategory.FEATURE,
            mid_previous=mid_prev,
            mid_current=mid_curr,
        )

    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.log(np.float64(mid_curr) / np.float64(mid_prev)))
