"""
Model Diagnostics for OFI Feature Construction
==============================================

Quality metrics for the two trained components:

1. CROSS-IMPACT REGRESSION:
   - R^2: share of return variance explained by OFI
   - Residual std: typical unexplained return
   - t-statistic of the slope: significance of the impact coefficient

2. INTEGRATED OFI:
   - Explained variance of the first principal component
   - Projection weights per level

Everything is computed from caller-supplied arrays; nothing is stored.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np


@dataclass
class RegressionStats:
    """Goodness-of-fit for one cross-impact regression."""
    n_obs: int
    r_squared: float
    residual_std: float
    t_stat_slope: float

    def to_dict(self) -> Dict:
        return {
            "n_obs": self.n_obs,
            "r_squared": self.r_squared,
            "residual_std": self.residual_std,
            "t_stat_slope": self.t_stat_slope,
        }


def regression_diagnostics(
    model,
    predictors: Sequence[float],
    responses: Sequence[float],
) -> RegressionStats:
    """
    Evaluate an (intercept, slope) model on predictor/response data.

    R^2 is reported as 0 when the responses have zero variance, and the
    slope t-statistic as nan when it cannot be estimated (n <= 2 or a
    constant predictor).
    """
    x = np.asarray(predictors, dtype=float).ravel()
    y = np.asarray(responses, dtype=float).ravel()
    n = x.shape[0]
    if n == 0 or n != y.shape[0]:
        return RegressionStats(n_obs=0, r_squared=0.0, residual_std=0.0, t_stat_slope=float("nan"))

    intercept, slope = model
    residuals = y - (intercept + slope * x)
    ss_res = float(residuals @ residuals)
    ss_tot = float(((y - y.mean()) ** 2).sum())

    r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0

    dof = n - 2
    if dof > 0:
        sigma2 = ss_res / dof
        sxx = float(((x - x.mean()) ** 2).sum())
        residual_std = float(np.sqrt(sigma2))
        if sxx > 0 and sigma2 > 0:
            t_stat = slope / np.sqrt(sigma2 / sxx)
        elif sxx > 0:
            t_stat = float("inf") if slope != 0 else float("nan")
        else:
            t_stat = float("nan")
    else:
        residual_std = 0.0
        t_stat = float("nan")

    return RegressionStats(
        n_obs=n,
        r_squared=float(r_squared),
        residual_std=residual_std,
        t_stat_slope=float(t_stat),
    )


def format_model_report(
    regression=None,
    stats: Optional[RegressionStats] = None,
    integrated=None,
) -> str:
    """
    Format a plain-text report for a fitted regression and/or a trained
    IntegratedOFI. Untrained components are reported as such.
    """
    lines: List[str] = []

    lines.append("=" * 50)
    lines.append("OFI MODEL REPORT")
    lines.append("=" * 50)

    if regression is not None:
        intercept, slope = regression
        lines.append("")
        lines.append("CROSS-IMPACT REGRESSION")
        lines.append("-" * 30)
        lines.append(f"  Alpha (intercept):  {intercept:.6e}")
        lines.append(f"  Beta (slope):       {slope:.6e}")
        if stats is not None:
            lines.append(f"  Observations:       {stats.n_obs}")
            lines.append(f"  R-squared:          {stats.r_squared:.4f}")
            lines.append(f"  Residual std:       {stats.residual_std:.6e}")
            lines.append(f"  t-stat (beta):      {stats.t_stat_slope:.3f}")

    if integrated is not None:
        lines.append("")
        lines.append("INTEGRATED OFI")
        lines.append("-" * 30)
        if integrated.is_trained:
            lines.append(f"  Levels:             {integrated.level}")
            lines.append(f"  Observations:       {integrated.n_observations}")
            lines.append(f"  Explained variance: {integrated.explained_variance_ratio:.2%}")
            for i, weight in enumerate(integrated.projection_vector):
                lines.append(f"    w1[{i}] = {weight:+.6f}")
        else:
            lines.append("  (untrained)")

    lines.append("=" * 50)
    return "\n".join(lines)
