"""
Cross-Impact Model
==================

Price impact of best-level OFI, estimated by ordinary least squares:

    r_t = alpha + beta * OFI_t + eps_t

where r_t is the log mid-price return over the same snapshot pair and OFI_t
is the best-level OFI. When the predictor comes from one asset and the
return from another the same regression measures CROSS impact.

ESTIMATION:
The 2 x 2 normal equations (X^T X) b = X^T y are solved with a Cholesky
factorization. A constant predictor (or a single observation) makes X^T X
singular; in that case the minimum-norm least-squares solution is used
instead and a warning is logged.

DEGENERATE INPUT POLICY:
Empty or mismatched predictor/response sequences do not raise. ``fit``
returns RegressionModel(0.0, 0.0) and logs a warning. A zero model is a
sentinel for "nothing to fit", not a fitted result.
"""

from typing import Iterable, NamedTuple, Optional, Sequence

import numpy as np

from ..data.snapshot import SnapshotPair
from ..errors import NotTrainedError
from ..features.integrated_ofi import ModelState
from ..features.order_flow_imbalance import BestLevelOFI
from ..features.returns import log_return
from ..infra.logging import get_logger, LogCategory


logger = get_logger()


class RegressionModel(NamedTuple):
    """OLS coefficients; unpacks as ``(intercept, slope)``."""
    intercept: float
    slope: float

    def predict(self, ofi: float) -> float:
        return self.intercept + self.slope * ofi


ZERO_MODEL = RegressionModel(0.0, 0.0)


def _min_norm_solution(X: np.ndarray, y: np.ndarray) -> np.ndarray:
    logger.warning(
        "Singular normal matrix; using minimum-norm least squares",
        category=LogCategory.REGRESSION,
        n_obs=int(X.shape[0]),
    )
    beta, *_ = np.linalg.lstsq(X, y, rcond=None)
    return beta


def _solve_normal_equations(X: np.ndarray, y: np.ndarray) -> np.ndarray:
    # Constant predictor or n == 1; Cholesky may not fail on round-off
    if np.linalg.matrix_rank(X) < X.shape[1]:
        return _min_norm_solution(X, y)

    xtx = X.T @ X
    xty = X.T @ y
    try:
        L = np.linalg.cholesky(xtx)
    except np.linalg.LinAlgError:
        return _min_norm_solution(X, y)
    z = np.linalg.solve(L, xty)
    return np.linalg.solve(L.T, z)


class CrossImpactModel:
    """
    OLS of log return on best-level OFI.

    ``fit`` returns the coefficients and also keeps them on the instance,
    so ``predict`` can be used afterwards. A degenerate fit leaves the
    previous state untouched.
    """

    def __init__(self):
        self._model: Optional[RegressionModel] = None
        self._n_obs = 0
        self._best_level = BestLevelOFI()

    @property
    def state(self) -> ModelState:
        return ModelState.TRAINED if self._model is not None else ModelState.UNTRAINED

    @property
    def model(self) -> RegressionModel:
        if self._model is None:
            raise NotTrainedError("CrossImpactModel has not been fitted")
        return self._model

    @property
    def n_obs(self) -> int:
        return self._n_obs

    def fit(self, predictors: Sequence[float], responses: Sequence[float]) -> RegressionModel:
        """
        Fit ``responses = intercept + slope * predictors``.

        Returns ZERO_MODEL for empty or mismatched input.
        """
        x = np.asarray(predictors, dtype=float).ravel()
        y = np.asarray(responses, dtype=float).ravel()
        n = x.shape[0]

        if n == 0 or n != y.shape[0]:
            logger.warning(
                f"Degenerate regression input (predictors={n}, responses={y.shape[0]}); "
                "returning zero model",
                category=LogCategory.REGRESSION,
            )
            return ZERO_MODEL

        with logger.measure_latency(
            "cross_impact.fit", category=LogCategory.REGRESSION, n_obs=n
        ):
            X = np.column_stack([np.ones(n), x])
            beta = _solve_normal_equations(X, y)

        model = RegressionModel(float(beta[0]), float(beta[1]))
        self._model = model
        self._n_obs = n

        logger.log_model(
            "cross_impact",
            f"alpha={model.intercept:.6g} beta={model.slope:.6g} (n={n})",
            category=LogCategory.REGRESSION,
            intercept=model.intercept,
            slope=model.slope,
            n_obs=n,
        )
        return model

    def fit_pairs(self, pairs: Iterable[SnapshotPair]) -> RegressionModel:
        """Own-impact fit: best-level OFI and log return from the same pairs."""
        predictors, responses = [], []
        for pair in pairs:
            predictors.append(self._best_level.compute(pair))
            responses.append(log_return(pair))
        return self.fit(predictors, responses)

    def fit_cross_asset(
        self,
        predictor_pairs: Iterable[SnapshotPair],
        response_pairs: Iterable[SnapshotPair],
    ) -> RegressionModel:
        """
        Cross-asset fit: OFI of one asset against log returns of another.

        The two streams are aligned by position and truncated to the shorter
        one; time alignment is the caller's responsibility.
        """
        predictors, responses = [], []
        for ofi_pair, return_pair in zip(predictor_pairs, response_pairs):
            predictors.append(self._best_level.compute(ofi_pair))
            responses.append(log_return(return_pair))
        return self.fit(predictors, responses)

    def predict(self, ofi: float) -> float:
        return self.model.predict(ofi)

    def __repr__(self) -> str:
        return f"CrossImpactModel(state={self.state.value}, model={self._model})"
