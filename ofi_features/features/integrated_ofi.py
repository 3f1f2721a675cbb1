"""
Integrated OFI
==============

Multi-level OFI is highly collinear across levels. Integrated OFI
compresses the raw OFI vector into one scalar by projecting it onto the
first principal component of a historical window of raw OFI vectors.

TRAINING:
=========

    X      : n x L matrix of raw OFI vectors (rows in stream order)
    X_c    : X with each column mean removed
    Sigma  : X_c^T X_c / (n - 1)
    w1     : eigenvector of Sigma with the largest eigenvalue
    w1     : w1 / ||w1||_1

COMPUTE:
========

    integrated_ofi = w1 . raw_ofi(pair, L)

SIGN AMBIGUITY:
An eigenvector is only defined up to a factor of -1, and the sign chosen by
the LAPACK symmetric solver is implementation-defined. Two trainings on the
same data with different numpy builds may return w1 and -w1. Projections
are consistent for a FIXED trained vector; compare magnitudes, not signs,
across retrainings.

STATE:
    UNTRAINED --train--> TRAINED --train--> TRAINED (w1 replaced)

``train`` builds the new vector completely before publishing it, so a
reader on another thread sees either the old or the new vector.
"""

from enum import Enum
from numbers import Integral
from typing import Optional, Sequence

import numpy as np

from ..data.snapshot import SnapshotPair
from ..errors import ContractViolation, NotTrainedError, NumericDegeneracy
from ..infra.logging import get_logger, LogCategory
from .order_flow_imbalance import raw_ofi


logger = get_logger()


class ModelState(Enum):
    """Lifecycle of a trained component."""
    UNTRAINED = "untrained"
    TRAINED = "trained"


class IntegratedOFI:
    """
    Integrated OFI calculator with a two-phase lifecycle.

    Example:
        model = IntegratedOFI()
        model.train(corpus, level=10)
        value = model.compute(pair, level=10)
    """

    def __init__(self, min_observations: int = 2):
        self._min_observations = max(int(min_observations), 2)

        self._w1: Optional[np.ndarray] = None
        self._level: Optional[int] = None
        self._eigenvalues: Optional[np.ndarray] = None
        self._n_observations = 0
        self._state = ModelState.UNTRAINED

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def is_trained(self) -> bool:
        return self._state is ModelState.TRAINED

    @property
    def level(self) -> Optional[int]:
        return self._level

    @property
    def projection_vector(self) -> np.ndarray:
        """The trained L1-normalized first principal component (read-only)."""
        if self._w1 is None:
            raise NotTrainedError("IntegratedOFI has not been trained")
        return self._w1

    @property
    def eigenvalues(self) -> Optional[np.ndarray]:
        """Covariance eigenvalues from the last training, largest first."""
        return self._eigenvalues

    @property
    def explained_variance_ratio(self) -> float:
        """Share of total variance carried by the first component."""
        if self._eigenvalues is None:
            raise NotTrainedError("IntegratedOFI has not been trained")
        total = float(self._eigenvalues.sum())
        if total <= 0:
            return 0.0
        return float(self._eigenvalues[0] / total)

    @property
    def n_observations(self) -> int:
        return self._n_observations

    def train(self, corpus: Sequence[Sequence[float]], level: int) -> "IntegratedOFI":
        """
        Learn the projection vector from historical raw OFI vectors.

        Args:
            corpus: raw OFI vectors in stream order, each of length ``level``
            level: number of book levels (matrix columns)

        Raises:
            ContractViolation: fewer than two rows, or a row of wrong length
            NumericDegeneracy: the corpus has zero variance in every column
        """
        X = self._build_matrix(corpus, level)
        n, level = X.shape

        with logger.measure_latency(
            "integrated_ofi.train",
            category=LogCategory.TRAINING,
            n_observations=n,
            book_level=level,
        ):
            X = X - X.mean(axis=0)
            cov = (X.T @ X) / (n - 1)

            # eigh returns eigenvalues in ascending order
            eigenvalues, eigenvectors = np.linalg.eigh(cov)
            first_pc = eigenvectors[:, -1]

            l1 = np.abs(first_pc).sum()
            if eigenvalues[-1] <= 0 or not np.isfinite(l1) or l1 == 0:
                raise NumericDegeneracy(
                    "raw OFI corpus has no variance; first principal component undefined"
                )

            w1 = first_pc / l1
            w1.setflags(write=False)
            ordered = eigenvalues[::-1].copy()

        # Publish
        self._eigenvalues = ordered
        self._level = level
        self._n_observations = n
        self._w1 = w1
        self._state = ModelState.TRAINED

        logger.log_model(
            "integrated_ofi",
            f"trained on {n} observations, level={level}, "
            f"explained variance={self.explained_variance_ratio:.4f}",
            n_observations=n,
            book_level=level,
            projection=w1.tolist(),
        )
        return self

    def compute(self, pair: SnapshotPair, level: int) -> float:
        """
        Project the pair's raw OFI vector onto the trained component.

        Raises:
            NotTrainedError: ``train`` has not succeeded yet
            ContractViolation: ``level`` differs from the training level
        """
        w1 = self._w1
        if w1 is None:
            raise NotTrainedError("IntegratedOFI must be trained before compute")
        if level != w1.shape[0]:
            raise ContractViolation(
                f"model trained with level={w1.shape[0]}, compute called with level={level}"
            )

        value = float(w1 @ raw_ofi(pair, level))
        logger.log_feature("integrated_ofi", pair.timestamp, value)
        return value

    def _build_matrix(self, corpus: Sequence[Sequence[float]], level: int) -> np.ndarray:
        if isinstance(level, bool) or not isinstance(level, Integral) or level < 1:
            raise ContractViolation(f"level must be a positive integer, got {level!r}")
        level = int(level)

        rows = list(corpus)
        if len(rows) < self._min_observations:
            raise ContractViolation(
                f"training corpus needs at least {self._min_observations} rows, got {len(rows)}"
            )
        for t, row in enumerate(rows):
            if len(row) != level:
                raise ContractViolation(
                    f"corpus row {t} has length {len(row)}, expected {level}"
                )
        return np.asarray(rows, dtype=float).reshape(len(rows), level)

    def __repr__(self) -> str:
        return f"IntegratedOFI(state={self._state.value}, level={self._level})"
