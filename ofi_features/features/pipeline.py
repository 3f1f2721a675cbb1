"""
OFI Feature Pipeline
====================

Batch glue over a snapshot stream that a driver has already parsed:

1. Build the raw OFI training corpus for Integrated OFI
2. Train Integrated OFI and fit the cross-impact regression
3. Compute every feature per consecutive snapshot pair

The pipeline owns one IntegratedOFI and one CrossImpactModel. Feature
calculators themselves are stateless.

Snapshot streams are consumed in order; rows of the corpus and
observations of the regression keep stream order exactly.
"""

from dataclasses import dataclass
from itertools import islice
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from ..data.snapshot import Snapshot, consecutive_pairs
from ..infra.config import OFIConfig, get_default_config
from ..infra.logging import configure_logging, get_logger, LogCategory
from ..models.cross_impact import CrossImpactModel, RegressionModel
from .integrated_ofi import IntegratedOFI
from .order_flow_imbalance import BestLevelOFI, DeeperLevelOFI, raw_ofi
from .returns import log_return


logger = get_logger()


@dataclass
class OFIFeatures:
    """
    All features for one snapshot pair, labelled by the later timestamp.
    """
    timestamp: Any
    best_level_ofi: float
    deeper_level_ofi: np.ndarray
    integrated_ofi: Optional[float]     # None until Integrated OFI is trained
    log_return: float

    def to_dict(self) -> Dict:
        return {
            "timestamp": self.timestamp,
            "best_level_ofi": self.best_level_ofi,
            "deeper_level_ofi": self.deeper_level_ofi.tolist(),
            "integrated_ofi": self.integrated_ofi,
            "log_return": self.log_return,
        }


class OFIFeaturePipeline:
    """
    Computes OFI features and trains the OFI models over snapshot streams.
    """

    def __init__(self, config: Optional[OFIConfig] = None):
        self._config = (config or get_default_config()).validate()
        configure_logging(self._config)

        self._best_level = BestLevelOFI()
        self._deeper_level = DeeperLevelOFI()
        self._integrated = IntegratedOFI(
            min_observations=self._config.training.min_observations
        )
        self._cross_impact = CrossImpactModel()

    @property
    def config(self) -> OFIConfig:
        return self._config

    @property
    def integrated(self) -> IntegratedOFI:
        return self._integrated

    @property
    def cross_impact(self) -> CrossImpactModel:
        return self._cross_impact

    def build_training_corpus(
        self,
        snapshots: Iterable[Snapshot],
        level: Optional[int] = None,
        window: Optional[int] = None,
    ) -> np.ndarray:
        """
        Raw OFI vectors of the first ``window`` consecutive pairs.

        Returns:
            (n_pairs, level) array; ``window`` defaults to
            ``config.training.training_window``
        """
        if level is None:
            level = self._config.features.levels
        if window is None:
            window = self._config.training.training_window

        rows = [raw_ofi(pair, level) for pair in islice(consecutive_pairs(snapshots), window)]
        if not rows:
            return np.empty((0, level))
        return np.vstack(rows)

    def train_integrated(
        self,
        snapshots: Iterable[Snapshot],
        level: Optional[int] = None,
        window: Optional[int] = None,
    ) -> IntegratedOFI:
        if level is None:
            level = self._config.features.levels
        corpus = self.build_training_corpus(snapshots, level, window)
        logger.info(
            f"Training integrated OFI on {corpus.shape[0]} pairs",
            category=LogCategory.TRAINING,
            book_level=level,
        )
        return self._integrated.train(corpus, level)

    def fit_cross_impact(
        self,
        snapshots: Iterable[Snapshot],
        window: Optional[int] = None,
    ) -> RegressionModel:
        """Best-level OFI vs log return over the first ``window`` pairs."""
        if window is None:
            window = self._config.regression.regression_window
        pairs = islice(consecutive_pairs(snapshots), window)
        return self._cross_impact.fit_pairs(pairs)

    def fit_cross_asset(
        self,
        predictor_snapshots: Iterable[Snapshot],
        response_snapshots: Iterable[Snapshot],
        window: Optional[int] = None,
    ) -> RegressionModel:
        """OFI of the predictor asset vs log return of the response asset."""
        if window is None:
            window = self._config.regression.regression_window
        return self._cross_impact.fit_cross_asset(
            islice(consecutive_pairs(predictor_snapshots), window),
            islice(consecutive_pairs(response_snapshots), window),
        )

    def compute_features(
        self,
        snapshots: Iterable[Snapshot],
        level: Optional[int] = None,
    ) -> List[OFIFeatures]:
        """
        Every feature for every consecutive pair of the stream.

        Integrated OFI is filled in only when the model is trained with the
        same ``level``; otherwise it is None.
        """
        if level is None:
            level = self._config.features.levels
        use_integrated = self._integrated.is_trained and self._integrated.level == level

        features = []
        for pair in consecutive_pairs(snapshots):
            features.append(OFIFeatures(
                timestamp=pair.timestamp,
                best_level_ofi=self._best_level.compute(pair),
                deeper_level_ofi=self._deeper_level.compute(pair, level),
                integrated_ofi=self._integrated.compute(pair, level) if use_integrated else None,
                log_return=log_return(pair),
            ))

        logger.debug(
            f"Computed features for {len(features)} pairs",
            category=LogCategory.FEATURE,
            book_level=level,
        )
        return features
