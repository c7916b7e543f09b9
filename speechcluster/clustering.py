"""Affinity propagation on precomputed similarity matrices."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from sklearn.cluster import AffinityPropagation
from sklearn.exceptions import ConvergenceWarning

from speechcluster.config import DEFAULTS
from speechcluster.errors import InvalidArgument
from speechcluster.similarity import SimilarityMatrix

logger = logging.getLogger("speechcluster")


@dataclass(frozen=True)
class ClusterResult:
    labels: np.ndarray
    exemplars: np.ndarray
    n_clusters: int
    converged: bool = True
    n_iter: int = 0

    def clusters(self) -> list[list[int]]:
        """Member row indices per cluster, in cluster id order."""
        return [np.flatnonzero(self.labels == cid).tolist() for cid in range(self.n_clusters)]

    def exemplar_labels(self, labels: Sequence[str]) -> list[str]:
        return [labels[i] for i in self.exemplars]


def _as_square_array(similarity: SimilarityMatrix | np.ndarray) -> np.ndarray:
    if isinstance(similarity, SimilarityMatrix):
        if not similarity.is_square:
            raise InvalidArgument(
                "clustering needs a square similarity matrix; "
                "rectangular (selection) matrices are for exploration only"
            )
        values = similarity.values
    else:
        values = np.asarray(similarity, dtype=np.float64)
    if values.ndim != 2 or values.shape[0] != values.shape[1]:
        raise InvalidArgument(
            f"clustering needs a square similarity matrix, got shape {values.shape}"
        )
    if not np.all(np.isfinite(values)):
        raise InvalidArgument("similarity matrix contains non-finite values")
    return values


def cluster(
    similarity: SimilarityMatrix | np.ndarray,
    preference: float | None = None,
    damping: float = DEFAULTS.damping,
    max_iter: int = DEFAULTS.max_iter,
    convergence_iter: int = DEFAULTS.convergence_iter,
    random_state: int = DEFAULTS.random_state,
) -> ClusterResult:
    """Partition rows by affinity propagation; *preference* defaults to the median similarity."""
    values = _as_square_array(similarity)
    n = values.shape[0]
    if n < 2:
        labels = np.zeros(n, dtype=int)
        exemplars = np.arange(n, dtype=int)
        logger.info("Single speech, assigned to cluster 0")
        return ClusterResult(labels=labels, exemplars=exemplars, n_clusters=n)

    clusterer = AffinityPropagation(
        affinity="precomputed",
        preference=preference,
        damping=damping,
        max_iter=max_iter,
        convergence_iter=convergence_iter,
        random_state=random_state,
    )
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ConvergenceWarning)
        clusterer.fit(values)
    converged = True
    for w in caught:
        if issubclass(w.category, ConvergenceWarning):
            converged = False
        else:
            logger.warning("%s", w.message)

    exemplars = np.asarray(clusterer.cluster_centers_indices_, dtype=int)
    labels = np.asarray(clusterer.labels_, dtype=int)
    n_iter = int(clusterer.n_iter_)
    if not converged:
        logger.warning(
            "Affinity propagation did not converge after %d iterations (damping=%.2f)",
            n_iter, damping,
        )
    n_clusters = len(exemplars)
    logger.info(
        "Affinity propagation found %d clusters in %d iterations (damping=%.2f)",
        n_clusters, n_iter, damping,
    )
    return ClusterResult(
        labels=labels,
        exemplars=exemplars,
        n_clusters=n_clusters,
        converged=converged,
        n_iter=n_iter,
    )
