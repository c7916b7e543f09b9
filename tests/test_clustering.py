"""Tests for speechcluster.clustering: affinity propagation."""

import logging

import numpy as np
import pytest

from speechcluster.clustering import ClusterResult, cluster
from speechcluster.errors import InvalidArgument
from speechcluster.similarity import build_similarity_matrix


def _make_block_similarity(groups: list[int], intra: float = 0.9, inter: float = 0.1) -> np.ndarray:
    """Build a synthetic similarity matrix with known cluster structure.

    Args:
        groups: cluster assignment for each point, e.g. [0, 0, 1, 1, 2]
        intra: similarity between points in the same group
        inter: similarity between points in different groups
    """
    n = len(groups)
    sim = np.full((n, n), inter, dtype=np.float64)
    for i in range(n):
        for j in range(n):
            if groups[i] == groups[j]:
                sim[i, j] = intra
        sim[i, i] = 1.0
    return sim


class TestCluster:
    def test_recovers_two_clusters(self):
        groups = [0, 0, 0, 1, 1, 1]
        result = cluster(_make_block_similarity(groups))

        assert isinstance(result, ClusterResult)
        assert result.converged
        assert result.n_clusters == 2
        assert result.labels[0] == result.labels[1] == result.labels[2]
        assert result.labels[3] == result.labels[4] == result.labels[5]
        assert result.labels[0] != result.labels[3]

    def test_exemplars_belong_to_their_cluster(self):
        groups = [0, 0, 1, 1, 2, 2]
        result = cluster(_make_block_similarity(groups))

        assert result.n_clusters == 3
        assert len(result.exemplars) == 3
        for cid, exemplar in enumerate(result.exemplars):
            assert result.labels[exemplar] == cid

    def test_clusters_lists_members(self):
        groups = [0, 0, 0, 1, 1, 1]
        result = cluster(_make_block_similarity(groups))

        members = sorted(result.clusters())
        assert members == [[0, 1, 2], [3, 4, 5]]

    def test_exemplar_labels(self):
        groups = [0, 0, 0, 1, 1, 1]
        labels = ["a", "b", "c", "d", "e", "f"]
        result = cluster(_make_block_similarity(groups))

        names = result.exemplar_labels(labels)
        assert len(names) == 2
        assert set(names) <= set(labels)

    def test_low_preference_gives_fewer_clusters(self):
        groups = [0, 0, 1, 1, 2, 2]
        sim = _make_block_similarity(groups, intra=0.9, inter=0.5)

        loose = cluster(sim, preference=-10.0)
        default = cluster(sim)

        assert loose.n_clusters <= default.n_clusters

    def test_deterministic(self):
        sim = _make_block_similarity([0, 0, 1, 1, 1, 2])
        first = cluster(sim)
        second = cluster(sim)
        np.testing.assert_array_equal(first.labels, second.labels)
        np.testing.assert_array_equal(first.exemplars, second.exemplars)

    def test_single_speech(self):
        result = cluster(np.array([[1.0]]))

        assert result.n_clusters == 1
        assert result.labels[0] == 0
        assert result.exemplars.tolist() == [0]

    def test_non_convergence_is_reported(self, caplog):
        rng = np.random.default_rng(7)
        sim = rng.uniform(0.0, 1.0, size=(8, 8))
        sim = (sim + sim.T) / 2
        np.fill_diagonal(sim, 1.0)

        with caplog.at_level(logging.WARNING, logger="speechcluster"):
            result = cluster(sim, max_iter=1)

        assert result.converged is False
        assert result.n_clusters == 0
        assert result.exemplars.size == 0
        assert result.clusters() == []
        assert "did not converge" in caplog.text

    def test_labels_length_matches_input(self):
        groups = [0, 0, 1, 1, 2, 2, 2]
        result = cluster(_make_block_similarity(groups))
        assert len(result.labels) == len(groups)


class TestClusterInputs:
    def test_accepts_similarity_matrix(self):
        docs = [
            "the cat sat on the mat",
            "the cat sat on a mat",
            "quantum physics lecture notes",
            "quantum physics lectures notes",
        ]
        result = cluster(build_similarity_matrix(docs))

        assert len(result.labels) == 4
        assert result.labels[0] == result.labels[1]
        assert result.labels[2] == result.labels[3]

    def test_rejects_rectangular_similarity_matrix(self):
        m = build_similarity_matrix(["abc", "xyz", "abc"], selection=[0])
        with pytest.raises(InvalidArgument, match="square"):
            cluster(m)

    def test_rejects_non_square_array(self):
        with pytest.raises(InvalidArgument, match="square"):
            cluster(np.ones((3, 2)))

    def test_rejects_nan(self):
        sim = np.eye(3)
        sim[0, 1] = np.nan
        with pytest.raises(InvalidArgument, match="non-finite"):
            cluster(sim)
