"""Cluster speeches by pairwise Jaro-Winkler similarity and affinity propagation."""

from speechcluster.clustering import ClusterResult, cluster
from speechcluster.errors import (
    ComputationCancelled,
    ComputationFailure,
    InvalidArgument,
    PartialMatrix,
    SpeechClusterError,
)
from speechcluster.normalize import normalize_documents, normalize_text, stopwords_for
from speechcluster.similarity import (
    SimilarityMatrix,
    build_similarity_matrix,
    compute_similarity_matrix,
    jaro_winkler,
)

__version__ = "0.1.0"

__all__ = [
    "ClusterResult",
    "cluster",
    "ComputationCancelled",
    "ComputationFailure",
    "InvalidArgument",
    "PartialMatrix",
    "SpeechClusterError",
    "normalize_documents",
    "normalize_text",
    "stopwords_for",
    "SimilarityMatrix",
    "build_similarity_matrix",
    "compute_similarity_matrix",
    "jaro_winkler",
]
