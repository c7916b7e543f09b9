"""Default configuration constants."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Defaults:
    # Text normalization
    language: str = "english"

    # Similarity
    prefix_weight: float = 0.1
    workers: int = 1
    # Full corpus (~236 speeches) took about two hours on the reference run.
    large_corpus_warning: int = 40

    # Affinity propagation (matches R apcluster: lam, maxits, convits)
    damping: float = 0.9
    max_iter: int = 1000
    convergence_iter: int = 100
    random_state: int = 0

    # Output
    manifest_filename: str = "speechcluster_manifest.json"

    # Supported speech file extensions
    text_extensions: tuple[str, ...] = (".txt",)


DEFAULTS = Defaults()
