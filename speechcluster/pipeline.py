"""Shared pipeline orchestration used by the CLI and library callers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from speechcluster.config import DEFAULTS
from speechcluster.corpus import SpeechRecord, build_labels
from speechcluster.normalize import SUPPORTED_LANGUAGES

ProgressCallback = Callable[[str, str, int, int], None]
DiscoverFn = Callable[[Path], list[Path]]
LoadFn = Callable[[list[Path]], list[SpeechRecord]]
NormalizeFn = Callable[..., list[str]]
SimilarityFn = Callable[..., Any]
ClusterFn = Callable[..., Any]
OutputFn = Callable[..., None]
SaveMatrixFn = Callable[[Any, Path], None]

VALID_LANGUAGES = SUPPORTED_LANGUAGES


class PipelineArgumentError(ValueError):
    """Raised when runtime pipeline parameters are invalid."""


@dataclass(frozen=True)
class PipelineParams:
    """Typed, validated pipeline parameters.

    ``limit`` keeps only the first N speeches; ``selection`` switches the
    similarity step to a rectangular matrix, in which case clustering is
    skipped.
    """

    input_dir: Path
    limit: int | None = None
    selection: tuple[int, ...] | None = None
    language: str = DEFAULTS.language
    prefix_weight: float = DEFAULTS.prefix_weight
    workers: int = DEFAULTS.workers
    timeout: float | None = None
    damping: float = DEFAULTS.damping
    preference: float | None = None
    max_iter: int = DEFAULTS.max_iter
    convergence_iter: int = DEFAULTS.convergence_iter
    matrix_csv: Path | None = None

    def __post_init__(self) -> None:
        validate_pipeline_parameters(
            limit=self.limit,
            selection=self.selection,
            language=self.language,
            prefix_weight=self.prefix_weight,
            workers=self.workers,
            timeout=self.timeout,
            damping=self.damping,
            max_iter=self.max_iter,
            convergence_iter=self.convergence_iter,
        )


def validate_pipeline_parameters(
    *,
    limit: int | None = None,
    selection: tuple[int, ...] | None = None,
    language: str | None = None,
    prefix_weight: float = DEFAULTS.prefix_weight,
    workers: int = DEFAULTS.workers,
    timeout: float | None = None,
    damping: float = DEFAULTS.damping,
    max_iter: int = DEFAULTS.max_iter,
    convergence_iter: int = DEFAULTS.convergence_iter,
) -> None:
    """Validate user-facing pipeline parameters.

    Document-dependent checks (label length, selection bounds) happen in
    the similarity step once the corpus size is known.
    """
    if limit is not None and limit < 1:
        raise PipelineArgumentError("--limit must be >= 1")
    if selection is not None and len(selection) == 0:
        raise PipelineArgumentError("--select must name at least one speech")
    if language is not None and language.lower() not in VALID_LANGUAGES:
        raise PipelineArgumentError(
            f"--language must be one of {sorted(VALID_LANGUAGES)}, got '{language}'"
        )
    if not 0.0 <= prefix_weight <= 0.25:
        raise PipelineArgumentError("--prefix-weight must be within [0, 0.25]")
    if workers < 1:
        raise PipelineArgumentError("--workers must be >= 1")
    if timeout is not None and timeout <= 0:
        raise PipelineArgumentError("--timeout must be > 0")
    if not 0.5 <= damping < 1.0:
        raise PipelineArgumentError("--damping must be within [0.5, 1.0)")
    if max_iter < 1:
        raise PipelineArgumentError("--max-iter must be >= 1")
    if convergence_iter < 1:
        raise PipelineArgumentError("--convergence-iter must be >= 1")


@dataclass(frozen=True)
class PipelineOutcome:
    n_documents: int
    n_clusters: int
    manifest_path: Path | None = None
    matrix_path: Path | None = None


def run_pipeline_shared(
    *,
    params: PipelineParams,
    discover_fn: DiscoverFn,
    load_fn: LoadFn,
    normalize_fn: NormalizeFn,
    similarity_fn: SimilarityFn,
    cluster_fn: ClusterFn,
    output_fn: OutputFn,
    save_matrix_fn: SaveMatrixFn,
    on_progress: ProgressCallback | None = None,
    log: logging.Logger | None = None,
) -> PipelineOutcome:
    logger = log or logging.getLogger("speechcluster")

    def emit(step: str, detail: str, processed: int = 0, total: int = 0) -> None:
        if on_progress is not None:
            on_progress(step, detail, processed, total)

    input_dir = params.input_dir.resolve()
    if not input_dir.is_dir():
        raise FileNotFoundError(f"Input directory does not exist: {input_dir}")

    # Step 1: discover speeches
    emit("discover", "Discovering speeches…")
    paths = discover_fn(input_dir)
    if not paths:
        raise FileNotFoundError(f"No speeches found in {input_dir}")
    if params.limit is not None and params.limit < len(paths):
        logger.info("Limiting to the first %d of %d speeches", params.limit, len(paths))
        paths = paths[:params.limit]
    logger.info("Found %d speeches in %s", len(paths), input_dir)
    emit("discover", f"Found {len(paths)} speeches", len(paths), len(paths))

    # Step 2: load and normalize
    emit("normalize", "Cleaning speech text…")
    records = load_fn(paths)
    labels = build_labels(records)
    documents = normalize_fn([r.text for r in records], language=params.language)
    emit("normalize", "Text cleaned", len(documents), len(documents))

    # Step 3: similarity
    n_columns = len(params.selection) if params.selection is not None else len(documents)
    emit("similarity", "Computing similarity matrix…", 0, n_columns)

    def _on_column(done: int, total: int) -> None:
        emit("similarity", f"{done}/{total}", done, total)

    matrix = similarity_fn(
        documents,
        labels,
        params.selection,
        prefix_weight=params.prefix_weight,
        workers=params.workers,
        timeout=params.timeout,
        on_column=_on_column,
    )
    emit("similarity", "Similarity matrix ready", n_columns, n_columns)

    matrix_path = None
    if params.matrix_csv is not None:
        matrix_path = params.matrix_csv
        save_matrix_fn(matrix, matrix_path)

    if params.selection is not None:
        logger.warning("Selection given: rectangular matrix is not clustered")
        return PipelineOutcome(
            n_documents=len(documents),
            n_clusters=0,
            matrix_path=matrix_path,
        )

    # Step 4: clustering
    emit("cluster", "Clustering…")
    result = cluster_fn(
        matrix,
        preference=params.preference,
        damping=params.damping,
        max_iter=params.max_iter,
        convergence_iter=params.convergence_iter,
    )
    emit("cluster", f"{result.n_clusters} clusters found")

    # Step 5: write manifest
    emit("output", "Writing manifest…")
    manifest_path = input_dir / DEFAULTS.manifest_filename
    output_fn(
        result,
        labels,
        manifest_path,
        input_dir=input_dir,
        language=params.language,
        prefix_weight=params.prefix_weight,
        damping=params.damping,
        preference=params.preference,
        workers=params.workers,
    )
    emit("output", "Manifest written")

    return PipelineOutcome(
        n_documents=len(documents),
        n_clusters=result.n_clusters,
        manifest_path=manifest_path,
        matrix_path=matrix_path,
    )
