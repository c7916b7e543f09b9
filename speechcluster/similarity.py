"""Pairwise similarity matrix computation."""

from __future__ import annotations

import logging
import math
import operator
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

import numpy as np
from rapidfuzz.distance import JaroWinkler
from tqdm import tqdm

from speechcluster.config import DEFAULTS
from speechcluster.errors import (
    ComputationCancelled,
    ComputationFailure,
    InvalidArgument,
    PartialMatrix,
)

logger = logging.getLogger("speechcluster")

Metric = Callable[[str, str], float]
ColumnCallback = Callable[[int, int], None]


def jaro_winkler(prefix_weight: float = DEFAULTS.prefix_weight) -> Metric:
    """Case-sensitive Jaro-Winkler similarity in [0, 1]; identical strings score 1.0."""
    if not 0.0 <= prefix_weight <= 0.25:
        raise InvalidArgument("prefix_weight must be within [0, 0.25]")

    def score(a: str, b: str) -> float:
        return JaroWinkler.normalized_similarity(a, b, prefix_weight=prefix_weight)

    return score


@dataclass(frozen=True)
class SimilarityMatrix:
    """Labeled similarity scores: rows are every document, columns the selection."""

    values: np.ndarray
    row_labels: tuple[str, ...]
    col_labels: tuple[str, ...]
    selection: tuple[int, ...]

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape

    @property
    def is_square(self) -> bool:
        return self.selection == tuple(range(len(self.row_labels)))

    def label_index(self, label: str) -> int:
        """Row index of the first document carrying *label*."""
        try:
            return self.row_labels.index(label)
        except ValueError:
            raise KeyError(label) from None

    def self_similarity(self) -> np.ndarray:
        """Score of each column's document against itself (its row in the full axis)."""
        cols = np.arange(len(self.selection))
        return self.values[list(self.selection), cols]


def _resolve_labels(n: int, labels: Sequence[str] | None) -> tuple[str, ...]:
    if labels is None:
        return tuple(str(i) for i in range(n))
    resolved = tuple(str(label) for label in labels)
    if len(resolved) != n:
        raise InvalidArgument(
            f"label length mismatch: {len(resolved)} labels for {n} documents"
        )
    return resolved


def _resolve_selection(n: int, selection: Sequence[int] | None) -> tuple[int, ...]:
    if selection is None:
        return tuple(range(n))
    resolved: list[int] = []
    for raw in selection:
        if isinstance(raw, bool):
            raise InvalidArgument(f"selection index must be an integer, got {raw!r}")
        try:
            idx = operator.index(raw)
        except TypeError:
            raise InvalidArgument(
                f"selection index must be an integer, got {raw!r}"
            ) from None
        if not 0 <= idx < n:
            raise InvalidArgument(
                f"selection index out of bounds: {idx} not in [0, {n})"
            )
        resolved.append(idx)
    if len(set(resolved)) != len(resolved):
        raise InvalidArgument("selection indices must be distinct")
    return tuple(resolved)


def _compute_column(
    documents: Sequence[str],
    source: int,
    col: int,
    metric: Metric,
    should_stop: Callable[[], bool],
) -> np.ndarray | None:
    """Score one column against every row; ``None`` if stopped part-way."""
    target = documents[source]
    column = np.empty(len(documents), dtype=np.float64)
    for row, doc in enumerate(documents):
        if should_stop():
            return None
        try:
            score = float(metric(target, doc))
        except Exception as exc:
            raise ComputationFailure(row, col, f"{type(exc).__name__}: {exc}") from exc
        if not math.isfinite(score):
            raise ComputationFailure(row, col, f"non-finite score {score!r}")
        column[row] = score
    return column


def build_similarity_matrix(
    documents: Sequence[str],
    labels: Sequence[str] | None = None,
    selection: Sequence[int] | None = None,
    *,
    metric: Metric | None = None,
    workers: int = DEFAULTS.workers,
    timeout: float | None = None,
    cancel_event: threading.Event | None = None,
    on_column: ColumnCallback | None = None,
    show_progress: bool = False,
) -> SimilarityMatrix:
    """Compute a labeled similarity matrix over *documents*.

    Without *selection* the result is square (every document against every
    document). With *selection* the columns are restricted to those document
    indices, in the given order, while the rows still cover the whole
    collection, so each selected document is also scored against itself.

    Columns are filled one at a time: ``metric(documents[source], documents[r])``
    for every row ``r``. With ``workers > 1`` columns are spread over a thread
    pool; each column is assembled by the calling thread, so every cell is
    written exactly once.

    Raises:
        InvalidArgument: label length mismatch, bad selection index, empty
            collection or bad worker count. Raised before any metric call.
        ComputationFailure: the metric raised or produced a non-finite score.
        ComputationCancelled: *timeout* elapsed or *cancel_event* was set;
            ``exc.partial`` holds the columns finished so far.
    """
    docs = list(documents)
    n = len(docs)
    if n == 0:
        raise InvalidArgument("documents must not be empty")
    row_labels = _resolve_labels(n, labels)
    columns = _resolve_selection(n, selection)
    if workers < 1:
        raise InvalidArgument("workers must be >= 1")
    if timeout is not None and timeout <= 0:
        raise InvalidArgument("timeout must be > 0")
    if metric is None:
        metric = jaro_winkler()

    col_labels = tuple(row_labels[i] for i in columns)
    total = len(columns)
    if n > DEFAULTS.large_corpus_warning:
        logger.warning(
            "Comparing %d documents (%d x %d cells); this can take hours",
            n, n, total,
        )
    logger.info("Computing %dx%d similarity matrix (workers=%d)", n, total, workers)

    values = np.full((n, total), np.nan, dtype=np.float64)
    completed = np.zeros(total, dtype=bool)
    deadline = None if timeout is None else time.monotonic() + timeout
    stop = threading.Event()
    started = time.monotonic()

    def should_stop() -> bool:
        if stop.is_set():
            return True
        if cancel_event is not None and cancel_event.is_set():
            return True
        return deadline is not None and time.monotonic() >= deadline

    progress = tqdm(total=total, desc="Similarity columns", disable=not show_progress)

    def store(col: int, column: np.ndarray) -> None:
        values[:, col] = column
        completed[col] = True
        progress.update(1)
        if on_column is not None:
            on_column(int(completed.sum()), total)

    try:
        if workers == 1 or total < 2:
            for col, source in enumerate(columns):
                column = _compute_column(docs, source, col, metric, should_stop)
                if column is None:
                    break
                store(col, column)
        else:
            with ThreadPoolExecutor(max_workers=min(workers, total)) as executor:
                futures = {
                    executor.submit(_compute_column, docs, source, col, metric, should_stop): col
                    for col, source in enumerate(columns)
                }
                try:
                    for future in as_completed(futures):
                        column = future.result()
                        if column is None:
                            break
                        store(futures[future], column)
                finally:
                    if not completed.all():
                        stop.set()
                        for future in futures:
                            future.cancel()
    finally:
        progress.close()

    if not completed.all():
        if cancel_event is not None and cancel_event.is_set():
            reason = "similarity computation cancelled"
        else:
            reason = f"similarity computation timed out after {timeout}s"
        logger.warning("%s (%d/%d columns done)", reason, int(completed.sum()), total)
        raise ComputationCancelled(
            reason,
            PartialMatrix(
                values=values,
                completed=completed,
                row_labels=row_labels,
                col_labels=col_labels,
            ),
        )

    values.flags.writeable = False
    logger.info("Similarity matrix ready in %.1fs", time.monotonic() - started)
    return SimilarityMatrix(
        values=values,
        row_labels=row_labels,
        col_labels=col_labels,
        selection=columns,
    )


def compute_similarity_matrix(
    documents: Sequence[str],
    labels: Sequence[str] | None = None,
    selection: Sequence[int] | None = None,
    *,
    prefix_weight: float = DEFAULTS.prefix_weight,
    **kwargs,
) -> SimilarityMatrix:
    """Jaro-Winkler similarity matrix with the given prefix weight."""
    return build_similarity_matrix(
        documents,
        labels,
        selection,
        metric=jaro_winkler(prefix_weight),
        **kwargs,
    )
