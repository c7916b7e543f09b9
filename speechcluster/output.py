"""Output: write cluster manifest and optional matrix CSV."""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Sequence
from pathlib import Path

from speechcluster.clustering import ClusterResult
from speechcluster.similarity import SimilarityMatrix

logger = logging.getLogger("speechcluster")


def output_manifest(
    result: ClusterResult,
    labels: Sequence[str],
    output_path: Path,
    *,
    input_dir: Path,
    language: str | None = None,
    prefix_weight: float | None = None,
    damping: float | None = None,
    preference: float | None = None,
    workers: int | None = None,
) -> None:
    if len(labels) != len(result.labels):
        raise ValueError("labels length must match clustered rows")

    manifest = {
        "version": 1,
        "input_dir": str(input_dir),
        "total": len(labels),
        "converged": result.converged,
        "parameters": {
            k: v
            for k, v in {
                "language": language,
                "prefix_weight": prefix_weight,
                "damping": damping,
                "preference": preference,
                "workers": workers,
            }.items()
            if v is not None
        },
        "clusters": [
            {
                "cluster_id": cid,
                "count": len(members),
                "exemplar": labels[int(result.exemplars[cid])],
                "exemplar_index": int(result.exemplars[cid]),
                "members": [
                    {"index": idx, "label": labels[idx]}
                    for idx in members
                ],
            }
            for cid, members in enumerate(result.clusters())
        ],
    }
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(manifest, indent=2) + "\n")
    logger.info("Manifest written → %s", output_path)


def save_matrix(matrix: SimilarityMatrix, output_path: Path) -> None:
    """Write the labeled matrix as CSV: header row of column labels, one line per row label."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["", *matrix.col_labels])
        for label, row in zip(matrix.row_labels, matrix.values):
            writer.writerow([label, *(repr(float(v)) for v in row)])
    logger.info("Similarity matrix written → %s", output_path)
