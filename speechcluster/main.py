"""CLI entry point and pipeline orchestration."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from speechcluster.clustering import cluster
from speechcluster.config import DEFAULTS
from speechcluster.corpus import discover_speeches, load_speeches
from speechcluster.errors import SpeechClusterError
from speechcluster.normalize import normalize_documents
from speechcluster.output import output_manifest, save_matrix
from speechcluster.pipeline import (
    PipelineArgumentError,
    PipelineParams,
    run_pipeline_shared,
)
from speechcluster.similarity import compute_similarity_matrix
from speechcluster.utils import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="speechcluster",
        description="Cluster speeches by Jaro-Winkler text similarity.",
    )
    p.add_argument("input_dir", type=Path, help="Directory containing speech .txt files")

    # Corpus
    p.add_argument("--limit", type=int, default=None, help="Use only the first N speeches")
    p.add_argument("--language", default=DEFAULTS.language, help="Stopword language")

    # Similarity
    p.add_argument(
        "--select", type=int, nargs="+", default=None, metavar="INDEX",
        help="0-based speech indices for a rectangular matrix (skips clustering)",
    )
    p.add_argument("--prefix-weight", type=float, default=DEFAULTS.prefix_weight)
    p.add_argument("--workers", type=int, default=DEFAULTS.workers)
    p.add_argument("--timeout", type=float, default=None, help="Abort after this many seconds")
    p.add_argument("--matrix-csv", type=Path, default=None, help="Also write the matrix as CSV")

    # Clustering
    p.add_argument("--damping", type=float, default=DEFAULTS.damping)
    p.add_argument("--preference", type=float, default=None, help="Default: median similarity")
    p.add_argument("--max-iter", type=int, default=DEFAULTS.max_iter)
    p.add_argument("--convergence-iter", type=int, default=DEFAULTS.convergence_iter)

    return p


def _build_params(args: argparse.Namespace) -> PipelineParams:
    """Convert parsed CLI arguments into a validated PipelineParams."""
    try:
        return PipelineParams(
            input_dir=args.input_dir,
            limit=args.limit,
            selection=tuple(args.select) if args.select is not None else None,
            language=args.language,
            prefix_weight=float(args.prefix_weight),
            workers=int(args.workers),
            timeout=args.timeout,
            damping=float(args.damping),
            preference=args.preference,
            max_iter=int(args.max_iter),
            convergence_iter=int(args.convergence_iter),
            matrix_csv=args.matrix_csv,
        )
    except PipelineArgumentError as exc:
        raise SystemExit(f"Error: {exc}") from exc


def run_pipeline(args: argparse.Namespace) -> None:
    log = setup_logging()
    params = _build_params(args)

    try:
        outcome = run_pipeline_shared(
            params=params,
            discover_fn=discover_speeches,
            load_fn=load_speeches,
            normalize_fn=normalize_documents,
            similarity_fn=compute_similarity_matrix,
            cluster_fn=cluster,
            output_fn=output_manifest,
            save_matrix_fn=save_matrix,
            log=log,
        )
    except (FileNotFoundError, SpeechClusterError) as exc:
        log.error("%s", exc)
        sys.exit(1)

    log.info("Done! %d speeches → %d clusters", outcome.n_documents, outcome.n_clusters)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    run_pipeline(args)
