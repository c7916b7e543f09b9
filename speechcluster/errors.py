"""Exception classes for speechcluster."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


class SpeechClusterError(RuntimeError):
    """Base exception for speechcluster errors."""


class InvalidArgument(SpeechClusterError, ValueError):
    """Raised before any computation when inputs violate a precondition."""


class ComputationFailure(SpeechClusterError):
    """The similarity metric could not score a single cell."""

    def __init__(self, row: int, col: int, message: str) -> None:
        super().__init__(f"similarity failed at row {row}, column {col}: {message}")
        self.row = row
        self.col = col


@dataclass(frozen=True)
class PartialMatrix:
    """Columns filled before a cancelled run stopped; unfinished cells are NaN."""

    values: np.ndarray
    completed: np.ndarray
    row_labels: tuple[str, ...]
    col_labels: tuple[str, ...]

    @property
    def n_completed(self) -> int:
        return int(self.completed.sum())


class ComputationCancelled(SpeechClusterError):
    """Raised when a timeout or cancel event stops matrix construction."""

    def __init__(self, message: str, partial: PartialMatrix) -> None:
        super().__init__(message)
        self.partial = partial
