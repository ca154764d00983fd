"""互评矩阵形状工具（扩缩、对角线、转置）。

Peer matrix shape helpers. The matrix is indexed ``[ratee][rater]``. Missing
ratings are ``None`` (or ``NaN`` when they come from numeric input) and are
never filled in here; callers decide the default for new cells.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

Cell = Optional[float]
Matrix = List[List[Cell]]

MIN_GROUP_SIZE = 2
MAX_GROUP_SIZE = 10


def is_missing(value: Cell) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def empty_matrix(size: int) -> Matrix:
    return [[None] * size for _ in range(size)]


def resize(
    matrix: Sequence[Sequence[Cell]],
    new_size: int,
    max_size: int = MAX_GROUP_SIZE,
) -> Matrix:
    """Return ``matrix`` grown or truncated to ``new_size × new_size``.

    Existing cells keep their indices and new cells are ``None``. Sizes below
    two or above ``max_size`` leave the matrix unchanged.
    """

    current = [list(row) for row in matrix]
    if new_size < MIN_GROUP_SIZE or new_size > max_size:
        return current

    resized = empty_matrix(new_size)
    for i, row in enumerate(current[:new_size]):
        kept = row[:new_size]
        resized[i][: len(kept)] = kept
    return resized


def resize_weights(weights: Sequence[int], new_size: int, fill: int = 1) -> List[int]:
    """Keep the per-student weight list index-aligned with a resized matrix."""

    if new_size < MIN_GROUP_SIZE:
        return list(weights)
    trimmed = list(weights[:new_size])
    trimmed.extend([fill] * (new_size - len(trimmed)))
    return trimmed


def set_diagonal(matrix: Sequence[Sequence[Cell]], value: Cell) -> Matrix:
    updated = [list(row) for row in matrix]
    for i, row in enumerate(updated):
        if i < len(row):
            row[i] = value
    return updated


def transpose(matrix: Sequence[Sequence[Cell]]) -> Matrix:
    return [list(column) for column in zip(*matrix)]


def is_square(matrix: Sequence[Sequence[Cell]]) -> bool:
    return all(len(row) == len(matrix) for row in matrix)
