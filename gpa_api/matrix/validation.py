"""互评矩阵与模型配置的纯校验函数。

Pure validators for peer matrices and their model configuration. Primitive
checks return ``bool``. The aggregate ``check_*`` helpers return
the message to show the user: a ``field -> message`` mapping for errors that
belong to one form field, or a single banner string for matrix-wide errors
(a column sum does not map to one field).
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence

from gpa_api.matrix.shape import Cell, is_missing
from gpa_api.models.enums import QASSMode, ScaleType

PERCENTAGE_TOLERANCE = 0.001
WEBAVALIA_VOTE_STEP = 5
WEBAVALIA_COLUMN_TOTAL = 100


def _fmt(value: float) -> str:
    return f"{value:g}"


def _is_integer(value: float) -> bool:
    return float(value).is_integer()


def tolerance_for(scale_type: ScaleType) -> float:
    return PERCENTAGE_TOLERANCE if scale_type == ScaleType.PERCENTAGE else 0.0


def column_sum(matrix: Sequence[Sequence[Cell]], column: int) -> float:
    return sum(row[column] for row in matrix if not is_missing(row[column]))


def validate_bounds(lower: float, upper: float) -> bool:
    return lower < upper


def validate_column_sums(
    matrix: Sequence[Sequence[Cell]],
    target: float,
    tolerance: float = PERCENTAGE_TOLERANCE,
    skip_incomplete: bool = False,
) -> bool:
    for column in range(len(matrix)):
        if skip_incomplete and any(is_missing(row[column]) for row in matrix):
            continue
        if abs(column_sum(matrix, column) - target) > tolerance:
            return False
    return True


def validate_cell_range(matrix: Sequence[Sequence[Cell]], lower: float, upper: float) -> bool:
    return all(
        lower <= cell <= upper for row in matrix for cell in row if not is_missing(cell)
    )


def validate_scale_integrality(matrix: Sequence[Sequence[Cell]], scale_type: ScaleType) -> bool:
    if scale_type == ScaleType.PERCENTAGE:
        return True
    return all(_is_integer(cell) for row in matrix for cell in row if not is_missing(cell))


def validate_score_constraint(is_constrained: bool, constraint: Optional[float]) -> bool:
    return not (is_constrained and constraint is None)


def validate_constraint_conflict(
    lower: float,
    upper: float,
    group_size: int,
    is_constrained: bool,
    constraint: Optional[float],
) -> bool:
    if not is_constrained:
        return True
    if constraint is None:
        return False
    return upper * group_size >= constraint >= lower * group_size


def validate_group_size_conflict(is_constrained: bool, min_size: int, max_size: int) -> bool:
    return max_size > min_size if is_constrained else True


def calculate_min_group_size(constraint: Optional[float], upper: float) -> Optional[int]:
    """Smallest group whose raters can reach ``constraint`` (QASS only)."""
    if upper <= 0:
        return None
    return math.ceil((constraint or 0) / upper)


def calculate_max_group_size(constraint: Optional[float], lower: float) -> Optional[int]:
    """Largest group whose raters can stay within ``constraint``; ``None`` when unbounded."""
    if lower <= 0:
        return None
    return math.floor((constraint or 0) / lower)


def check_bound_fields(
    mode: QASSMode,
    scale_type: ScaleType,
    lower: float,
    upper: float,
    is_constrained: bool = False,
    constraint: Optional[float] = None,
) -> Dict[str, str]:
    """Field-level errors for the bound settings of a QASS configuration."""

    errors: Dict[str, str] = {}
    if scale_type == ScaleType.PERCENTAGE:
        if lower < 0:
            errors["lower_bound"] = "Lower bound must be greater than or equal 0"
        if upper > 1:
            errors["upper_bound"] = "Upper bound must be less than or equal 1"
        if mode == QASSMode.CONJUNCTION and upper < 1:
            errors["upper_bound"] = "Upper bound must be 1 in Conjunction mode"
        if mode == QASSMode.DISJUNCTION and lower > 0:
            errors["lower_bound"] = "Lower bound must be 0 in Disjunction mode"
        return errors

    if not _is_integer(lower):
        errors["lower_bound"] = "Lower bound must be integer"
    if not _is_integer(upper):
        errors["upper_bound"] = "Upper bound must be integer"
    if is_constrained and constraint is not None and not _is_integer(constraint):
        errors["score_constraint"] = "Constraint must be integer"
    if mode == QASSMode.CONJUNCTION and upper < 1:
        errors["upper_bound"] = "Upper bound must be greater than or equal 1 in Conjunction mode"
    if mode == QASSMode.DISJUNCTION and lower > 0:
        errors["lower_bound"] = "Lower bound must be less than or equal 0 in Disjunction mode"
    return errors


def check_peer_matrix(
    matrix: Sequence[Sequence[Cell]],
    lower: float,
    upper: float,
    scale_type: ScaleType,
    constraint: Optional[float] = None,
) -> Optional[str]:
    """互评矩阵的横幅错误信息；全部通过时返回 ``None``。

    Checks run in order: cell range, integrality on the N-point scale, then
    column sums. ``constraint`` is only checked when given; pass ``None`` for
    an unconstrained configuration.
    """

    if not validate_cell_range(matrix, lower, upper):
        return f"Ratings are lower than {_fmt(lower)} or higher than {_fmt(upper)}"
    if not validate_scale_integrality(matrix, scale_type):
        return f"Ratings of {scale_type.value} must be integer"
    if constraint is not None and not validate_column_sums(
        matrix, constraint, tolerance=tolerance_for(scale_type)
    ):
        target = _fmt(constraint)
        return (
            f"The sum of scores in each column must equal {target}. Please adjust the "
            f"values so that each vertical line adds up to {target}."
        )
    return None


def validate_votes_divisible(matrix: Sequence[Sequence[Cell]], step: int = WEBAVALIA_VOTE_STEP) -> bool:
    return all(cell % step == 0 for row in matrix for cell in row if not is_missing(cell))


def check_webavalia_matrix(matrix: Sequence[Sequence[Cell]]) -> Optional[str]:
    if not validate_votes_divisible(matrix):
        return f"Votings must be divisible by {WEBAVALIA_VOTE_STEP}."
    if not validate_column_sums(matrix, WEBAVALIA_COLUMN_TOTAL, tolerance=0, skip_incomplete=True):
        return (
            f"The sum of scores in each column must equal {WEBAVALIA_COLUMN_TOTAL}. Please adjust "
            f"the values so that each vertical line adds up to {WEBAVALIA_COLUMN_TOTAL}."
        )
    return None
