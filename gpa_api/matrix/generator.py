"""模拟页随机互评矩阵生成。

Randomised peer matrix generation for the simulation page. One parameter object drives both scoring models: QASS uses the selected
scale (0.01 steps on the percentage scale, 1 on the N-point scale) and
WebAVALIA uses votes in steps of 5 that add up to 100 per rater.

Constrained generation works per rater: every allocation starts at the lower
bound (the diagonal at its fixed value in Conjunction / Disjunction mode) and
the remaining budget is handed out one step at a time to random indices that
have not reached the upper bound. The result is transposed so the returned
matrix is indexed ``[ratee][rater]`` and every column sums to the target.
"""

from __future__ import annotations

import logging
import math
import random
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from gpa_api.matrix.shape import MAX_GROUP_SIZE, MIN_GROUP_SIZE, Matrix, transpose
from gpa_api.matrix.validation import (
    WEBAVALIA_COLUMN_TOTAL,
    WEBAVALIA_VOTE_STEP,
    validate_bounds,
)
from gpa_api.models.enums import FIXED_DIAGONAL, QASSMode, ScaleType

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 100_000
MAX_RANDOM_WEIGHT = 5
_EPSILON = 1e-9


class InvalidBoundsError(ValueError):
    """Bounds conflict with each other or with the fixed diagonal value."""


class InfeasibleConstraintError(ValueError):
    """The column total cannot be reached within the bounds."""


class GenerationParams(BaseModel):
    """Everything the generator needs to build one matrix."""

    group_size: int = Field(ge=MIN_GROUP_SIZE, le=MAX_GROUP_SIZE)
    lower_bound: float
    upper_bound: float
    mode: QASSMode = QASSMode.BIJUNCTION
    scale_type: ScaleType = ScaleType.PERCENTAGE
    score_constraint: Optional[float] = None
    step: Optional[float] = Field(default=None, gt=0)

    @property
    def increment(self) -> float:
        if self.step is not None:
            return self.step
        return 0.01 if self.scale_type == ScaleType.PERCENTAGE else 1

    @property
    def fixed_diagonal(self) -> Optional[int]:
        return FIXED_DIAGONAL.get(self.mode)

    @property
    def is_constrained(self) -> bool:
        return self.score_constraint is not None


def _to_value(units: int, params: GenerationParams) -> float:
    value = units * params.increment
    if params.scale_type == ScaleType.PERCENTAGE:
        return round(value, 2)
    return int(round(value))


def _grid_units(params: GenerationParams) -> Tuple[int, int]:
    """Lowest and highest step counts that stay inside the bounds."""
    step = params.increment
    return (
        math.ceil(params.lower_bound / step - _EPSILON),
        math.floor(params.upper_bound / step + _EPSILON),
    )


def _check_params(params: GenerationParams) -> None:
    if not validate_bounds(params.lower_bound, params.upper_bound):
        raise InvalidBoundsError("Lower bound must be less than upper bound")
    lower_units, upper_units = _grid_units(params)
    if lower_units > upper_units:
        raise InvalidBoundsError(
            f"No rating in steps of {params.increment:g} lies within "
            f"[{params.lower_bound:g}, {params.upper_bound:g}]"
        )
    fixed = params.fixed_diagonal
    if fixed is not None and not params.lower_bound <= fixed <= params.upper_bound:
        raise InvalidBoundsError(
            f"{params.mode.value} mode fixes self-ratings at {fixed}, "
            f"which is outside [{params.lower_bound:g}, {params.upper_bound:g}]"
        )


def check_feasibility(params: GenerationParams) -> None:
    """Raise ``InfeasibleConstraintError`` when no matrix satisfies ``params``."""

    _check_params(params)
    if params.score_constraint is None:
        return

    step = params.increment
    target = params.score_constraint / step
    if abs(target - round(target)) > 1e-6:
        raise InfeasibleConstraintError(
            f"Constraint {params.score_constraint:g} cannot be reached in steps of {step:g}"
        )

    lower_units, upper_units = _grid_units(params)
    free_cells = params.group_size
    fixed_units = 0
    if params.fixed_diagonal is not None:
        free_cells -= 1
        fixed_units = round(params.fixed_diagonal / step)

    lowest = fixed_units + free_cells * lower_units
    highest = fixed_units + free_cells * upper_units
    if not lowest <= round(target) <= highest:
        raise InfeasibleConstraintError(
            f"Constraint {params.score_constraint:g} is infeasible for a group of "
            f"{params.group_size}: each column must total between "
            f"{_to_value(lowest, params):g} and {_to_value(highest, params):g}"
        )


def _allocate(
    rater: int,
    params: GenerationParams,
    rng: random.Random,
    max_steps: int,
) -> List[int]:
    step = params.increment
    lower_units, upper_units = _grid_units(params)

    parts = [lower_units] * params.group_size
    candidates = list(range(params.group_size))
    if params.fixed_diagonal is not None:
        parts[rater] = round(params.fixed_diagonal / step)
        candidates.remove(rater)

    remaining = round(params.score_constraint / step) - sum(parts)
    iterations = 0
    while remaining > 0:
        if not candidates or iterations >= max_steps:
            raise InfeasibleConstraintError(
                f"Could not distribute constraint {params.score_constraint:g} for rater {rater + 1}"
            )
        iterations += 1
        index = rng.choice(candidates)
        if parts[index] >= upper_units:
            candidates.remove(index)
            continue
        parts[index] += 1
        remaining -= 1
    return parts


def generate_unconstrained(params: GenerationParams, rng: Optional[random.Random] = None) -> Matrix:
    _check_params(params)
    rng = rng or random.Random()
    lower, upper = params.lower_bound, params.upper_bound
    fixed = params.fixed_diagonal

    matrix: Matrix = []
    for i in range(params.group_size):
        row = []
        for j in range(params.group_size):
            if i == j and fixed is not None:
                row.append(fixed)
                continue
            if params.scale_type == ScaleType.PERCENTAGE:
                score = round(rng.uniform(lower, upper), 2)
                row.append(min(max(score, lower), upper))
            else:
                row.append(rng.randint(math.ceil(lower), math.floor(upper)))
        matrix.append(row)
    return matrix


def generate_constrained(
    params: GenerationParams,
    rng: Optional[random.Random] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Matrix:
    if params.score_constraint is None:
        raise InfeasibleConstraintError("Constraint is required")
    check_feasibility(params)
    rng = rng or random.Random()

    allocations = [
        [_to_value(units, params) for units in _allocate(rater, params, rng, max_steps)]
        for rater in range(params.group_size)
    ]
    return transpose(allocations)


def generate_matrix(
    params: GenerationParams,
    rng: Optional[random.Random] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Matrix:
    logger.debug(
        "Generating %dx%d peer matrix (mode=%s, scale=%s, constraint=%s)",
        params.group_size,
        params.group_size,
        params.mode.value,
        params.scale_type.value,
        params.score_constraint,
    )
    if params.is_constrained:
        return generate_constrained(params, rng, max_steps)
    return generate_unconstrained(params, rng)


def webavalia_params(group_size: int) -> GenerationParams:
    return GenerationParams(
        group_size=group_size,
        lower_bound=WEBAVALIA_VOTE_STEP,
        upper_bound=WEBAVALIA_COLUMN_TOTAL,
        scale_type=ScaleType.N_POINT,
        score_constraint=WEBAVALIA_COLUMN_TOTAL,
        step=WEBAVALIA_VOTE_STEP,
    )


def generate_webavalia_matrix(
    group_size: int,
    rng: Optional[random.Random] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Matrix:
    """Votes in multiples of 5, at least 5 each, every column totalling 100."""
    return generate_constrained(webavalia_params(group_size), rng, max_steps)


def random_weights(group_size: int, rng: Optional[random.Random] = None) -> List[int]:
    """每位学生随机一个 0 到 5 的整数权重。"""
    rng = rng or random.Random()
    return [rng.randint(0, MAX_RANDOM_WEIGHT) for _ in range(group_size)]
