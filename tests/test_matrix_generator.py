import random

import pytest
from pydantic import ValidationError

from gpa_api.matrix.generator import (
    GenerationParams,
    InfeasibleConstraintError,
    InvalidBoundsError,
    check_feasibility,
    generate_constrained,
    generate_matrix,
    generate_unconstrained,
    generate_webavalia_matrix,
    random_weights,
)
from gpa_api.matrix.validation import column_sum
from gpa_api.models.enums import QASSMode, ScaleType


def _cells(matrix):
    return [cell for row in matrix for cell in row]


def test_unconstrained_percentage_cells_within_bounds() -> None:
    params = GenerationParams(group_size=6, lower_bound=0.2, upper_bound=0.9)
    for seed in range(20):
        matrix = generate_unconstrained(params, random.Random(seed))
        assert len(matrix) == 6
        for cell in _cells(matrix):
            assert 0.2 <= cell <= 0.9
            assert round(cell, 2) == cell


def test_unconstrained_n_point_cells_are_integers() -> None:
    params = GenerationParams(
        group_size=4, lower_bound=1, upper_bound=5, scale_type=ScaleType.N_POINT
    )
    matrix = generate_unconstrained(params, random.Random(3))
    for cell in _cells(matrix):
        assert isinstance(cell, int)
        assert 1 <= cell <= 5


def test_conjunction_fixes_diagonal_at_one() -> None:
    params = GenerationParams(
        group_size=3, lower_bound=0, upper_bound=1, mode=QASSMode.CONJUNCTION
    )
    for seed in range(10):
        matrix = generate_unconstrained(params, random.Random(seed))
        for i in range(3):
            for j in range(3):
                if i == j:
                    assert matrix[i][j] == 1
                else:
                    assert 0 <= matrix[i][j] <= 1


def test_disjunction_fixes_diagonal_at_zero() -> None:
    params = GenerationParams(
        group_size=4, lower_bound=0, upper_bound=1, mode=QASSMode.DISJUNCTION
    )
    matrix = generate_matrix(params, random.Random(1))
    assert [matrix[i][i] for i in range(4)] == [0, 0, 0, 0]


def test_constrained_percentage_columns_sum_to_target() -> None:
    for size in range(2, 11):
        params = GenerationParams(
            group_size=size, lower_bound=0, upper_bound=1, score_constraint=1
        )
        matrix = generate_constrained(params, random.Random(size))
        for j in range(size):
            assert abs(column_sum(matrix, j) - 1) <= 0.001
        assert all(0 <= cell <= 1 for cell in _cells(matrix))


def test_constrained_n_point_columns_sum_exactly() -> None:
    params = GenerationParams(
        group_size=5,
        lower_bound=1,
        upper_bound=5,
        scale_type=ScaleType.N_POINT,
        score_constraint=15,
    )
    matrix = generate_matrix(params, random.Random(11))
    for j in range(5):
        assert column_sum(matrix, j) == 15
    assert all(isinstance(cell, int) and 1 <= cell <= 5 for cell in _cells(matrix))


def test_constrained_conjunction_keeps_diagonal_and_total() -> None:
    params = GenerationParams(
        group_size=4,
        lower_bound=0,
        upper_bound=1,
        mode=QASSMode.CONJUNCTION,
        score_constraint=2,
    )
    matrix = generate_matrix(params, random.Random(5))
    for i in range(4):
        assert matrix[i][i] == 1
        assert abs(column_sum(matrix, i) - 2) <= 0.001


def test_infeasible_constraint_fails_fast() -> None:
    params = GenerationParams(
        group_size=2, lower_bound=0, upper_bound=0.5, score_constraint=1.5
    )
    with pytest.raises(InfeasibleConstraintError, match="infeasible"):
        generate_constrained(params, random.Random(0))


def test_constraint_below_lower_total_is_infeasible() -> None:
    params = GenerationParams(
        group_size=3,
        lower_bound=1,
        upper_bound=5,
        scale_type=ScaleType.N_POINT,
        score_constraint=2,
    )
    with pytest.raises(InfeasibleConstraintError):
        check_feasibility(params)


def test_constraint_off_the_step_grid_is_infeasible() -> None:
    params = GenerationParams(
        group_size=3,
        lower_bound=1,
        upper_bound=5,
        scale_type=ScaleType.N_POINT,
        score_constraint=10.5,
    )
    with pytest.raises(InfeasibleConstraintError):
        check_feasibility(params)


def test_iteration_cap_stops_allocation() -> None:
    params = GenerationParams(group_size=2, lower_bound=0, upper_bound=1, score_constraint=1)
    with pytest.raises(InfeasibleConstraintError):
        generate_constrained(params, random.Random(0), max_steps=1)


def test_conflicting_bounds_are_rejected() -> None:
    with pytest.raises(InvalidBoundsError):
        generate_unconstrained(GenerationParams(group_size=3, lower_bound=0.8, upper_bound=0.2))
    with pytest.raises(InvalidBoundsError):
        generate_unconstrained(
            GenerationParams(
                group_size=3, lower_bound=0, upper_bound=0.5, mode=QASSMode.CONJUNCTION
            )
        )


def test_bounds_without_a_scale_value_are_rejected() -> None:
    params = GenerationParams(
        group_size=3, lower_bound=1.5, upper_bound=1.8, scale_type=ScaleType.N_POINT
    )
    with pytest.raises(InvalidBoundsError, match="No rating"):
        generate_unconstrained(params, random.Random(0))
    with pytest.raises(InvalidBoundsError):
        generate_matrix(params, random.Random(0))


def test_n_point_bounds_off_the_grid_use_inner_integers() -> None:
    params = GenerationParams(
        group_size=3, lower_bound=1.5, upper_bound=3.2, scale_type=ScaleType.N_POINT
    )
    cells = _cells(generate_unconstrained(params, random.Random(4)))
    assert all(cell in (2, 3) for cell in cells)


def test_same_seed_gives_same_matrix() -> None:
    params = GenerationParams(group_size=5, lower_bound=0, upper_bound=1, score_constraint=1)
    first = generate_matrix(params, random.Random(42))
    second = generate_matrix(params, random.Random(42))
    assert first == second


def test_group_size_outside_range_is_rejected() -> None:
    with pytest.raises(ValidationError):
        GenerationParams(group_size=11, lower_bound=0, upper_bound=1)
    with pytest.raises(ValidationError):
        GenerationParams(group_size=1, lower_bound=0, upper_bound=1)


def test_webavalia_votes() -> None:
    for size in range(2, 11):
        matrix = generate_webavalia_matrix(size, random.Random(size))
        for j in range(size):
            assert column_sum(matrix, j) == 100
        for cell in _cells(matrix):
            assert cell % 5 == 0
            assert cell >= 5


def test_random_weights() -> None:
    weights = random_weights(7, random.Random(2))
    assert len(weights) == 7
    assert all(0 <= weight <= 5 for weight in weights)
