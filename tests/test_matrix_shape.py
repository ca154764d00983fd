import math

from gpa_api.matrix.shape import (
    empty_matrix,
    is_missing,
    is_square,
    resize,
    resize_weights,
    set_diagonal,
    transpose,
)


def _numbered(size: int):
    return [[i * 10 + j for j in range(size)] for i in range(size)]


def test_resize_produces_square_matrix_for_every_group_size() -> None:
    original = _numbered(5)
    for size in range(2, 11):
        resized = resize(original, size)
        assert len(resized) == size
        assert is_square(resized)


def test_resize_grow_keeps_existing_cells() -> None:
    original = _numbered(3)
    resized = resize(original, 5)
    for i in range(3):
        for j in range(3):
            assert resized[i][j] == original[i][j]
    assert resized[3] == [None] * 5
    assert resized[0][4] is None


def test_resize_shrink_truncates_rows_and_columns() -> None:
    resized = resize(_numbered(4), 2)
    assert resized == [[0, 1], [10, 11]]


def test_resize_below_two_is_noop() -> None:
    original = [[1, 0], [0, 1]]
    assert resize(original, 1) == original
    assert resize(original, 0) == original


def test_resize_above_max_is_noop() -> None:
    original = _numbered(10)
    assert resize(original, 11) == original


def test_resize_does_not_mutate_input() -> None:
    original = _numbered(3)
    resize(original, 2)
    assert len(original) == 3 and len(original[0]) == 3


def test_resize_weights_stays_aligned() -> None:
    assert resize_weights([3, 2, 1, 0], 2) == [3, 2]
    assert resize_weights([3, 2], 4) == [3, 2, 1, 1]
    assert resize_weights([3, 2], 1) == [3, 2]


def test_set_diagonal_and_transpose() -> None:
    matrix = set_diagonal(empty_matrix(3), 1)
    assert [matrix[i][i] for i in range(3)] == [1, 1, 1]
    assert matrix[0][1] is None
    assert transpose([[1, 2], [3, 4]]) == [[1, 3], [2, 4]]


def test_is_missing() -> None:
    assert is_missing(None)
    assert is_missing(math.nan)
    assert not is_missing(0)
    assert not is_missing(0.5)
