import numpy as np
import pytest

from coffeemill.eigen import JacobiEigenSolver

SYMMETRIC = np.array(
    [
        [4.0, 1.0, -2.0, 0.5],
        [1.0, 2.0, 0.0, 1.0],
        [-2.0, 0.0, 3.0, -1.5],
        [0.5, 1.0, -1.5, 1.0],
    ]
)


def test_diagonal_matrix_keeps_values():
    pairs = JacobiEigenSolver().solve(np.diag([3.0, -1.0, 2.0]))
    assert [value for value, _ in pairs] == pytest.approx([3.0, -1.0, 2.0])
    for k, (_, vec) in enumerate(pairs):
        np.testing.assert_allclose(np.abs(vec), np.eye(3)[k])


def test_eigenpairs_satisfy_definition():
    pairs = JacobiEigenSolver().solve(SYMMETRIC)
    assert len(pairs) == 4
    for value, vec in pairs:
        np.testing.assert_allclose(SYMMETRIC @ vec, value * vec, atol=1e-9)


def test_eigenvalues_match_numpy():
    pairs = JacobiEigenSolver().solve(SYMMETRIC)
    values = sorted(value for value, _ in pairs)
    np.testing.assert_allclose(values, np.linalg.eigvalsh(SYMMETRIC), atol=1e-9)


def test_eigenvectors_are_orthonormal():
    pairs = JacobiEigenSolver().solve(SYMMETRIC)
    vectors = np.column_stack([vec for _, vec in pairs])
    np.testing.assert_allclose(vectors.T @ vectors, np.eye(4), atol=1e-9)


def test_sum_of_eigenvalues_equals_diagonal_sum():
    pairs = JacobiEigenSolver().solve(SYMMETRIC)
    diagonal_sum = float(SYMMETRIC.diagonal().sum())
    assert sum(value for value, _ in pairs) == pytest.approx(diagonal_sum)


def test_input_is_not_modified():
    original = SYMMETRIC.copy()
    JacobiEigenSolver().solve(SYMMETRIC)
    np.testing.assert_array_equal(SYMMETRIC, original)


def test_asymmetric_matrix_rejected():
    with pytest.raises(ValueError):
        JacobiEigenSolver().solve([[1.0, 2.0], [3.0, 1.0]])


def test_non_square_matrix_rejected():
    with pytest.raises(ValueError):
        JacobiEigenSolver().solve(np.ones((2, 3)))