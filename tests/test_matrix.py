import numpy as np
import pytest

from coffeemill.matrix import determinant, format_matrix, identity, inverse

SAMPLE = [
    [2.0, -1.0, 0.5],
    [1.0, 3.0, -2.0],
    [0.0, 4.0, 1.5],
]


def test_identity_square_and_rectangular():
    np.testing.assert_array_equal(identity(3, 3), np.eye(3))
    rect = identity(2, 4)
    assert rect.shape == (2, 4)
    assert rect.sum() == 2.0
    assert rect[1, 1] == 1.0


def test_determinant_of_identity():
    assert determinant(identity(3, 3)) == pytest.approx(1.0)


def test_determinant_agrees_with_numpy():
    assert determinant(SAMPLE) == pytest.approx(np.linalg.det(np.array(SAMPLE)))


def test_determinant_multiplicative():
    a = np.array(SAMPLE)
    b = np.array([[1.0, 2.0, 0.0], [0.0, 1.0, 3.0], [2.0, 0.0, 1.0]])
    assert determinant(a @ b) == pytest.approx(determinant(a) * determinant(b))


def test_inverse_round_trip():
    a = np.array(SAMPLE)
    np.testing.assert_allclose(inverse(a) @ a, np.eye(3), atol=1e-12)
    np.testing.assert_allclose(a @ inverse(a), np.eye(3), atol=1e-12)
    np.testing.assert_allclose(inverse(inverse(a)), a, atol=1e-12)


def test_inverse_of_singular_matrix_raises():
    singular = [[1.0, 2.0, 3.0], [2.0, 4.0, 6.0], [0.0, 1.0, 1.0]]
    with pytest.raises(ZeroDivisionError):
        inverse(singular)


def test_wrong_shape_rejected():
    with pytest.raises(ValueError):
        determinant(np.eye(2))
    with pytest.raises(ValueError):
        inverse(np.eye(4))


def test_format_matrix_rows():
    assert format_matrix(identity(2, 2)) == "[ 1 0 ]\n[ 0 1 ]\n"


def test_format_vector_single_line():
    assert format_matrix([1.0, 2.5, -3.0]) == "[ 1 2.5 -3 ]"
    assert format_matrix(np.array([[1.0], [2.5], [-3.0]])) == "[ 1 2.5 -3 ]"