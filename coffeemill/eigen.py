"""Jacobi eigenvalue solver for small real symmetric matrices."""

import math

import numpy as np

_RELATIVE_TOLERANCE = 1e-13
_ABSOLUTE_TOLERANCE = 1e-13
_MAX_LOOP = 10000


class EigenSolverError(RuntimeError):
    """Raised when the iteration does not reach the tolerance."""


def _relative_deviation(numerator: float, denominator: float) -> float:
    """abs(numerator / denominator - 1) with IEEE semantics for zero denominators."""
    if denominator == 0.0:
        return math.nan if numerator == 0.0 else math.inf
    return abs(numerator / denominator - 1.0)


class JacobiEigenSolver:
    """Diagonalises a symmetric matrix by successive Jacobi rotations."""

    def solve(self, matrix) -> list[tuple[float, np.ndarray]]:
        """Return (eigenvalue, eigenvector) pairs, one per column of the rotation.

        Raises ValueError for a non-square or asymmetric matrix and
        EigenSolverError when the iteration does not converge.
        """
        m = np.array(matrix, dtype=float)
        if m.ndim != 2 or m.shape[0] != m.shape[1] or m.shape[0] == 0:
            raise ValueError(f"expected a non-empty square matrix, got shape {m.shape}")
        if not self._is_symmetric(m):
            raise ValueError("JacobiEigenSolver: asymmetric matrix")

        n = m.shape[0]
        ps = np.eye(n)
        if n == 1:
            return [(float(m[0, 0]), ps[:, 0].copy())]

        for _ in range(_MAX_LOOP):
            i, j = self._max_element(m)
            if abs(m[i, j]) < _ABSOLUTE_TOLERANCE:
                break

            alpha = (m[i, i] - m[j, j]) * 0.5
            beta = -m[i, j]
            gamma = abs(alpha) / math.sqrt(alpha * alpha + beta * beta)
            cos_t = math.sqrt(max(0.0, 0.5 + gamma * 0.5))
            sin_t = math.copysign(math.sqrt(max(0.0, 0.5 - gamma * 0.5)), alpha * beta)

            rotation = np.eye(n)
            rotation[i, i] = cos_t
            rotation[i, j] = sin_t
            rotation[j, i] = -sin_t
            rotation[j, j] = cos_t

            rotated = rotation.T @ m @ rotation
            if self._max_relative_diff(m, rotated) < _RELATIVE_TOLERANCE:
                break
            rotated[i, j] = 0.0
            rotated[j, i] = 0.0

            m = rotated
            ps = ps @ rotation
        else:
            raise EigenSolverError("JacobiEigenSolver: cannot solve with the tolerance")

        return [(float(m[k, k]), ps[:, k].copy()) for k in range(n)]

    @staticmethod
    def _is_symmetric(m: np.ndarray) -> bool:
        n = m.shape[0]
        for i in range(n - 1):
            for j in range(i + 1, n):
                # a NaN deviation (both zero) compares false, as in IEEE arithmetic
                if _relative_deviation(m[i, j], m[j, i]) > _RELATIVE_TOLERANCE:
                    return False
        return True

    @staticmethod
    def _max_element(m: np.ndarray) -> tuple[int, int]:
        upper = np.abs(np.triu(m, k=1))
        best = (0, 1)
        best_value = upper[0, 1]
        rows, cols = np.triu_indices(m.shape[0], k=1)
        for i, j in zip(rows.tolist(), cols.tolist()):
            if best_value < upper[i, j]:
                best_value = upper[i, j]
                best = (i, j)
        return best

    @staticmethod
    def _max_relative_diff(lhs: np.ndarray, rhs: np.ndarray) -> float:
        result = 0.0
        for a, b in zip(np.diag(lhs).tolist(), np.diag(rhs).tolist()):
            deviation = _relative_deviation(a, b)
            if result < deviation:
                result = deviation
        return result