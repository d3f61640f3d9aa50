"""Small dense matrix helpers."""

import numpy as np


def identity(rows: int, cols: int) -> np.ndarray:
    """Return a rows x cols matrix with ones on the main diagonal."""
    return np.eye(rows, cols, dtype=float)


def _as_matrix3(matrix) -> np.ndarray:
    m = np.asarray(matrix, dtype=float)
    if m.shape != (3, 3):
        raise ValueError(f"expected a 3x3 matrix, got shape {m.shape}")
    return m


def determinant(matrix) -> float:
    """Return the determinant of a 3x3 matrix."""
    m = _as_matrix3(matrix)
    return float(
        m[0, 0] * m[1, 1] * m[2, 2]
        + m[1, 0] * m[2, 1] * m[0, 2]
        + m[2, 0] * m[0, 1] * m[1, 2]
        - m[0, 0] * m[2, 1] * m[1, 2]
        - m[2, 0] * m[1, 1] * m[0, 2]
        - m[1, 0] * m[0, 1] * m[2, 2]
    )


def inverse(matrix) -> np.ndarray:
    """Return the inverse of a 3x3 matrix.

    Raises ZeroDivisionError when the matrix is singular.
    """
    m = _as_matrix3(matrix)
    det_inv = 1.0 / determinant(m)

    inv = np.empty((3, 3))
    inv[0, 0] = det_inv * (m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1])
    inv[1, 1] = det_inv * (m[0, 0] * m[2, 2] - m[0, 2] * m[2, 0])
    inv[2, 2] = det_inv * (m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0])

    inv[0, 1] = det_inv * (m[0, 2] * m[2, 1] - m[0, 1] * m[2, 2])
    inv[0, 2] = det_inv * (m[0, 1] * m[1, 2] - m[0, 2] * m[1, 1])
    inv[1, 2] = det_inv * (m[0, 2] * m[1, 0] - m[0, 0] * m[1, 2])

    inv[1, 0] = det_inv * (m[1, 2] * m[2, 0] - m[1, 0] * m[2, 2])
    inv[2, 0] = det_inv * (m[1, 0] * m[2, 1] - m[2, 0] * m[1, 1])
    inv[2, 1] = det_inv * (m[2, 0] * m[0, 1] - m[0, 0] * m[2, 1])
    return inv


def _format_value(value: float) -> str:
    return format(float(value), "g")


def format_matrix(matrix) -> str:
    """Render a matrix as bracketed rows; a vector renders as a single row."""
    m = np.asarray(matrix, dtype=float)
    if m.ndim == 1 or (m.ndim == 2 and m.shape[1] == 1):
        values = " ".join(_format_value(v) for v in m.reshape(-1))
        return f"[ {values} ]" if values else "[ ]"
    if m.ndim != 2:
        raise ValueError(f"expected a vector or a matrix, got {m.ndim} dimensions")
    lines = []
    for row in m:
        cells = "".join(f"{_format_value(v)} " for v in row)
        lines.append(f"[ {cells}]\n")
    return "".join(lines)