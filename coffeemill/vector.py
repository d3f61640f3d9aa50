"""Three-dimensional vector helpers and geometric measures."""

import math
from collections.abc import Sequence

import numpy as np

PI = math.pi
TAU = 2.0 * math.pi

VectorLike = Sequence[float] | np.ndarray


def _as_vector(values: VectorLike) -> np.ndarray:
    return np.asarray(values, dtype=float).reshape(-1)


def _as_vector3(values: VectorLike) -> np.ndarray:
    vector = _as_vector(values)
    if vector.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got {vector.shape[0]} components")
    return vector


def dot_product(lhs: VectorLike, rhs: VectorLike) -> float:
    """Return the inner product of two vectors of equal length."""
    a = _as_vector(lhs)
    b = _as_vector(rhs)
    if a.shape != b.shape:
        raise ValueError(f"vector lengths differ: {a.shape[0]} and {b.shape[0]}")
    return float(np.dot(a, b))


def cross_product(lhs: VectorLike, rhs: VectorLike) -> np.ndarray:
    """Return the cross product of two 3-vectors."""
    return np.cross(_as_vector3(lhs), _as_vector3(rhs))


def scalar_triple_product(lhs: VectorLike, mid: VectorLike, rhs: VectorLike) -> float:
    """Return (lhs x mid) . rhs."""
    return float(np.dot(cross_product(lhs, mid), _as_vector3(rhs)))


def length_sq(vector: VectorLike) -> float:
    """Return the squared Euclidean length of a 3-vector."""
    v = _as_vector3(vector)
    return float(np.dot(v, v))


def length(vector: VectorLike) -> float:
    """Return the Euclidean length of a 3-vector."""
    return math.sqrt(max(0.0, length_sq(vector)))


def regularize(vector: VectorLike) -> np.ndarray:
    """Return the unit vector pointing along ``vector``.

    Raises ZeroDivisionError for the zero vector.
    """
    return _as_vector3(vector) * (1.0 / length(vector))


def _clamped_acos(value: float) -> float:
    return math.acos(min(1.0, max(-1.0, value)))


def angle(lhs: VectorLike, rhs: VectorLike) -> float:
    """Return the angle between two 3-vectors in radians."""
    return _clamped_acos(dot_product(regularize(lhs), regularize(rhs)))


def dihedral(ri: VectorLike, rj: VectorLike, rk: VectorLike, rl: VectorLike) -> float:
    """Return the signed dihedral angle i-j-k-l in radians, in [-pi, pi]."""
    pi_, pj, pk, pl = (_as_vector3(p) for p in (ri, rj, rk, rl))
    rji = pi_ - pj
    rjk = pk - pj
    rlk = pk - pl

    m = regularize(np.cross(rji, rjk))
    n = regularize(np.cross(rjk, rlk))

    return math.copysign(_clamped_acos(float(np.dot(m, n))), float(np.dot(rji, n)))