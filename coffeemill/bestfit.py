"""Least-squares superposition of structures via the quaternion method."""

from collections.abc import Sequence

import numpy as np

from coffeemill.eigen import JacobiEigenSolver


def _as_structure(points) -> np.ndarray:
    structure = np.array(points, dtype=float)
    if structure.size == 0:
        return structure.reshape(0, 3)
    if structure.ndim != 2 or structure.shape[1] != 3:
        raise ValueError(f"expected an (N, 3) array of positions, got shape {structure.shape}")
    return structure


def _check_sizes(structure: np.ndarray, reference: np.ndarray, context: str) -> None:
    if len(structure) != len(reference):
        raise ValueError(
            f"BestFit.{context}: number of particles differ from each other "
            f"({len(structure)} and {len(reference)})"
        )


def _score_matrix(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    ax, ay, az = a[:, 0], a[:, 1], a[:, 2]
    bx, by, bz = b[:, 0], b[:, 1], b[:, 2]

    score = np.zeros((4, 4))
    score[0, 0] = np.sum(bx * bx + by * by + bz * bz)
    score[0, 1] = np.sum(az * by - ay * bz)
    score[0, 2] = np.sum(ax * bz - az * bx)
    score[0, 3] = np.sum(ay * bx - ax * by)
    score[1, 1] = np.sum(bx * bx + ay * ay + az * az)
    score[1, 2] = np.sum(bx * by - ax * ay)
    score[1, 3] = np.sum(bx * bz - ax * az)
    score[2, 2] = np.sum(ax * ax + by * by + az * az)
    score[2, 3] = np.sum(by * bz - ay * az)
    score[3, 3] = np.sum(ax * ax + ay * ay + bz * bz)
    score /= len(a)

    upper = np.triu(score)
    return upper + np.triu(score, k=1).T


def _quaternion_to_matrix(q: np.ndarray) -> np.ndarray:
    q0, q1, q2, q3 = (float(v) for v in q)
    return np.array(
        [
            [2 * q0 * q0 + 2 * q1 * q1 - 1.0, 2 * q1 * q2 - 2 * q0 * q3, 2 * q1 * q3 + 2 * q0 * q2],
            [2 * q1 * q2 + 2 * q0 * q3, 2 * q0 * q0 + 2 * q2 * q2 - 1.0, 2 * q2 * q3 - 2 * q0 * q1],
            [2 * q1 * q3 - 2 * q0 * q2, 2 * q2 * q3 + 2 * q0 * q1, 2 * q0 * q0 + 2 * q3 * q3 - 1.0],
        ]
    )


class BestFit:
    """Superimposes structures onto a reference by minimising RMSD."""

    def __init__(self, reference: Sequence | np.ndarray | None = None):
        self._reference = np.empty((0, 3))
        self._center = np.zeros(3)
        if reference is not None:
            self.set_reference(reference)

    @property
    def reference(self) -> np.ndarray:
        """The stored reference, moved so that its centroid is at the origin."""
        return self._reference.copy()

    def set_reference(self, reference) -> None:
        """Store a reference structure, remembering its centroid."""
        structure = _as_structure(reference)
        self._center = self.zeroing_vector(structure)
        self._reference = structure - self._center

    def zeroing_vector(self, snapshot) -> np.ndarray:
        """Return the centroid of a structure."""
        structure = _as_structure(snapshot)
        if len(structure) == 0:
            raise ValueError("BestFit: cannot take the centroid of an empty structure")
        return structure.mean(axis=0)

    def _centered(self, structure: np.ndarray) -> np.ndarray:
        return structure - self.zeroing_vector(structure)

    def _rotation(self, structure: np.ndarray, reference: np.ndarray) -> np.ndarray:
        score = _score_matrix(reference + structure, reference - structure)
        pairs = JacobiEigenSolver().solve(score)
        _, quaternion = min(pairs, key=lambda pair: pair[0])
        return _quaternion_to_matrix(quaternion)

    def fit(self, snapshot, reference=None) -> np.ndarray:
        """Return ``snapshot`` superimposed onto a reference.

        With an explicit reference the result is centred at the origin; with
        the stored reference it is placed on the stored reference's centroid.
        """
        structure = _as_structure(snapshot)
        if reference is None:
            _check_sizes(structure, self._reference, "fit(structure); reference might not be defined")
            target = self._centered(structure)
            rotation = self._rotation(target, self._reference)
            return target @ rotation.T + self._center

        ref = _as_structure(reference)
        _check_sizes(structure, ref, "fit(structure, reference)")
        target = self._centered(structure)
        rotation = self._rotation(target, self._centered(ref))
        return target @ rotation.T

    def rotational_matrix(self, snapshot, reference=None) -> np.ndarray:
        """Return the rotation that superimposes ``snapshot`` onto a reference."""
        structure = _as_structure(snapshot)
        if reference is None:
            _check_sizes(structure, self._reference, "rotational_matrix(structure); reference might not be set")
            return self._rotation(self._centered(structure), self._reference)

        ref = _as_structure(reference)
        _check_sizes(structure, ref, "rotational_matrix(structure, reference)")
        return self._rotation(self._centered(structure), self._centered(ref))