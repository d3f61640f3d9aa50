"""Particles, snapshots and trajectories shared by the file readers and writers."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np


def _vector3(values) -> np.ndarray:
    vector = np.array(values, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got {vector.shape[0]} components")
    return vector


@dataclass
class CuboidalBoundary:
    """A periodic rectangular box spanning ``lower`` to ``upper``."""

    lower: np.ndarray
    upper: np.ndarray

    def __post_init__(self) -> None:
        self.lower = _vector3(self.lower)
        self.upper = _vector3(self.upper)

    def width(self) -> np.ndarray:
        """Return the edge lengths of the box."""
        return self.upper - self.lower


@dataclass
class Particle:
    """A point with a position and free-form named attributes."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    attributes: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.position = _vector3(self.position)


@dataclass
class Snapshot:
    """One frame: particles, frame attributes, an optional box and bonds."""

    particles: list[Particle] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)
    boundary: CuboidalBoundary | None = None
    bonds: dict[int, list[int]] = field(default_factory=dict)

    def positions(self) -> np.ndarray:
        """Return the particle positions as an (N, 3) array."""
        if not self.particles:
            return np.empty((0, 3))
        return np.array([p.position for p in self.particles], dtype=float)


@dataclass
class Trajectory:
    """A sequence of snapshots with trajectory-wide attributes."""

    snapshots: list[Snapshot] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self.snapshots)

    def __len__(self) -> int:
        return len(self.snapshots)

    def __getitem__(self, index: int) -> Snapshot:
        return self.snapshots[index]