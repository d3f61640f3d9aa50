"""Reading and writing GROMACS-style TRR binary trajectory files."""

import logging
import os
import struct
from collections.abc import Iterator
from typing import Any

import numpy as np

from coffeemill.frames import CuboidalBoundary, Particle, Snapshot, Trajectory

_log = logging.getLogger(__name__)

MAGIC_NUMBER = 1993
_VERSION = 13
_TITLE = b"generated by Coffee-mill"
_HEADER_INTEGERS_SIZE = 64  # sixteen 32-bit integers per frame header
_DOUBLE_SIZE = 8

_SIZE_KEYS = (
    "ir_size",
    "e_size",
    "box_size",
    "vir_size",
    "pres_size",
    "top_size",
    "sym_size",
    "position_size",
    "velocity_size",
    "force_size",
)
_PRECISIONS = {4: ("float", "f"), 8: ("double", "d")}


class TRRFormatError(ValueError):
    """Raised when a TRR file is truncated or its header is inconsistent."""


class TRRReader:
    """Reads frames from a TRR file; every frame carries its own header."""

    def __init__(self, path):
        self._path = os.fspath(path)
        self._file = open(self._path, "rb")
        self._file_size = os.fstat(self._file.fileno()).st_size
        self._snapshot_size = 0
        self._num_particles = 0
        self._current = 0

    @property
    def file_name(self) -> str:
        return self._path

    @property
    def current(self) -> int:
        """Index of the next frame to be read."""
        return self._current

    def _read_exact(self, size: int) -> bytes:
        data = self._file.read(size)
        if len(data) != size:
            raise TRRFormatError(
                f"{self._path}: unexpected end of file (wanted {size} bytes, got {len(data)})"
            )
        return data

    def _int32s(self, count: int) -> tuple[int, ...]:
        return struct.unpack(f"<{count}i", self._read_exact(4 * count))

    def _reals(self, code: str, count: int) -> tuple[float, ...]:
        width = 4 if code == "f" else 8
        return struct.unpack(f"<{count}{code}", self._read_exact(width * count))

    def _skip(self, size: int) -> None:
        if size:
            self._file.seek(size, os.SEEK_CUR)

    def _read_header_block(self) -> tuple[dict[str, Any], str]:
        magic, version, title_length = self._int32s(3)
        if title_length < 0:
            raise TRRFormatError(f"{self._path}: negative title length {title_length}")
        header: dict[str, Any] = {
            "magic_number": magic,
            "version": version,
            "title": self._read_exact(title_length).decode("latin-1"),
        }
        header.update(zip(_SIZE_KEYS, self._int32s(len(_SIZE_KEYS))))
        natoms, step, nre = self._int32s(3)
        header["number_of_particles"] = natoms
        header["step"] = step
        header["nre"] = nre

        if natoms <= 0:
            raise TRRFormatError(f"{self._path}: invalid number of particles {natoms}")
        sizeof_real = header["position_size"] // natoms // 3
        if sizeof_real not in _PRECISIONS:
            raise TRRFormatError(
                f"invalid size of types: there are {natoms} particles, and size of "
                f"position block is {header['position_size']}. the size of real "
                f"type becomes {sizeof_real}"
            )
        precision, code = _PRECISIONS[sizeof_real]
        header["precision"] = precision
        header["t"], header["lambda"] = self._reals(code, 2)

        self._num_particles = natoms
        self._snapshot_size = (
            _HEADER_INTEGERS_SIZE
            + len(header["title"])
            + sum(header[key] for key in _SIZE_KEYS)
            + 2 * sizeof_real
        )
        return header, code

    def read_header(self) -> dict[str, Any]:
        """Return the header of the first frame, which stands for the whole file."""
        self._file.seek(0)
        header, _ = self._read_header_block()
        if self._file_size % self._snapshot_size != 0:
            _log.warning(
                "file_size (%d) is not a multiple of snapshot_size (%d). "
                "This might cause a problem later.",
                self._file_size,
                self._snapshot_size,
            )
        self.rewind()
        return header

    def read(self) -> Trajectory:
        """Read every frame from the beginning of the file."""
        self.rewind()
        traj = Trajectory(attributes=self.read_header())
        while not self.is_eof():
            frame = self.read_frame()
            if frame is None:
                break
            traj.snapshots.append(frame)
        return traj

    def read_frame(self, index: int | None = None) -> Snapshot | None:
        """Read the next frame, or the frame at ``index``; None if there is none."""
        if index is None:
            return self._read_next()
        if index < 0:
            raise ValueError(f"frame index must not be negative, got {index}")
        if self._snapshot_size == 0:
            self.read_header()
        self.rewind()
        position = self._snapshot_size * index
        if self._file_size <= position:
            return None
        self._file.seek(position)
        self._current = index
        return self._read_next()

    def _read_next(self) -> Snapshot | None:
        if self._num_particles == 0:
            position = self._file.tell()
            self.read_header()
            self._file.seek(position)
        if self.is_eof():
            return None

        header, code = self._read_header_block()
        natoms = header["number_of_particles"]
        frame = Snapshot(
            particles=[Particle() for _ in range(natoms)],
            attributes=header,
        )

        self._skip(header["ir_size"])
        self._skip(header["e_size"])
        if header["box_size"]:
            frame.boundary = self._read_boundary(code)
        for key in ("vir_size", "pres_size", "top_size", "sym_size"):
            self._skip(header[key])

        if header["position_size"]:
            coords = np.array(self._reals(code, 3 * natoms)).reshape(natoms, 3)
            for particle, position in zip(frame.particles, coords):
                particle.position = position.copy()
        if header["velocity_size"]:
            values = np.array(self._reals(code, 3 * natoms)).reshape(natoms, 3)
            for particle, velocity in zip(frame.particles, values):
                particle.attributes["velocity"] = velocity.copy()
        if header["force_size"]:
            values = np.array(self._reals(code, 3 * natoms)).reshape(natoms, 3)
            for particle, force in zip(frame.particles, values):
                particle.attributes["force"] = force.copy()

        self._current += 1
        return frame

    def _read_boundary(self, code: str) -> CuboidalBoundary:
        values = self._reals(code, 9)
        x, y, z = values[0:3], values[3:6], values[6:9]
        if any(v != 0.0 for v in (x[1], x[2], y[0], y[2], z[0], z[1])):
            _log.error("The unit cell is not a rectangle: X=%s Y=%s Z=%s", x, y, z)
        return CuboidalBoundary(lower=[0.0, 0.0, 0.0], upper=[x[0], y[1], z[2]])

    def rewind(self) -> None:
        self._current = 0
        self._file.seek(0)

    def is_eof(self) -> bool:
        return self._file.tell() >= self._file_size

    def __iter__(self) -> Iterator[Snapshot]:
        self.rewind()
        while (frame := self.read_frame()) is not None:
            yield frame

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "TRRReader":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _vector_or_zero(value) -> np.ndarray:
    if value is None:
        return np.zeros(3)
    try:
        vector = np.asarray(value, dtype=float).reshape(-1)
    except (TypeError, ValueError):
        return np.zeros(3)
    return vector if vector.shape == (3,) else np.zeros(3)


class TRRWriter:
    """Writes frames as double-precision TRR records."""

    def __init__(self, path):
        self._path = os.fspath(path)
        self._file = open(self._path, "wb")
        self._count = 0

    @property
    def file_name(self) -> str:
        return self._path

    @property
    def size(self) -> int:
        """Number of frames written."""
        return self._count

    def write_header(self, trajectory: Trajectory) -> None:
        """TRR has no file header; flush so the trajectory starts on a frame boundary."""
        self._file.flush()

    def write_footer(self, trajectory: Trajectory) -> None:
        """TRR has no footer; flush the frames written so far to disk."""
        self._file.flush()

    def write(self, trajectory: Trajectory) -> None:
        self.write_header(trajectory)
        for frame in trajectory:
            self.write_frame(frame)
        self.write_footer(trajectory)

    def write_frame(self, frame: Snapshot) -> None:
        particles = frame.particles
        natoms = len(particles)
        has_velocity = natoms > 0 and "velocity" in particles[0].attributes
        has_force = natoms > 0 and "force" in particles[0].attributes
        block = 3 * _DOUBLE_SIZE * natoms

        step = frame.attributes.get("step")
        sizes = (
            0,  # ir
            0,  # e
            9 * _DOUBLE_SIZE if frame.boundary is not None else 0,
            0,  # vir
            0,  # pres
            0,  # top
            0,  # sym
            block,
            block if has_velocity else 0,
            block if has_force else 0,
        )
        out = [
            struct.pack("<3i", MAGIC_NUMBER, _VERSION, len(_TITLE)),
            _TITLE,
            struct.pack("<10i", *sizes),
            struct.pack("<3i", natoms, int(step) if step is not None else 0, 0),
            struct.pack("<2d", 0.0, 0.0),
        ]

        if frame.boundary is not None:
            w = frame.boundary.width()
            out.append(
                struct.pack(
                    "<9d", w[0], 0.0, 0.0, 0.0, w[1], 0.0, 0.0, 0.0, w[2]
                )
            )

        def vectors(values) -> bytes:
            flat = [float(c) for v in values for c in v]
            return struct.pack(f"<{len(flat)}d", *flat)

        out.append(vectors(p.position for p in particles))
        if has_velocity:
            out.append(vectors(_vector_or_zero(p.attributes.get("velocity")) for p in particles))
        if has_force:
            out.append(vectors(_vector_or_zero(p.attributes.get("force")) for p in particles))

        self._file.write(b"".join(out))
        self._count += 1

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "TRRWriter":
        return self

    def __exit__(self, *args) -> None:
        self.close()