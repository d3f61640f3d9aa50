"""Reading and writing Protein Data Bank (PDB) coordinate files."""

import os
from collections.abc import Iterator
from typing import Any

from coffeemill.frames import Particle, Snapshot, Trajectory

_ATOM_RECORDS = ("ATOM  ", "HETATM")
_FIRST_RECORDS = ("MODEL ", "ATOM  ", "HETATM")
_LINE_LIMIT = 81  # 80 columns and a line feed


class PDBFormatError(ValueError):
    """Raised when an ATOM or HETATM line cannot be parsed."""


def _parse_atom(line: str) -> Particle:
    header = line[0:6]
    try:
        particle = Particle(
            position=[float(line[30:38]), float(line[38:46]), float(line[46:54])],
            attributes={
                "record": header,
                "serial": int(line[6:11]),
                "name": line[12:16],
                "alt_loc": line[16:17],
                "res_name": line[17:20],
                "chain_id": line[21:22],
                "res_seq": int(line[22:26]),
                "i_code": line[26:27],
            },
        )
        attrs = particle.attributes
        attrs["occupancy"] = float(line[54:60]) if len(line) >= 60 else 0.0
        attrs["temp_factor"] = float(line[60:66]) if len(line) >= 66 else 99.9
    except ValueError as error:
        raise PDBFormatError(f"invalid {header.strip()} line: {line!r}") from error
    attrs["element"] = line[76:78] if len(line) >= 78 else "  "
    attrs["charge"] = line[78:80] if len(line) >= 80 else "  "
    return particle


class PDBReader:
    """Reads models from a PDB file one at a time."""

    def __init__(self, path):
        self._path = os.fspath(path)
        self._file = open(self._path, encoding="latin-1")
        self._current = 0

    @property
    def file_name(self) -> str:
        return self._path

    @property
    def current(self) -> int:
        """Number of frames read since the last rewind."""
        return self._current

    def read_header(self) -> dict[str, Any]:
        """Skip to the first MODEL, ATOM or HETATM line and return no attributes."""
        while True:
            checkpoint = self._file.tell()
            raw = self._file.readline()
            if not raw:
                break
            if raw.startswith(_FIRST_RECORDS):
                self._file.seek(checkpoint)
                break
        return {}

    def read(self) -> Trajectory:
        """Read the whole file from the beginning."""
        self.rewind()
        traj = Trajectory(attributes=self.read_header())
        while not self.is_eof():
            frame = self.read_frame()
            if frame is None:
                break
            traj.snapshots.append(frame)
        return traj

    def read_frame(self, index: int | None = None) -> Snapshot | None:
        """Read the next model, or the model at ``index`` counted from the start.

        Returns None when no such model exists.
        """
        if index is None:
            return self._read_next()
        self.rewind()
        for _ in range(index):
            if self._read_next() is None:
                return None
        return self._read_next()

    def _read_next(self) -> Snapshot | None:
        if self.is_eof():
            return None
        particles = []
        while True:
            raw = self._file.readline()
            if not raw:
                break
            line = raw.rstrip("\r\n")
            if line[0:6] in _ATOM_RECORDS:
                particles.append(_parse_atom(line))
            if line.startswith("END"):
                break
        if not particles:
            return None
        self._current += 1
        return Snapshot(particles=particles)

    def rewind(self) -> None:
        self._current = 0
        self._file.seek(0)

    def is_eof(self) -> bool:
        position = self._file.tell()
        at_end = self._file.read(1) == ""
        self._file.seek(position)
        return at_end

    def __iter__(self) -> Iterator[Snapshot]:
        self.rewind()
        self.read_header()
        while (frame := self.read_frame()) is not None:
            yield frame

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "PDBReader":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _text(attrs: dict[str, Any], key: str, default: str) -> str:
    value = attrs.get(key)
    return value if isinstance(value, str) else default


def _integer(attrs: dict[str, Any], key: str, default: int) -> int:
    value = attrs.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


def _floating(attrs: dict[str, Any], key: str, default: float) -> float:
    value = attrs.get(key)
    return value if isinstance(value, float) else default


def _first_char(text: str) -> str:
    return text[:1] or " "


class PDBWriter:
    """Writes snapshots as PDB models."""

    def __init__(self, path):
        self._path = os.fspath(path)
        self._file = open(self._path, "w", encoding="latin-1")
        self._count = 0

    @property
    def file_name(self) -> str:
        return self._path

    @property
    def size(self) -> int:
        """Number of frames written."""
        return self._count

    def write_header(self, trajectory: Trajectory) -> None:
        """Write a CRYST1 record when the trajectory carries a box width."""
        width = trajectory.attributes.get("boundary_width")
        if width is None:
            return
        w = [float(v) for v in width]
        line = "CRYST1%9.3f%9.3f%9.3f%7.2f%7.2f%7.2f%-10s%4d\n" % (
            w[0], w[1], w[2], 90.0, 90.0, 90.0, "P 1", 1,
        )
        self._file.write(line[:_LINE_LIMIT])

    def write_frame(self, frame: Snapshot) -> None:
        """Write one MODEL ... ENDMDL block."""
        self._count += 1
        self._file.write("MODEL     %4d\n" % self._count)

        chain = None
        for serial, particle in enumerate(frame.particles, start=1):
            attrs = particle.attributes
            atom = _text(attrs, "name", " C  ")
            current_chain = _first_char(_text(attrs, "chain_id", "A"))
            x, y, z = (min(float(v), 999.999) for v in particle.position)
            line = (
                "%-6s%5d %4s%c%3s %c%4d%c   %8.3f%8.3f%8.3f%6.2f%6.2f          %2s%2s\n"
                % (
                    _text(attrs, "record", "ATOM  "),
                    _integer(attrs, "serial", serial),
                    atom,
                    _first_char(_text(attrs, "alt_loc", " ")),
                    _text(attrs, "res_name", "XXX"),
                    current_chain,
                    _integer(attrs, "res_seq", serial),
                    _first_char(_text(attrs, "i_code", " ")),
                    x, y, z,
                    _floating(attrs, "occupancy", 0.0),
                    _floating(attrs, "temp_factor", 999.9),
                    _text(attrs, "element", atom[:2]),
                    _text(attrs, "charge", "  "),
                )
            )
            self._file.write(line[:_LINE_LIMIT])

            if chain is not None and chain != current_chain:
                self._file.write("TER\n")
            chain = current_chain
        self._file.write("TER\n")
        self._file.write("ENDMDL\n")

    def write_footer(self, trajectory: Trajectory) -> None:
        """Write CONECT records for the bonds of the first snapshot."""
        if len(trajectory) == 0:
            return
        first = trajectory[0]
        if not first.bonds:
            return
        for i in range(len(first.particles)):
            bound = first.bonds.get(i, [])
            for start in range(0, len(bound), 4):
                chunk = bound[start:start + 4]
                self._file.write("CONECT%5d" % i + "".join("%5d" % b for b in chunk) + "\n")

    def write(self, trajectory: Trajectory) -> None:
        self.write_header(trajectory)
        for frame in trajectory:
            self.write_frame(frame)
        self.write_footer(trajectory)

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "PDBWriter":
        return self

    def __exit__(self, *args) -> None:
        self.close()