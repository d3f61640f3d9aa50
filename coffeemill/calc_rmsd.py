"""RMSD of every frame of a trajectory against a reference structure."""

import logging
import math

import numpy as np

from coffeemill.bestfit import BestFit
from coffeemill.formats import open_reader
from coffeemill.frames import Snapshot
from coffeemill.options import pop_argument, pop_range

_log = logging.getLogger(__name__)

_DEFAULT_OUTPUT = "mill_rmsd.dat"


class RangeError(IndexError):
    """Raised when a particle range exceeds the size of a snapshot."""


def usage() -> str:
    """Return the usage text of ``mill calc rmsd``."""
    return (
        "usage: mill calc rmsd [traj file] [ref file]\n"
        "optinal args:\n"
        "    --align=(true|false) [by default, true]\n"
        "        If true (default), perform alignment by minimizing RMSD.\n"
        "        otherwise, it calculates RMSD without minimization.\n"
        "    --output=<filename>  [by default, \"mill_rmsd.dat\"]\n"
        "        output data file.\n"
        "    --only=<begin>:<end>\n"
        "    --ref-only=<begin>:<end>\n"
        "        use [begin, end) region only.\n"
    )


def rmsd(lhs, rhs) -> float:
    """Return the root mean square deviation between two sets of positions."""
    a = np.asarray(lhs, dtype=float).reshape(-1, 3)
    b = np.asarray(rhs, dtype=float).reshape(-1, 3)
    if len(a) != len(b):
        raise ValueError(f"mill calc rmsd: size differs ({len(a)} and {len(b)})")
    if len(a) == 0:
        return math.nan
    return math.sqrt(float(np.sum((a - b) ** 2)) / len(a))


def select_positions(
    frame: Snapshot, selection: tuple[int, int] | None, option_name: str = "--only"
) -> np.ndarray:
    """Return the positions of ``frame``, limited to ``[begin, end)`` if given."""
    positions = frame.positions()
    if selection is None:
        return positions
    first, last = selection
    size = len(positions)
    if size <= first or size < last:
        raise RangeError(
            f"The range specified by {option_name} ({first}, {last}) "
            f"exceeds the size of snapshot ({size})."
        )
    return positions[first:last]


def _reference_positions(path, ref_only) -> np.ndarray:
    _log.info("mill calc rmsd: reading %s as a reference file...", path)
    with open_reader(path) as reader:
        reader.read_header()
        first_frame = reader.read_frame()
    if first_frame is None:
        reference = np.empty((0, 3))
    else:
        reference = select_positions(first_frame, ref_only, "--ref-only")
    _log.info(
        "mill calc rmsd: done. reference structure has %d particles.", len(reference)
    )
    return reference


def rmsd_series(
    trajectory_path, reference_path, align: bool = True, only=None, ref_only=None
) -> list[float]:
    """Return the RMSD of each trajectory frame against the reference's first frame."""
    reference = _reference_positions(reference_path, ref_only)
    bestfit = BestFit(reference) if align else None

    values = []
    with open_reader(trajectory_path) as reader:
        for frame in reader:
            snapshot = select_positions(frame, only, "--only")
            if bestfit is not None:
                snapshot = bestfit.fit(snapshot)
            values.append(rmsd(reference, snapshot))
    return values


def mode_calc_rmsd(args) -> int:
    """Run ``mill calc rmsd`` with ``args`` (trajectory first); return an exit code."""
    args = list(args)
    align = pop_argument(args, "align", bool)
    do_align = True if align is None else align
    output = pop_argument(args, "output", str) or _DEFAULT_OUTPUT
    only = pop_range(args, "only")
    ref_only = pop_range(args, "ref-only")

    if not args:
        _log.error("mill calc rmsd: too few arguments.")
        _log.error(usage())
        return 1

    _log.debug("only     = %s", only)
    _log.debug("ref_only = %s", ref_only)

    fname = args[0]
    if fname == "help":
        print(usage())
        return 0

    if len(fname) < 5:
        _log.error("mill calc rmsd: unknown file format: %s", fname)
        _log.error(usage())
        return 1

    if len(args) < 2:
        _log.error("mill calc rmsd: reference file is not given.")
        _log.error(usage())
        return 1

    values = rmsd_series(fname, args[1], do_align, only, ref_only)
    with open(output, "w", encoding="utf-8") as out:
        out.write("#t rmsd\n")
        out.writelines(f"{step} {value:g}\n" for step, value in enumerate(values))
    return 0