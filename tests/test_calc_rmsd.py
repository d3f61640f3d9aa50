import math

import numpy as np
import pytest

from coffeemill.calc_rmsd import (
    RangeError,
    mode_calc_rmsd,
    rmsd,
    rmsd_series,
    select_positions,
    usage,
)
from coffeemill.frames import Particle, Snapshot, Trajectory
from coffeemill.pdb import PDBWriter

REFERENCE = np.array(
    [
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 2.0, 0.0],
        [0.0, 0.0, 3.0],
        [1.0, 1.0, 1.0],
    ]
)


def _rotated(points):
    # 90 degrees about z, then shifted along x
    rotated = np.column_stack([-points[:, 1], points[:, 0], points[:, 2]])
    return rotated + np.array([10.0, 0.0, 0.0])


def _snapshot(points):
    return Snapshot(particles=[Particle(position=p) for p in points])


def _write_pdb(path, frames):
    with PDBWriter(path) as writer:
        writer.write(Trajectory(snapshots=[_snapshot(f) for f in frames]))
    return path


@pytest.fixture
def files(tmp_path):
    ref = _write_pdb(tmp_path / "ref.pdb", [REFERENCE])
    traj = _write_pdb(tmp_path / "traj.pdb", [REFERENCE, _rotated(REFERENCE)])
    return traj, ref


def test_rmsd_identical_is_zero():
    assert rmsd(REFERENCE, REFERENCE) == 0.0


def test_rmsd_uniform_shift():
    shifted = REFERENCE + np.array([3.0, 4.0, 0.0])
    assert rmsd(REFERENCE, shifted) == pytest.approx(5.0)


def test_rmsd_symmetric():
    other = _rotated(REFERENCE)
    assert rmsd(REFERENCE, other) == pytest.approx(rmsd(other, REFERENCE))


def test_rmsd_size_mismatch():
    with pytest.raises(ValueError):
        rmsd(REFERENCE, REFERENCE[:2])


def test_select_positions_all_and_range():
    frame = _snapshot(REFERENCE)
    np.testing.assert_allclose(select_positions(frame, None), REFERENCE)
    np.testing.assert_allclose(select_positions(frame, (1, 4)), REFERENCE[1:4])


@pytest.mark.parametrize("selection", [(5, 5), (0, 6)])
def test_select_positions_out_of_range(selection):
    with pytest.raises(RangeError, match="--ref-only"):
        select_positions(_snapshot(REFERENCE), selection, "--ref-only")


def test_rmsd_series_aligned_is_zero(files):
    traj, ref = files
    values = rmsd_series(traj, ref, align=True)
    assert len(values) == 2
    assert values == pytest.approx([0.0, 0.0], abs=1e-6)


def test_rmsd_series_unaligned_matches_direct(files):
    traj, ref = files
    values = rmsd_series(traj, ref, align=False)
    assert values[0] == pytest.approx(0.0, abs=1e-9)
    assert values[1] == pytest.approx(rmsd(REFERENCE, _rotated(REFERENCE)), abs=1e-6)


def test_rmsd_series_with_ranges(files):
    traj, ref = files
    values = rmsd_series(traj, ref, align=False, only=(0, 3), ref_only=(0, 3))
    assert values[1] == pytest.approx(
        rmsd(REFERENCE[:3], _rotated(REFERENCE)[:3]), abs=1e-6
    )


def test_rmsd_series_range_too_large(files):
    traj, ref = files
    with pytest.raises(RangeError):
        rmsd_series(traj, ref, align=False, only=(0, 10), ref_only=(0, 10))


def test_mode_writes_output(files, tmp_path):
    traj, ref = files
    out = tmp_path / "out.dat"
    assert mode_calc_rmsd([str(traj), str(ref), f"--output={out}", "--align=false"]) == 0
    lines = out.read_text().splitlines()
    assert lines[0] == "#t rmsd"
    assert len(lines) == 3
    steps = [line.split()[0] for line in lines[1:]]
    assert steps == ["0", "1"]
    second = float(lines[2].split()[1])
    expected = rmsd(REFERENCE, _rotated(REFERENCE))
    assert math.isclose(second, expected, rel_tol=1e-4)


def test_mode_help(capsys):
    assert mode_calc_rmsd(["help"]) == 0
    assert usage() in capsys.readouterr().out


def test_mode_too_few_arguments():
    assert mode_calc_rmsd([]) == 1


def test_mode_short_file_name():
    assert mode_calc_rmsd(["a.b", "ref.pdb"]) == 1


def test_mode_missing_reference(files):
    traj, _ = files
    assert mode_calc_rmsd([str(traj)]) == 1