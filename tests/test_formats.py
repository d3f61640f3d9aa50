import numpy as np
import pytest

from coffeemill.formats import (
    UnknownFormatError,
    base_name_of,
    extension_of,
    open_reader,
    open_writer,
)
from coffeemill.frames import Particle, Snapshot, Trajectory


def test_extension_of():
    assert extension_of("traj.dcd") == ".dcd"
    assert extension_of("dir.v1/traj") == ""
    assert extension_of("a/b/model.tar.pdb") == ".pdb"


def test_base_name_of_strips_extension():
    assert base_name_of("dir/traj.dcd") == "dir/traj"
    assert base_name_of("noext") == "noext"
    path = "x/y/z.trr"
    assert base_name_of(path) + extension_of(path) == path


def _trajectory():
    particles = [
        Particle(position=[1.0, 2.0, 3.0]),
        Particle(position=[-4.5, 0.25, 6.0]),
    ]
    return Trajectory(snapshots=[Snapshot(particles=particles)])


@pytest.mark.parametrize("name", ["out.pdb", "out.trr"])
def test_writer_and_reader_round_trip(tmp_path, name):
    path = tmp_path / name
    traj = _trajectory()
    with open_writer(path) as writer:
        writer.write(traj)
    with open_reader(path) as reader:
        loaded = reader.read()
    assert len(loaded) == 1
    assert np.allclose(loaded[0].positions(), traj[0].positions(), atol=1e-3)


def test_unknown_extension_reader(tmp_path):
    path = tmp_path / "traj.xyz"
    path.write_text("")
    with pytest.raises(UnknownFormatError):
        open_reader(path)


def test_unknown_extension_writer(tmp_path):
    with pytest.raises(UnknownFormatError):
        open_writer(tmp_path / "traj.dcd")
    assert not (tmp_path / "traj.dcd").exists()