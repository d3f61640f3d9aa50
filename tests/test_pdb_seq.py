import pytest

from coffeemill.frames import Particle, Snapshot, Trajectory
from coffeemill.pdb import PDBWriter
from coffeemill.pdb_seq import chain_sequences, mode_pdb_seq, residue_one_letter, usage


def _particle(chain, res_seq, res_name, record="ATOM  "):
    return Particle(
        position=[0.0, 0.0, 0.0],
        attributes={
            "record": record,
            "chain_id": chain,
            "res_seq": res_seq,
            "res_name": res_name,
        },
    )


def test_three_letter_code():
    assert residue_one_letter(_particle("A", 1, "GLY")) == "G"
    assert residue_one_letter(_particle("A", 1, "TRP")) == "W"


def test_dna_two_letter_code():
    assert residue_one_letter(_particle("A", 1, " DT")) == "T"


def test_single_letter_code():
    assert residue_one_letter(_particle("A", 1, "  U")) == "U"


def test_hetero_atom_is_skipped():
    assert residue_one_letter(_particle("A", 1, "GLY", record="HETATM")) is None


def test_unknown_residue_is_skipped():
    assert residue_one_letter(_particle("A", 1, "XYZ")) is None


def test_chain_sequences_groups_by_chain_and_residue():
    frame = Snapshot(
        particles=[
            _particle("A", 1, "GLY"),
            _particle("A", 1, "GLY"),
            _particle("A", 2, "TRP"),
            _particle("B", 5, " DT"),
            _particle("B", 6, "  U"),
        ]
    )
    assert chain_sequences(frame) == [("A", "GW"), ("B", "TU")]


def test_chain_sequences_drops_empty_chain():
    frame = Snapshot(
        particles=[
            _particle("A", 1, "GLY"),
            _particle("B", 2, "HOH", record="HETATM"),
        ]
    )
    assert chain_sequences(frame) == [("A", "G")]


def test_chain_sequences_empty_frame():
    assert chain_sequences(Snapshot()) == []


def test_mode_prints_sequences(tmp_path, capsys):
    path = tmp_path / "model.pdb"
    particles = [
        _particle("A", 1, "GLY"),
        _particle("A", 2, "TRP"),
        _particle("B", 1, "GLY"),
    ]
    with PDBWriter(path) as writer:
        writer.write(Trajectory(snapshots=[Snapshot(particles=particles)]))

    assert mode_pdb_seq([str(path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["chain A: GW", "chain B: G"]


def test_mode_help(capsys):
    assert mode_pdb_seq(["help"]) == 0
    assert usage() in capsys.readouterr().out


def test_mode_too_few_arguments():
    assert mode_pdb_seq([]) == 1


def test_mode_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        mode_pdb_seq([str(tmp_path / "absent.pdb")])