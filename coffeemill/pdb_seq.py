"""Printing the residue sequence of each chain in a PDB file."""

import logging

from coffeemill.frames import Particle, Snapshot
from coffeemill.pdb import PDBReader

_log = logging.getLogger(__name__)

AMINO_ACID_3TO1 = {
    "ALA": "A",
    "ARG": "R",
    "ASN": "N",
    "ASP": "D",
    "CYS": "C",
    "GLN": "Q",
    "GLU": "E",
    "GLY": "G",
    "HIS": "H",
    "ILE": "I",
    "LEU": "L",
    "LYS": "K",
    "MET": "M",
    "PHE": "F",
    "PRO": "P",
    "SER": "S",
    "THR": "T",
    "TRP": "W",
    "TYR": "Y",
    "VAL": "V",
}


def usage() -> str:
    """Return the usage text of ``mill pdb seq``."""
    return (
        "usage: mill pdb seq [parameters...]\n"
        "    $ mill pdb seq model.pdb\n"
        "      print sequences for each chain\n"
    )


def residue_one_letter(particle: Particle) -> str | None:
    """Return the one-letter code of a particle's residue, or None to skip it."""
    attrs = particle.attributes
    resname = str(attrs["res_name"]).replace(" ", "")

    if attrs["record"] == "HETATM":
        return None
    if len(resname) == 1:
        return resname
    if len(resname) == 2 and resname[0] == "D":
        return resname[-1]  # DNA: DA, DT, DC, DG
    if len(resname) == 3 and resname in AMINO_ACID_3TO1:
        return AMINO_ACID_3TO1[resname]
    _log.warning("pdb seq: unknown residue: %s", resname)
    return None


def chain_sequences(frame: Snapshot) -> list[tuple[str, str]]:
    """Return ``(chain_id, sequence)`` for each chain in order, skipping empty ones."""
    particles = frame.particles
    if not particles:
        return []

    first = particles[0]
    chain_id = first.attributes["chain_id"]
    residue_id = first.attributes["res_seq"]
    sequence = residue_one_letter(first) or ""

    result = []
    for particle in particles:
        attrs = particle.attributes
        if chain_id != attrs["chain_id"]:
            if sequence:
                result.append((chain_id, sequence))
            sequence = ""
            chain_id = attrs["chain_id"]

        if residue_id != attrs["res_seq"]:
            letter = residue_one_letter(particle)
            if letter is not None:
                sequence += letter
            residue_id = attrs["res_seq"]
    if sequence:
        result.append((chain_id, sequence))
    return result


def mode_pdb_seq(args) -> int:
    """Run ``mill pdb seq`` with ``args`` (the PDB file first); return an exit code."""
    args = list(args)
    if not args:
        _log.error("error: mill pdb seq: too few arguments")
        _log.error(usage())
        return 1

    pdbname = args[0]
    if pdbname == "help":
        print(usage())
        return 0

    with PDBReader(pdbname) as reader:
        reader.read_header()
        frame = reader.read_frame()
    if frame is None:
        _log.error("mill pdb seq: no atoms found in %s", pdbname)
        return 1

    for chain_id, sequence in chain_sequences(frame):
        print(f"chain {chain_id}: {sequence}")
    return 0