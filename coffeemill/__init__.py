"""Molecular dynamics trajectory tools: PDB and TRR I/O, structural fitting, RMSD, PCA and chain sequences."""

__version__ = "0.1.0"