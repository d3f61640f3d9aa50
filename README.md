# coffeemill

Command-line tools and a small library for molecular dynamics trajectories:
reading and writing PDB and TRR files, least-squares superposition of
structures, RMSD time series, principal component analysis and the residue
sequence of each chain in a PDB file.

## Installation

```
pip install .
```

The only runtime dependency is `numpy`. Tests use `pytest`
(`pip install .[test]`).

## Command line

The package installs a `mill` command.

```
mill [--debug|--quiet] [mode] [parameters...]
```

`--debug` shows debug messages, `--quiet` shows only warnings and errors.
The modes are `calc`, `pdb` and `help`. Every command returns exit status 0
on success and 1 on an error.

Trajectory and structure files are chosen by extension: `.pdb` and `.trr`
are supported; any other extension is reported as an unknown format.

### Help

```
mill help
mill help pdb
mill help calc
mill pdb help seq
mill calc help rmsd
mill calc help pca
```

### Chain sequences

```
mill pdb seq model.pdb
```

Reads the first model of `model.pdb` and prints one line per chain, such as
`chain A: MKV...`. Residues are converted to one-letter codes: one-letter
names are kept, two-letter names starting with `D` (DNA) give their last
letter, and the twenty standard three-letter amino acid names are mapped to
their codes. `HETATM` records and unknown residues are skipped.

### RMSD

```
mill calc rmsd traj.pdb ref.pdb --output=rmsd.dat
```

Computes the RMSD of every frame of the trajectory against the first frame of
the reference file and writes a table headed `#t rmsd`, one `step value` line
per frame. Options:

- `--align=(true|false)`: superimpose each frame onto the reference by
  minimising RMSD first (default `true`).
- `--output=<file>`: output file (default `mill_rmsd.dat`).
- `--only=<begin>:<end>`: use only the trajectory particles in `[begin, end)`.
- `--ref-only=<begin>:<end>`: use only the reference particles in `[begin, end)`.

A range that exceeds the size of a snapshot is an error.

### Principal component analysis

```
mill calc pca traj.pdb --top=3 --scaled=false
```

Options: `--top=N`, `--top-contribution=<per cent>`, `--output=<basename>`
(default: the trajectory path without its extension) and
`--scaled=(true|false)`. Other `--` arguments are reported and ignored.

Without `--top` or `--top-contribution`, at least three components are kept,
or more if that many are needed to reach 95 % accumulated contribution. With
both, the larger of the two counts is used.

The settings may also come from a TOML file, whose values take precedence over
the command-line options:

```toml
input            = "traj.pdb"
output_basename  = "pca"
top              = 10
top_contribution = 95
scaled           = false
use              = [0, 2, 5, {first = 10, last = 20}]
```

```
mill calc pca input.toml
```

`use` selects particle indices; `{first, last}` is a range with `last`
excluded. By default every particle is used.

The command writes:

- `<basename>_PCA.dat`: a header with the component names and their
  contribution rates, then the projection of each frame onto the kept
  components (divided by the eigenvalue when scaled).
- `<basename>_PC<n><ext>`: for each component, up to 1000 frames moving the
  selected particles along it across the range of its projections, the other
  particles held at their mean positions.
- `<basename>_EigenVectors<ext>`: one frame per component holding its
  eigenvector as positions.

`<ext>` is the extension of the input trajectory.

## Library use

```python
from coffeemill.formats import open_reader
from coffeemill.bestfit import BestFit
from coffeemill.calc_rmsd import rmsd

with open_reader("traj.pdb") as reader:
    trajectory = reader.read()

reference = trajectory[0].positions()
fitter = BestFit(reference)
for frame in trajectory:
    fitted = fitter.fit(frame.positions())
    print(rmsd(reference, fitted))
```

Main pieces:

- `coffeemill.frames`: `Particle`, `Snapshot`, `Trajectory`, `CuboidalBoundary`.
- `coffeemill.pdb`: `PDBReader`, `PDBWriter` (`MODEL`/`ATOM`/`TER`/`ENDMDL`
  records, `CRYST1` from a `boundary_width` attribute, `CONECT` from bonds).
- `coffeemill.trr`: `TRRReader` (single or double precision), `TRRWriter`
  (double precision, with box, velocities and forces when present).
- `coffeemill.formats`: `open_reader`, `open_writer`, `extension_of`, `base_name_of`.
- `coffeemill.bestfit.BestFit`: quaternion-based superposition.
- `coffeemill.eigen.JacobiEigenSolver`: eigenpairs of small symmetric matrices.
- `coffeemill.vector` and `coffeemill.matrix`: geometric helpers (angles,
  dihedrals, 3x3 determinant and inverse).
- `coffeemill.calc_rmsd.rmsd_series` and
  `coffeemill.calc_pca.principal_components` for use without the command line.

## What it does not do

- Only PDB and TRR files can be read or written; other trajectory formats
  (such as DCD or XYZ) are not supported.
- There are no modes for inspecting trajectory file headers, editing or
  converting trajectories, handling PSF or native-contact files, or free-energy
  reweighting; `mill` offers only `calc rmsd`, `calc pca`, `pdb seq` and help.