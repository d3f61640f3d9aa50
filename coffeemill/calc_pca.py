"""Principal component analysis of particle motion along a trajectory."""

import copy
import logging
import os
import tomllib
from dataclasses import dataclass

import numpy as np

from coffeemill.formats import base_name_of, extension_of, open_reader, open_writer
from coffeemill.frames import Snapshot, Trajectory
from coffeemill.options import pop_argument

_log = logging.getLogger(__name__)

_DEFAULT_COMPONENTS = 3
_DEFAULT_CONTRIBUTION = 95.0
_MAX_MOVEMENT_FRAMES = 1000


def usage() -> str:
    """Return the usage text of ``mill calc pca``."""
    return (
        "usage: mill calc pca {trajectory} [--top=(3 by default)] [--top-contribution=(95% by default)] "
        "[--output=(\"{base name of trajectory}_pca.dat\" by default)] [--scaled=(true|false)]\n"
        "         determines principal component from traj file and outputs trajectory along the axes.\n"
        "         --top=N specifies the number of component will be written out.\n"
        "         --top-contribution=% specifies the number of component via the accumulated contribution rate.\n"
        "         if you specify `--top=3 --top-contribution=95` and it would be found that top 5 components are\n"
        "         needed to achieve 95% contribution, 5 components are written.\n"
        "         if --scaled=true, the output trajectory along PC axes are scaled by the corresponding variance.\n"
        "     $ mill calc pca {input.toml}\n"
        "         determines principal component using customized input.\n"
        "         ```toml\n"
        "         input  = \"traj.dcd\"\n"
        "         output_basename = \"pca.dat\"\n"
        "         # (optional) how many components are reported.\n"
        "         # by default, 3.\n"
        "         top    = 10\n"
        "         # (optional) instead of `top`, output top N% contributing PCs.\n"
        "         top_contribution = 95 # %\n"
        "         # (optional) indices of particles to be used.\n"
        "         # by default, all the particles are used.\n"
        "         # {first, last} specifies the range. last is not included.\n"
        "         use    = [0, 2, 5, {first=10, last=20}]\n"
        "         ```"
    )


@dataclass
class PCASettings:
    """What to analyse and where to write the results."""

    input: str
    output_basename: str
    top: int | None = None
    top_contribution: float | None = None
    scaled: bool = False
    particles: list[int] | None = None  # None selects every particle


@dataclass
class PCAResult:
    """Principal components, sorted by decreasing variance."""

    means: np.ndarray  # (D,)
    eigenvalues: np.ndarray  # (k,)
    eigenvectors: np.ndarray  # (k, D), one component per row
    contribution_rates: np.ndarray  # (D,), per cent, for every component
    projections: np.ndarray  # (frames, k)

    @property
    def component_ranges(self) -> list[tuple[float, float]]:
        """The (lowest, highest) projection along each kept component."""
        lows = self.projections.min(axis=0)
        highs = self.projections.max(axis=0)
        return [(float(lo), float(hi)) for lo, hi in zip(lows, highs)]


def _expect(value, kinds, key: str, path):
    if isinstance(value, bool) and bool not in kinds:
        raise ValueError(f"{path}: '{key}' has an invalid type")
    if not isinstance(value, kinds):
        raise ValueError(f"{path}: '{key}' has an invalid type")
    return value


def _particles_from_use(entries, path) -> list[int]:
    particles: list[int] = []
    for entry in entries:
        if isinstance(entry, int) and not isinstance(entry, bool):
            particles.append(entry)
        elif isinstance(entry, dict):
            try:
                first, last = entry["first"], entry["last"]
            except KeyError as error:
                raise ValueError(f"{path}: a range in 'use' needs 'first' and 'last'") from error
            particles.extend(range(_expect(first, (int,), "first", path), _expect(last, (int,), "last", path)))
        else:
            raise ValueError(f"{path}: 'use' holds an entry that is neither an index nor a range")
    return particles


def load_settings(path, top=None, top_contribution=None, output=None, scaled=None) -> PCASettings:
    """Build the settings from a trajectory path or a TOML input file.

    Values in a TOML file take precedence over the given ones.
    """
    text = os.fspath(path)
    particles = None
    if extension_of(text) == ".toml":
        with open(text, "rb") as stream:
            data = tomllib.load(stream)
        if "input" not in data:
            raise ValueError(f"{text}: 'input' is required")
        trajfile = _expect(data["input"], (str,), "input", text)
        if "top" in data:
            top = _expect(data["top"], (int,), "top", text)
        for key in ("top_contribution", "top-contribution"):
            if key in data:
                top_contribution = float(_expect(data[key], (int, float), key, text))
        if "scaled" in data:
            scaled = _expect(data["scaled"], (bool,), "scaled", text)
        if "output_basename" in data:
            output = _expect(data["output_basename"], (str,), "output_basename", text)
        if "use" in data:
            particles = _particles_from_use(_expect(data["use"], (list,), "use", text), text)
    else:
        trajfile = text

    return PCASettings(
        input=trajfile,
        output_basename=output if output is not None else base_name_of(trajfile),
        top=top,
        top_contribution=top_contribution,
        scaled=bool(scaled),
        particles=particles,
    )


def _as_samples(samples) -> np.ndarray:
    data = np.asarray(samples, dtype=float)
    if data.ndim != 2 or data.shape[0] == 0 or data.shape[1] == 0:
        raise ValueError(f"expected a non-empty (frames, coordinates) array, got shape {data.shape}")
    return data


def covariance_matrix(samples) -> np.ndarray:
    """Return the covariance of the coordinates over frames, normalised by 1/frames."""
    data = _as_samples(samples)
    centered = data - data.mean(axis=0)
    cov = centered.T @ centered / len(data)
    return (cov + cov.T) * 0.5


def count_components(contribution_rates, top=None, top_contribution=None) -> int:
    """Return how many components to keep, given rates in per cent in decreasing order."""
    threshold = _DEFAULT_CONTRIBUTION if top_contribution is None else top_contribution
    top_contributions = 0
    accumulated = 0.0
    for rate in contribution_rates:
        if accumulated <= threshold:
            top_contributions += 1
        accumulated += float(rate)

    if top is not None and top_contribution is not None:
        return max(top_contributions, top)
    if top_contribution is not None:
        return top_contributions
    if top is not None:
        return top
    return max(_DEFAULT_COMPONENTS, top_contributions)


def principal_components(samples, top=None, top_contribution=None, scaled=False) -> PCAResult:
    """Diagonalise the covariance of ``samples`` (frames x coordinates).

    Each eigenvector is oriented so that the last frame projects no lower
    than the first one.
    """
    data = _as_samples(samples)
    means = data.mean(axis=0)
    centered = data - means

    values, vectors = np.linalg.eigh(covariance_matrix(data))
    order = np.argsort(-values, kind="stable")
    values = values[order]
    vectors = vectors[:, order].T.copy()

    contribution_rates = values / (values.sum() * 0.01)
    count = min(count_components(contribution_rates, top, top_contribution), len(values))
    values = values[:count]
    vectors = vectors[:count]

    for vector in vectors:
        if vector @ centered[-1] < vector @ centered[0]:
            vector *= -1.0

    projections = centered @ vectors.T
    if scaled:
        projections = projections / values

    return PCAResult(
        means=means,
        eigenvalues=values,
        eigenvectors=vectors,
        contribution_rates=contribution_rates,
        projections=projections,
    )


def _write_projections(path: str, result: PCAResult) -> None:
    count = len(result.eigenvalues)
    with open(path, "w", encoding="utf-8") as out:
        out.write("#" + "".join(f" PC{i}" for i in range(count)) + "\n")
        out.write("#" + "".join(f" {rate:.5f}%" for rate in result.contribution_rates[:count]) + "\n")
        for row in result.projections:
            out.write("".join(f"{value:.5f} " for value in row) + "\n")


def _with_positions(base: Snapshot, particles: list[int], values: np.ndarray) -> Snapshot:
    frame = copy.deepcopy(base)
    for index, position in zip(particles, values.reshape(-1, 3)):
        frame.particles[index].position = position.copy()
    return frame


def _write_trajectory(path: str, frames: list[Snapshot], attributes) -> None:
    with open_writer(path) as writer:
        writer.write(Trajectory(snapshots=frames, attributes=dict(attributes)))


def mode_calc_pca(args) -> int:
    """Run ``mill calc pca`` with ``args`` (input file first); return an exit code."""
    args = list(args)
    top = pop_argument(args, "top", int)
    top_contribution = pop_argument(args, "top-contribution", float)
    output = pop_argument(args, "output", str)
    scaled = pop_argument(args, "scaled", bool)

    if not args:
        _log.error("mill calc pca: too few arguments.")
        _log.error(usage())
        return 1

    for arg in args:
        if arg.startswith("--"):
            _log.error("unknown argument %s found. It will be ignored. please check it.", arg)

    fname = args[0]
    if fname == "help":
        print(usage())
        return 0

    settings = load_settings(fname, top, top_contribution, output, scaled)
    trajfile = settings.input
    basename = settings.output_basename

    with open_reader(trajfile) as reader:
        traj = reader.read()
    if len(traj) == 0:
        _log.error("mill calc pca: %s has no snapshots.", trajfile)
        return 1

    particles = settings.particles
    if particles is None:
        particles = list(range(len(traj[0].particles)))
    if not particles:
        _log.error("mill calc pca: no particles are selected.")
        return 1

    _log.info("It will use %d particles in total.", len(particles))
    if settings.top is not None:
        _log.info("It will output %d components", settings.top)
    if settings.top_contribution is not None:
        _log.info("It will output top %g%% contributing components.", settings.top_contribution)
    _log.info("The results will be written in %s", basename)
    _log.info("trajectory has %d snapshots.", len(traj))
    if settings.scaled:
        _log.info("The output trajectory will be scaled by the corresponding variance.")
    else:
        _log.info("The output trajectory will not be scaled and the eigenvector is regularized.")

    samples = np.array([frame.positions()[particles].reshape(-1) for frame in traj])
    result = principal_components(samples, settings.top, settings.top_contribution, settings.scaled)
    count = len(result.eigenvalues)
    _log.info(
        "top %d components (%g%% contribution) will be written",
        count,
        float(np.sum(result.contribution_rates[:count])),
    )

    table = basename + "_PCA.dat"
    _write_projections(table, result)
    _log.info("trajectory along PCs are written in %s", table)

    # freeze the structure at the mean position to see the motion of the selected particles
    mean_positions = np.mean([frame.positions() for frame in traj], axis=0)
    init = copy.deepcopy(traj[0])
    for particle, position in zip(init.particles, mean_positions):
        particle.position = position.copy()

    extension = extension_of(trajfile)
    length = min(_MAX_MOVEMENT_FRAMES, len(traj))
    for index, (vector, (lower, upper)) in enumerate(
        zip(result.eigenvectors, result.component_ranges), start=1
    ):
        dx = (upper - lower) / length
        frames = [
            _with_positions(init, particles, result.means + vector * (lower + dx * t))
            for t in range(length)
        ]
        name = f"{basename}_PC{index}{extension}"
        _write_trajectory(name, frames, traj.attributes)
        _log.info(
            "structure change along PC%d (%g%% contribution) is written in %s",
            index,
            float(result.contribution_rates[index - 1]),
            name,
        )

    cleared = copy.deepcopy(init)
    for particle in cleared.particles:
        particle.position = np.zeros(3)
    vector_frames = [_with_positions(cleared, particles, vector) for vector in result.eigenvectors]
    _write_trajectory(f"{basename}_EigenVectors{extension}", vector_frames, traj.attributes)
    return 0