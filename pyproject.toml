[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "coffeemill"
version = "0.1.0"
description = "Molecular dynamics trajectory tools: PDB and TRR I/O, structural fitting, RMSD, PCA and chain sequences"
requires-python = ">=3.11"
dependencies = [
    "numpy",
]
keywords = ["molecular dynamics", "trajectory", "pdb", "trr", "rmsd", "pca", "superposition"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Chemistry",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mill = "coffeemill.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["coffeemill"]

[tool.pytest.ini_options]
addopts = "-ra"
