[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rockstar-halos"
version = "0.99.9rc3"
description = "Dark matter halo analysis tools: halo properties, NFW fits, potentials, substructure, merger links and box decomposition"
requires-python = ">=3.10"
keywords = [
    "astronomy",
    "cosmology",
    "dark matter",
    "halo",
    "n-body",
    "merger tree",
    "nfw",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Astronomy",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
rockstar-find-parents = "rockstar_halos.parents:main"

[tool.hatch.build.targets.wheel]
packages = ["rockstar_halos"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
