[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "calorimeter"
version = "0.1.0"
description = "Control and data-acquisition core for a high-temperature drop calorimeter furnace"
requires-python = ">=3.10"
dependencies = [
    "pyserial",
]
keywords = [
    "calorimetry",
    "furnace",
    "thermocouple",
    "data-acquisition",
    "laboratory",
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
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["calorimeter"]

[tool.hatch.build.targets.sdist]
include = [
    "calorimeter",
    "tests",
    "README.md",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
