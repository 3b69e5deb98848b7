[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pimsim"
version = "0.1.0"
description = "Building blocks for a processing-in-memory DRAM simulator: PIM command encoding, 32-byte bursts, .npy I/O and configuration handling"
requires-python = ">=3.10"
keywords = ["dram", "simulator", "processing-in-memory", "pim", "npy", "memory"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pimsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
