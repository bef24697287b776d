[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "systdecode"
version = "0.1.0"
description = "Building blocks for MIPI SyS-T trace messages: collateral catalogs, GUIDs, CRC-32C, printf emulation and CSV rendering"
requires-python = ">=3.10"
dependencies = []
keywords = ["sys-t", "trace", "debugging", "catalog", "printf", "crc32c", "guid"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Debuggers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["systdecode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
