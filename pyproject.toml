[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "thtools"
version = "0.1.0"
description = "Readers and writers for shoot-'em-up game data: stage background files, spin-off dialogue files, archive version detection and the ciphers they use"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "game-data",
    "stage",
    "dialogue",
    "archive-detection",
    "decryption",
    "mersenne-twister",
    "modding",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: File Formats",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
thstd = "thtools.stdtext:main"

[tool.hatch.build.targets.wheel]
packages = ["thtools"]

[tool.hatch.build.targets.sdist]
include = ["thtools", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
