[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eternal"
version = "0.1.0"
description = "A small per-user service supervisor with a daemon and a command-line client"
requires-python = ">=3.10"
keywords = ["daemon", "supervisor", "services", "process-manager", "unix-socket"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
eternal = "eternal.cli:main"
eternal-daemon = "eternal.daemon:main"

[tool.hatch.build.targets.wheel]
packages = ["eternal"]

[tool.pytest.ini_options]
addopts = "-ra"
