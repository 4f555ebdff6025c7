[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "newscheck"
version = "0.2.2"
description = "Another Arch Linux news reader that can hold back pacman upgrades until the news is read"
requires-python = ">=3.10"
keywords = ["arch linux", "news", "rss", "pacman", "hook"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "requests",
    "defusedxml",
    "psutil",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
newscheck = "newscheck.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["newscheck"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
