[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "checkct"
version = "0.1.0"
description = "Set up and run constant-time verification drivers for cargo library crates with binsec"
requires-python = ">=3.11"
dependencies = []
keywords = ["constant-time", "binsec", "cargo", "verification", "side-channel", "elf"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
checkct = "checkct.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["checkct"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
