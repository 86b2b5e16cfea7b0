[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dragonvm"
version = "0.1.0"
description = "A small stack-based virtual machine with a macro assembler for its own assembly language"
requires-python = ">=3.10"
dependencies = [
    "termcolor",
]
keywords = ["virtual machine", "stack machine", "assembler", "interpreter", "bytecode"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
dragon = "dragonvm.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dragonvm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
