[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "limecore"
version = "0.1.0"
description = "Building blocks for a text editor backend: key bindings, commands, undo history, render recipes, projects and logging."
requires-python = ">=3.10"
dependencies = []
keywords = ["editor", "text-editor", "key-bindings", "undo", "syntax-highlighting", "commands"]
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
    "Topic :: Text Editors",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["limecore"]

[tool.hatch.build.targets.sdist]
include = ["limecore", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
