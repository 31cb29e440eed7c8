[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nanoraft"
version = "0.1.0"
description = "JSON-RPC 2.0 over framed TCP, Raft message types, behaviour trees and small concurrency helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["raft", "json-rpc", "rpc", "behavior-tree", "distributed", "tcp"]
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
    "Topic :: System :: Distributed Computing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nanoraft-demo = "nanoraft.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["nanoraft"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
