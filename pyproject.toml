[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "amadeus"
version = "0.1.0"
description = "SQLite access layer with a compact binary serialization for values, fields, rows, results and queries"
requires-python = ">=3.10"
dependencies = []
keywords = ["sqlite", "serialization", "database", "query", "gzip"]
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
    "Topic :: Database :: Front-Ends",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["amadeus"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
