[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "twodb"
version = "0.1.0"
description = "A small page-based key/value store kept in a plain-text file, with a simple B+ tree index"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "key-value", "b+tree", "storage", "pages"]
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
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
twodb-demo = "twodb.app:main"

[tool.hatch.build.targets.wheel]
packages = ["twodb"]

[tool.pytest.ini_options]
addopts = "-ra"
