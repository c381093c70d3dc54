[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "grenls"
version = "0.1.0"
description = "Symbol extraction, indexing and document workspace for Gren language tooling"
requires-python = ">=3.10"
dependencies = []
keywords = ["gren", "lsp", "language-server", "symbols", "index"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["grenls"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
