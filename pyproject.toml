[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "romtools"
version = "0.1.0"
description = "Charmap string preprocessor and include dependency scanner for ROM build trees"
requires-python = ">=3.10"
dependencies = []
keywords = ["preprocessor", "charmap", "assembly", "dependencies", "incbin", "build"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Pre-processors",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
romtools-preproc = "romtools.preproc:main"
romtools-scaninc = "romtools.scaninc:main"

[tool.hatch.build.targets.wheel]
packages = ["romtools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
