[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kartoteka"
version = "0.1.0"
description = "Patient and examination record files with blocked sequential storage, a hashed summary file and an access log"
requires-python = ">=3.10"
dependencies = []
keywords = ["records", "blocked file", "hashing", "patients", "file organisation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
kartoteka = "kartoteka.menu:main"

[tool.hatch.build.targets.wheel]
packages = ["kartoteka"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
