[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "damc"
version = "0.1.0"
description = "OSC-controlled audio processing building blocks: filters, dynamics, reverb, metering, convolution and an OSC parameter tree"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["audio", "osc", "dsp", "biquad", "compressor", "reverb", "convolution", "slip"]
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
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["damc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
