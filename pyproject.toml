[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "povdisplay"
version = "0.1.0"
description = "Persistence-of-vision display engine: polar framebuffers, patterns, effects, motor control and a headless simulator"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "pov",
    "persistence-of-vision",
    "led",
    "hd107s",
    "framebuffer",
    "simulator",
    "polar",
]
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
    "Topic :: Multimedia :: Graphics",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
povdisplay-sim = "povdisplay.sim.bridge:main"

[tool.hatch.build.targets.wheel]
packages = ["povdisplay"]

[tool.hatch.build.targets.sdist]
include = [
    "povdisplay",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
