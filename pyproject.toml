[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wallfeed"
version = "0.1.3"
description = "Follow Walltaker links over a websocket and download their wallpapers"
requires-python = ">=3.10"
keywords = ["wallpaper", "walltaker", "websocket", "desktop"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment",
]
dependencies = [
    "requests",
    "websocket-client",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
wallfeed = "wallfeed.client:main"

[tool.hatch.build.targets.wheel]
packages = ["wallfeed"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
