[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "selfupdater"
version = "0.1.0"
description = "Check a server for a newer version of an application, then download and install it."
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["updater", "auto-update", "installer", "deployment"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
selfupdater = "selfupdater.app:main"

[tool.hatch.build.targets.wheel]
packages = ["selfupdater"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
