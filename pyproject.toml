[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "douquiz"
version = "0.1.0"
description = "Turn Word (.docx) question sheets into packaged, optionally encrypted quiz archives, with a small web app for previewing them"
requires-python = ">=3.10"
keywords = ["quiz", "docx", "test", "exam", "education", "multiple-choice"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education :: Testing",
    "Topic :: Office/Business :: Office Suites",
]
dependencies = [
    "cryptography",
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
douquiz = "douquiz.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["douquiz"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 110
target-version = "py310"
