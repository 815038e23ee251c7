[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "linkding-archiver"
version = "0.1.0"
description = "Downloads PDFs linked from Linkding bookmarks and attaches them as bookmark assets"
requires-python = ">=3.10"
keywords = ["linkding", "bookmarks", "pdf", "archive"]
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
    "Topic :: Internet :: WWW/HTTP",
]
dependencies = [
    "requests>=2.28",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
linkding-archiver = "linkding_archiver.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["linkding_archiver"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
