[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kerald"
version = "0.1.0"
description = "Lightweight distributed messaging framework"
requires-python = ">=3.11"
keywords = ["messaging", "broker", "distributed", "quorum", "streaming"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "pyyaml>=6.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
]

[project.scripts]
kerald = "kerald.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kerald"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
strict = true
