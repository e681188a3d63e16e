[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "memtasks"
version = "0.1.0"
description = "In-memory manager for long-running I/O tasks with a small JSON HTTP API"
requires-python = ">=3.10"
dependencies = [
    "python-dotenv",
]
keywords = ["tasks", "task-manager", "in-memory", "http", "rest", "api"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
memtasks = "memtasks.application:main"

[tool.hatch.build.targets.wheel]
packages = ["memtasks"]

[tool.pytest.ini_options]
addopts = "-ra"
