[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "evhttpd"
version = "0.1.0"
description = "Building blocks for an event-driven HTTP server: connection pooling, idle timers, flood checks, routing, sessions and signal handling"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "connection-pool", "timers", "sessions", "router", "signals"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["evhttpd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
