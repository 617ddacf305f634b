[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minnownet"
version = "0.1.0"
description = "Building blocks for a user-space TCP/IP stack: wire formats, checksums, addresses, sockets and an event loop"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "networking",
    "tcp",
    "ipv4",
    "ethernet",
    "arp",
    "checksum",
    "tun",
    "event-loop",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["minnownet"]

[tool.pytest.ini_options]
addopts = "-ra"
