[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cfddns"
version = "0.1.0"
description = "Dynamic DNS client that keeps Cloudflare A and AAAA records pointed at your public IP"
requires-python = ">=3.10"
keywords = ["cloudflare", "ddns", "dynamic-dns", "dns", "ipv4", "ipv6"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Internet :: Name Service (DNS)",
]
dependencies = [
    "httpx",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "respx",
]

[project.scripts]
cfddns = "cfddns.main:main"

[tool.hatch.build.targets.wheel]
packages = ["cfddns"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
