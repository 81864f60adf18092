[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sketchkit"
version = "0.1.0"
description = "Compact JSON building and logging, a dynamic JSON value, and DER encoding for ECDSA P-256 certificates and CSRs"
requires-python = ">=3.10"
dependencies = []
keywords = ["json", "logging", "der", "asn1", "x509", "csr", "certificate", "ecdsa", "p256"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sketchkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
