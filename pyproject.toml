[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "espcrypt"
version = "0.1.0"
description = "Pure Python DES, 3DES-CBC, MD5 and HMAC-MD5 primitives for ESP/AH style packet processing"
requires-python = ">=3.10"
dependencies = []
keywords = ["des", "3des", "cbc", "md5", "hmac", "ipsec", "esp"]
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
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["espcrypt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
