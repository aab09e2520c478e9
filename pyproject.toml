[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "empcircuit"
version = "0.1.0"
description = "Boolean circuit values, Bristol circuit files, AES-128-CTR and I/O channels for secure computation"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["secure computation", "garbled circuits", "bristol format", "aes", "mpc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["empcircuit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
