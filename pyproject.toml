[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "allocsim"
version = "0.1.0"
description = "Simulated memory allocators: bump, linked list, fixed-size block, buddy and slab"
requires-python = ">=3.10"
dependencies = []
keywords = ["allocator", "memory", "buddy", "slab", "heap", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
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

[project.scripts]
allocsim-bench = "allocsim.bench:main"

[tool.hatch.build.targets.wheel]
packages = ["allocsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
