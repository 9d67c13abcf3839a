[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kernelkit"
version = "0.1.0"
description = "Kernel building blocks: buddy page allocators over simulated address ranges, intrusive and owned linked lists, and list cursors."
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "allocator", "buddy-system", "linked-list", "page-allocator"]
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
    "Topic :: System :: Operating System Kernels",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["kernelkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
