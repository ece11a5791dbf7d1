[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rosclient"
version = "0.1.0"
description = "ROS 2 action client and server logic, wire time types, and a .msg definition compiler"
requires-python = ">=3.10"
dependencies = []
keywords = ["ros2", "robotics", "actions", "msg", "code generation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: Software Development :: Code Generators",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[project.scripts]
msggen = "rosclient.msggen.main:main"

[tool.hatch.build.targets.wheel]
packages = ["rosclient"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
