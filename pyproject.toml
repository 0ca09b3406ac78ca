[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tailord"
version = "0.1.0"
description = "Fan, LED animation, charging and performance-profile control for TUXEDO laptops"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "tuxedo",
    "laptop",
    "fan-control",
    "keyboard-backlight",
    "battery",
    "ioctl",
    "sysfs",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
tailor-hwcaps = "tailord.hwcaps:main"

[tool.hatch.build.targets.wheel]
packages = ["tailord"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"
