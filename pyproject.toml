[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rosflat"
version = "0.1.0"
description = "Flatten serialized ROS messages into named numeric and string time series"
requires-python = ">=3.10"
dependencies = []
keywords = ["ros", "robotics", "introspection", "deserialization", "timeseries", "plotting"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rosflat"]

[tool.pytest.ini_options]
addopts = "-ra"
