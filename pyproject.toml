[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "raykit"
version = "0.1.0"
description = "Ray tracing building blocks: ray/triangle and ray/box intersection, sampling helpers and bounding volume hierarchies"
requires-python = ">=3.10"
dependencies = []
keywords = ["ray tracing", "bvh", "rendering", "global illumination", "intersection"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["raykit"]

[tool.pytest.ini_options]
addopts = "-ra"
