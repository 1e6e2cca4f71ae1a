[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "parkernels"
version = "0.1.0"
description = "Small parallel-computing kernels: Mandelbrot images, a simulated vector unit and threaded k-means"
requires-python = ">=3.10"
keywords = [
    "parallel",
    "mandelbrot",
    "simd",
    "vector",
    "kmeans",
    "threads",
    "education",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
parkernels-vecintrin = "parkernels.vector_programs:main"

[tool.hatch.build.targets.wheel]
packages = ["parkernels"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
