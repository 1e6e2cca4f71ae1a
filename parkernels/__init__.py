"""Mandelbrot images, a simulated vector unit with example programs, and threaded k-means."""

__version__ = "0.1.0"