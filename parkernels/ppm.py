"""Writing iteration-count images as binary PPM files."""

from __future__ import annotations

import os

import numpy as np


def ppm_bytes(data, width: int, height: int, max_iterations: int) -> bytes:
    """Encode iteration counts as a greyscale P6 image.

    Each count is clamped to ``max_iterations``, scaled by 1/256 and raised
    to the power 0.5 to brighten low counts, then written as three equal
    8-bit channels.
    """
    counts = np.asarray(data).ravel()
    if counts.size != width * height:
        raise ValueError(
            f"expected {width * height} pixels for a {width}x{height} image, "
            f"got {counts.size}"
        )
    clamped = np.minimum(np.float32(max_iterations), counts.astype(np.float32))
    mapped = np.power(clamped / np.float32(256.0), np.float32(0.5))
    scaled = np.float32(255.0) * mapped
    levels = np.clip(np.nan_to_num(scaled), 0, 255).astype(np.uint8)
    header = f"P6\n{width} {height}\n255\n".encode("ascii")
    return header + np.repeat(levels, 3).tobytes()


def write_ppm_image(
    data, width: int, height: int, filename: str | os.PathLike, max_iterations: int
) -> None:
    """Write iteration counts to ``filename`` as a P6 image."""
    payload = ppm_bytes(data, width, height, max_iterations)
    with open(filename, "wb") as handle:
        handle.write(payload)
    print(f"Wrote image file {os.fspath(filename)}")