"""Mandelbrot escape-count images computed in single precision."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

MAX_THREADS = 32

_F32 = np.float32


@dataclass(frozen=True)
class View:
    """Complex-plane rectangle mapped onto the image."""

    x0: float = -2.0
    y0: float = -1.0
    x1: float = 1.0
    y1: float = 1.0

    def scale_and_shift(self, scale: float, shift_x: float, shift_y: float) -> "View":
        """Return this view scaled by ``scale`` and then shifted."""
        s, sx, sy = _F32(scale), _F32(shift_x), _F32(shift_y)
        return View(
            x0=float(_F32(self.x0) * s + sx),
            y0=float(_F32(self.y0) * s + sy),
            x1=float(_F32(self.x1) * s + sx),
            y1=float(_F32(self.y1) * s + sy),
        )


def view_for_index(index: int) -> View:
    """Return the view selected by a command-line view index."""
    if index == 2:
        return View().scale_and_shift(0.015, -0.986, 0.30)
    if index > 1:
        raise ValueError("Invalid view index")
    return View()


def _escape_counts(c_re, c_im, count: int) -> np.ndarray:
    c_re = np.asarray(c_re, dtype=np.float32)
    c_im = np.asarray(c_im, dtype=np.float32)
    z_re = c_re.copy()
    z_im = c_im.copy()
    counts = np.zeros(c_re.shape, dtype=np.int32)
    active = np.ones(c_re.shape, dtype=bool)
    two = _F32(2.0)
    four = _F32(4.0)
    with np.errstate(over="ignore", invalid="ignore"):
        for _ in range(count):
            re2 = z_re * z_re
            im2 = z_im * z_im
            active &= ~(re2 + im2 > four)
            if not active.any():
                break
            counts += active
            new_re = re2 - im2
            new_im = two * z_re * z_im
            z_re = np.where(active, c_re + new_re, z_re)
            z_im = np.where(active, c_im + new_im, z_im)
    return counts


def mandel(c_re: float, c_im: float, count: int) -> int:
    """Number of iterations before the point escapes, at most ``count``."""
    return int(_escape_counts(np.array([c_re]), np.array([c_im]), count)[0])


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"image size must be positive, got {width}x{height}")


def _compute_rows(view: View, width: int, height: int, rows, max_iterations: int) -> np.ndarray:
    dx = (_F32(view.x1) - _F32(view.x0)) / _F32(width)
    dy = (_F32(view.y1) - _F32(view.y0)) / _F32(height)
    xs = _F32(view.x0) + np.arange(width, dtype=np.float32) * dx
    ys = _F32(view.y0) + np.asarray(rows, dtype=np.float32) * dy
    c_re, c_im = np.meshgrid(xs, ys)
    return _escape_counts(c_re, c_im, max_iterations)


def mandelbrot_serial(
    view: View,
    width: int,
    height: int,
    max_iterations: int,
    start_row: int = 0,
    total_rows: int | None = None,
) -> np.ndarray:
    """Compute rows ``start_row`` .. ``start_row + total_rows`` of the image.

    Returns an array of shape ``(total_rows, width)``; by default the whole
    image is computed.
    """
    _check_size(width, height)
    if total_rows is None:
        total_rows = height - start_row
    if start_row < 0 or total_rows < 0 or start_row + total_rows > height:
        raise ValueError(
            f"rows {start_row}..{start_row + total_rows} lie outside an image of height {height}"
        )
    rows = np.arange(start_row, start_row + total_rows)
    return _compute_rows(view, width, height, rows, max_iterations)


def mandelbrot_thread(
    num_threads: int, view: View, width: int, height: int, max_iterations: int
) -> np.ndarray:
    """Compute the whole image with rows interleaved across threads.

    Thread ``t`` handles rows ``t, t + num_threads, ...``; the calling thread
    works as thread 0.
    """
    if num_threads > MAX_THREADS:
        raise ValueError(f"Max allowed threads is {MAX_THREADS}")
    if num_threads < 1:
        raise ValueError(f"need at least one thread, got {num_threads}")
    _check_size(width, height)
    output = np.zeros((height, width), dtype=np.int32)

    def work(thread_id: int) -> None:
        rows = np.arange(thread_id, height, num_threads)
        output[rows] = _compute_rows(view, width, height, rows, max_iterations)

    with ThreadPoolExecutor(max_workers=max(num_threads - 1, 1)) as pool:
        futures = [pool.submit(work, t) for t in range(1, num_threads)]
        work(0)
        for future in futures:
            future.result()
    return output


def verify_result(gold, result) -> bool:
    """Compare two images, reporting the first mismatch in row-major order."""
    gold = np.asarray(gold)
    result = np.asarray(result)
    if gold.ndim != 2 or gold.shape != result.shape:
        raise ValueError(
            f"images must be two-dimensional and equal in shape: {gold.shape} vs {result.shape}"
        )
    mismatches = np.argwhere(gold != result)
    if mismatches.size == 0:
        return True
    i, j = (int(v) for v in mismatches[0])
    print(f"Mismatch : [{i}][{j}], Expected : {gold[i, j]}, Actual : {result[i, j]}")
    return False