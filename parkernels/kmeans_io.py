"""Reading, writing and logging k-means datasets."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass

import numpy as np

_HEADER = struct.Struct("<iiid")


@dataclass(eq=False)
class KMeansData:
    """Points, centroids, assignments and convergence threshold of a run."""

    data: np.ndarray
    centroids: np.ndarray
    assignments: np.ndarray
    epsilon: float

    def __post_init__(self) -> None:
        self.data = np.asarray(self.data, dtype=np.float64)
        self.centroids = np.asarray(self.centroids, dtype=np.float64)
        self.assignments = np.asarray(self.assignments, dtype=np.int32).ravel()
        self.epsilon = float(self.epsilon)
        if self.data.ndim != 2 or self.centroids.ndim != 2:
            raise ValueError("data and centroids must be two-dimensional")
        if self.data.shape[1] != self.centroids.shape[1]:
            raise ValueError(
                f"data points have {self.data.shape[1]} dimensions, "
                f"centroids have {self.centroids.shape[1]}"
            )
        if self.assignments.shape[0] != self.data.shape[0]:
            raise ValueError(
                f"{self.assignments.shape[0]} assignments for {self.data.shape[0]} data points"
            )

    @property
    def m(self) -> int:
        """Number of data points."""
        return self.data.shape[0]

    @property
    def n(self) -> int:
        """Dimension of each point."""
        return self.data.shape[1]

    @property
    def k(self) -> int:
        """Number of centroids."""
        return self.centroids.shape[0]


def _row(values) -> str:
    return "".join(f"{float(v):g} " for v in values)


def log_to_file(
    filename: str | os.PathLike, sample_rate: float, data, assignments, centroids, rng
) -> None:
    """Write a text log of a random sample of points and all centroids.

    Each point is kept with probability ``sample_rate`` drawn from ``rng``.
    """
    points = np.asarray(data, dtype=np.float64)
    centres = np.asarray(centroids, dtype=np.float64)
    labels = np.asarray(assignments).ravel()
    m, n = points.shape
    k = centres.shape[0]
    with open(filename, "w", encoding="ascii") as log:
        log.write(f"{m},{n},{k}\n")
        for index, (point, label) in enumerate(zip(points, labels)):
            if rng.random() < sample_rate:
                log.write(f"Example {index}, cluster {int(label)}: {_row(point)}\n")
        for index, centre in enumerate(centres):
            log.write(f"Centroid {index}: {_row(centre)}\n")


def write_data(filename: str | os.PathLike, dataset: KMeansData) -> None:
    """Store a dataset in the binary format read by ``read_data``."""
    with open(filename, "wb") as out:
        out.write(_HEADER.pack(dataset.m, dataset.n, dataset.k, dataset.epsilon))
        out.write(dataset.data.astype("<f8").tobytes())
        out.write(dataset.centroids.astype("<f8").tobytes())
        out.write(dataset.assignments.astype("<i4").tobytes())


def read_data(filename: str | os.PathLike) -> KMeansData:
    """Load a dataset written by ``write_data``."""
    print(f"Reading {os.fspath(filename)}...")
    with open(filename, "rb") as source:
        payload = source.read()
    if len(payload) < _HEADER.size:
        raise ValueError("file too short for a dataset header")
    m, n, k, epsilon = _HEADER.unpack_from(payload)
    if m < 0 or n < 0 or k < 0:
        raise ValueError(f"invalid dataset sizes M={m}, N={n}, K={k}")
    sizes = (8 * m * n, 8 * k * n, 4 * m)
    if len(payload) < _HEADER.size + sum(sizes):
        raise ValueError("file is truncated")
    offset = _HEADER.size
    data = np.frombuffer(payload, "<f8", m * n, offset).reshape(m, n)
    offset += sizes[0]
    centroids = np.frombuffer(payload, "<f8", k * n, offset).reshape(k, n)
    offset += sizes[1]
    assignments = np.frombuffer(payload, "<i4", m, offset)
    return KMeansData(data.copy(), centroids.copy(), assignments.copy(), epsilon)