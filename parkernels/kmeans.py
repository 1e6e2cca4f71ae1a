"""K-means clustering with the assignment step split across threads."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import numpy as np

DEFAULT_THREADS = 16
_FAR = 1e30


def _as_matrix(values, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"{name} must be two-dimensional, got shape {arr.shape}")
    return arr


def _check_shapes(data: np.ndarray, centroids: np.ndarray) -> None:
    if data.shape[1] != centroids.shape[1]:
        raise ValueError(
            f"data points have {data.shape[1]} dimensions, centroids have {centroids.shape[1]}"
        )


def _check_assignments(assignments, m: int, k: int) -> np.ndarray:
    labels = np.asarray(assignments, dtype=np.int64).ravel()
    if labels.shape[0] != m:
        raise ValueError(f"{labels.shape[0]} assignments for {m} data points")
    if labels.size and (labels.min() < 0 or labels.max() >= k):
        raise ValueError(f"assignments must lie in 0..{k - 1}")
    return labels


def _check_range(start: int, end: int, k: int) -> None:
    if not 0 <= start <= end <= k:
        raise ValueError(f"cluster range {start}..{end} lies outside 0..{k}")


def dist(x, y) -> float:
    """Euclidean distance between two points of equal dimension."""
    a = np.asarray(x, dtype=np.float64).ravel()
    b = np.asarray(y, dtype=np.float64).ravel()
    if a.shape != b.shape:
        raise ValueError(f"points differ in dimension: {a.shape[0]} vs {b.shape[0]}")
    return float(np.sqrt(np.sum((a - b) ** 2)))


def stopping_condition_met(prev_cost, curr_cost, epsilon: float) -> bool:
    """True when no cluster's cost changed by more than ``epsilon``."""
    prev = np.asarray(prev_cost, dtype=np.float64).ravel()
    curr = np.asarray(curr_cost, dtype=np.float64).ravel()
    if prev.shape != curr.shape:
        raise ValueError(f"{prev.shape[0]} previous costs but {curr.shape[0]} current costs")
    return not bool(np.any(np.abs(prev - curr) > epsilon))


def compute_assignments(
    data, centroids, start: int = 0, end: int | None = None, num_threads: int = DEFAULT_THREADS
) -> np.ndarray:
    """Index of the closest centroid among ``start .. end - 1`` for each point.

    Points are split into ``num_threads`` contiguous blocks, the last block
    taking the remainder. Ties go to the lower centroid index; with an empty
    centroid range every point is assigned -1.
    """
    points = _as_matrix(data, "data")
    centres = _as_matrix(centroids, "centroids")
    _check_shapes(points, centres)
    k = centres.shape[0]
    if end is None:
        end = k
    _check_range(start, end, k)
    if num_threads < 1:
        raise ValueError(f"need at least one thread, got {num_threads}")

    m = points.shape[0]
    assignments = np.full(m, -1, dtype=np.int32)
    block = m // num_threads

    def work(thread_id: int) -> None:
        lo = block * thread_id
        hi = m if thread_id == num_threads - 1 else lo + block
        chunk = points[lo:hi]
        min_dist = np.full(hi - lo, _FAR)
        labels = assignments[lo:hi]
        for cluster in range(start, end):
            d = np.sqrt(np.sum((chunk - centres[cluster]) ** 2, axis=1))
            closer = d < min_dist
            min_dist[closer] = d[closer]
            labels[closer] = cluster

    with ThreadPoolExecutor(max_workers=max(num_threads - 1, 1)) as pool:
        futures = [pool.submit(work, t) for t in range(1, num_threads)]
        work(0)
        for future in futures:
            future.result()
    return assignments


def compute_centroids(data, assignments, k: int) -> np.ndarray:
    """Mean of the points assigned to each of ``k`` clusters.

    A cluster with no points gets the zero vector.
    """
    points = _as_matrix(data, "data")
    labels = _check_assignments(assignments, points.shape[0], k)
    sums = np.zeros((k, points.shape[1]), dtype=np.float64)
    np.add.at(sums, labels, points)
    counts = np.maximum(np.bincount(labels, minlength=k), 1)
    return sums / counts[:, None]


def compute_cost(data, centroids, assignments, start: int = 0, end: int | None = None) -> np.ndarray:
    """Sum of distances from each cluster's points to its centroid.

    Returns one entry per centroid; entries outside ``start .. end - 1``
    are left at zero.
    """
    points = _as_matrix(data, "data")
    centres = _as_matrix(centroids, "centroids")
    _check_shapes(points, centres)
    k = centres.shape[0]
    if end is None:
        end = k
    _check_range(start, end, k)
    labels = _check_assignments(assignments, points.shape[0], k)
    distances = np.sqrt(np.sum((points - centres[labels]) ** 2, axis=1))
    accum = np.bincount(labels, weights=distances, minlength=k)
    costs = np.zeros(k, dtype=np.float64)
    costs[start:end] = accum[start:end]
    return costs


def kmeans_thread(data, centroids, assignments, epsilon: float) -> tuple[np.ndarray, np.ndarray]:
    """Run k-means until no cluster cost moves by more than ``epsilon``.

    Returns the final centroids and assignments; the inputs are not modified.
    """
    points = _as_matrix(data, "data")
    centres = _as_matrix(centroids, "centroids").copy()
    _check_shapes(points, centres)
    k = centres.shape[0]
    labels = np.asarray(assignments, dtype=np.int32).ravel().copy()
    if labels.shape[0] != points.shape[0]:
        raise ValueError(f"{labels.shape[0]} assignments for {points.shape[0]} data points")

    prev_cost = np.full(k, _FAR)
    curr_cost = np.zeros(k)
    while not stopping_condition_met(prev_cost, curr_cost, epsilon):
        prev_cost = curr_cost
        labels = compute_assignments(points, centres, 0, k)
        centres = compute_centroids(points, labels, k)
        curr_cost = compute_cost(points, centres, labels, 0, k)
    return centres, labels