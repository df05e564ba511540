"""Seeded k-means clustering of geographic points.

Centroids start from the position-wise seeds produced by alignment and move to
the spherical mean of their assigned points until they stop moving. With the
default ``tolerance_km=0.0`` and no iteration cap, iteration continues until the
summed centroid displacement is exactly zero, which makes results reproducible bit for
bit. A positive tolerance and ``max_iterations`` bound the loop for noisy data.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from average_route.errors import EmptyInputError
from average_route.geodesy import central_coordinate_array, haversine_matrix, to_array, vector_distance
from average_route.models import GeoPoint

DEFAULT_CHUNK_SIZE = 4096


@dataclass
class KMeansResult:
    centroids: List[GeoPoint]
    iterations: int
    converged: bool
    empty_cluster_events: int = 0
    shift_km: float = 0.0


def assign_points(points: np.ndarray, centers: np.ndarray, chunk_size: int = DEFAULT_CHUNK_SIZE) -> np.ndarray:
    """Label every point with the index of its nearest center (lowest index on ties)."""

    labels = np.empty(points.shape[0], dtype=int)
    for start in range(0, points.shape[0], chunk_size):
        stop = start + chunk_size
        labels[start:stop] = np.argmin(haversine_matrix(points[start:stop], centers), axis=1)
    return labels


def move_centroids(
    points: np.ndarray,
    labels: np.ndarray,
    centers: Sequence[GeoPoint],
) -> tuple[List[GeoPoint], int]:
    """Return new centroids and the number of clusters that received no points.

    An empty cluster keeps its previous centroid.
    """

    new_centers: List[GeoPoint] = []
    empty = 0
    for idx, previous in enumerate(centers):
        members = points[labels == idx]
        if members.shape[0] == 0:
            empty += 1
            new_centers.append(previous)
            continue
        new_centers.append(central_coordinate_array(members))
    return new_centers, empty


def run_kmeans(
    centers: Sequence[GeoPoint],
    points: Sequence[GeoPoint],
    tolerance_km: float = 0.0,
    max_iterations: Optional[int] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> KMeansResult:
    """
    Run k-means from the given seed centroids until convergence.

    Convergence means the summed distance between consecutive centroid sets is
    ``<= tolerance_km`` (exactly zero by default). When ``max_iterations`` is
    reached first, the last centroids are returned with ``converged=False``.
    """

    if len(centers) == 0:
        raise EmptyInputError("k-means needs at least one seed centroid.")
    if len(points) == 0:
        raise EmptyInputError("k-means needs a non-empty point cloud.")
    if tolerance_km < 0:
        raise ValueError(f"tolerance_km must be non-negative, got {tolerance_km}.")
    if max_iterations is not None and max_iterations < 1:
        raise ValueError(f"max_iterations must be positive or None, got {max_iterations}.")

    cloud = to_array(points)
    current = list(centers)
    iterations = 0
    empty_events = 0
    shift = float("inf")
    start = time.perf_counter()

    while True:
        iterations += 1
        labels = assign_points(cloud, to_array(current), chunk_size=chunk_size)
        new_centers, empty = move_centroids(cloud, labels, current)
        if empty:
            logging.debug("Iteration %d: %d clusters received no points, keeping previous centroids", iterations, empty)
            empty_events += empty
        shift = vector_distance(current, new_centers)
        current = new_centers
        logging.debug("Iteration %d: centroid shift %.9f km", iterations, shift)

        if shift <= tolerance_km:
            converged = True
            break
        if max_iterations is not None and iterations >= max_iterations:
            converged = False
            logging.warning(
                "k-means stopped after %d iterations without converging (last shift %.6f km)",
                iterations,
                shift,
            )
            break

    logging.info(
        "k-means finished after %d iterations in %.1f ms (converged=%s, empty clusters=%d)",
        iterations,
        (time.perf_counter() - start) * 1000,
        converged,
        empty_events,
    )
    return KMeansResult(
        centroids=current,
        iterations=iterations,
        converged=converged,
        empty_cluster_events=empty_events,
        shift_km=shift,
    )
