"""Great-circle distance and spherical mean primitives.

All distances are in kilometres on a sphere of mean Earth radius. Scalar helpers
operate on :class:`GeoPoint` sequences; the ``*_array`` and matrix helpers work
on ``(P, 2)`` NumPy arrays of ``[longitude, latitude]`` degrees and are used by
the clustering loop.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from average_route.errors import EmptyInputError, LengthMismatchError
from average_route.models import GeoPoint

AVERAGE_EARTH_RADIUS_KM = 6371.230


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance between two points in kilometres."""

    lat_delta = math.radians(a.latitude - b.latitude)
    lon_delta = math.radians(a.longitude - b.longitude)
    h = (
        math.sin(lat_delta / 2) * math.sin(lat_delta / 2)
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(lon_delta / 2)
        * math.sin(lon_delta / 2)
    )
    h = min(h, 1.0)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return AVERAGE_EARTH_RADIUS_KM * c


def route_length(points: Sequence[GeoPoint]) -> float:
    """Sum of distances between consecutive points; 0 for fewer than two points."""

    total = 0.0
    for prev, curr in zip(points, points[1:]):
        total += distance(prev, curr)
    return total


def to_array(points: Sequence[GeoPoint]) -> np.ndarray:
    """Convert points to a float array of shape (P, 2) holding lon/lat."""

    if len(points) == 0:
        return np.empty((0, 2), dtype=float)
    return np.array([(p.longitude, p.latitude) for p in points], dtype=float)


def central_coordinate_array(lonlat: np.ndarray) -> GeoPoint:
    """Spherical mean of a (P, 2) lon/lat array.

    Each point is mapped to a unit vector, the components are averaged and the
    mean vector is mapped back to longitude/latitude. A single point is returned
    as-is so that one-member groups keep their exact position.
    """

    if lonlat.shape[0] == 0:
        raise EmptyInputError("Cannot compute the central coordinate of an empty point set.")
    if lonlat.shape[0] == 1:
        return GeoPoint(float(lonlat[0, 0]), float(lonlat[0, 1]))

    lon = np.radians(lonlat[:, 0])
    lat = np.radians(lonlat[:, 1])
    cos_lat = np.cos(lat)
    x = float(np.mean(cos_lat * np.cos(lon)))
    y = float(np.mean(cos_lat * np.sin(lon)))
    z = float(np.mean(np.sin(lat)))

    central_lon = math.atan2(y, x)
    central_lat = math.atan2(z, math.sqrt(x * x + y * y))
    return GeoPoint(math.degrees(central_lon), math.degrees(central_lat))


def central_coordinate(points: Sequence[GeoPoint]) -> GeoPoint:
    """Spherical mean of a non-empty point sequence."""

    if len(points) == 0:
        raise EmptyInputError("Cannot compute the central coordinate of an empty point set.")
    if len(points) == 1:
        return points[0]
    return central_coordinate_array(to_array(points))


def haversine_matrix(points: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """Pairwise Haversine distances, shape (len(points), len(centers)), in km.

    Mirrors :func:`distance` operation by operation (degree deltas converted to
    radians, same product order), so equal scalar distances stay equal here.
    """

    lat1 = points[:, 1][:, None]
    lon1 = points[:, 0][:, None]
    lat2 = centers[:, 1][None, :]
    lon2 = centers[:, 0][None, :]

    sin_lat = np.sin(np.radians(lat1 - lat2) / 2)
    sin_lon = np.sin(np.radians(lon1 - lon2) / 2)
    h = sin_lat * sin_lat + np.cos(np.radians(lat1)) * np.cos(np.radians(lat2)) * sin_lon * sin_lon
    h = np.minimum(h, 1.0)
    c = 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
    return AVERAGE_EARTH_RADIUS_KM * c


def nearest_index(point: GeoPoint, centers: Sequence[GeoPoint]) -> int:
    """Index of the nearest center; the first one wins ties."""

    if len(centers) == 0:
        raise EmptyInputError("Cannot find the nearest center among zero centers.")
    best_idx = 0
    best_dist = math.inf
    for idx, center in enumerate(centers):
        dist = distance(point, center)
        if dist < best_dist:
            best_dist = dist
            best_idx = idx
    return best_idx


def vector_distance(seq_a: Sequence[GeoPoint], seq_b: Sequence[GeoPoint]) -> float:
    """Sum of position-wise distances between two equally long sequences."""

    if len(seq_a) != len(seq_b):
        raise LengthMismatchError(
            f"Cannot compare point sequences of different lengths: {len(seq_a)} vs {len(seq_b)}."
        )
    return sum(distance(a, b) for a, b in zip(seq_a, seq_b))
