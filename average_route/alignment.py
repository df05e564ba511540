"""Cross-route alignment of simplified trajectories.

Every route is simplified to the same vertex count so that the i-th point of each
route approximates the same position along the passage. The resulting matrix is
transposed to group corresponding positions, which yields the seed centroids for
clustering, and flattened into the clustering point cloud.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from average_route.errors import EmptyInputError, LengthMismatchError
from average_route.geodesy import central_coordinate
from average_route.models import GeoPoint, RouteInfo, RouteSet
from average_route.simplification import simplify

SHORT_ROW_POLICIES = ("drop", "fail")


@dataclass(frozen=True)
class RowAnomaly:
    """A route whose simplified row does not have the target length."""

    route: RouteInfo
    expected: int
    actual: int


@dataclass
class SimplifiedMatrix:
    rows: List[List[GeoPoint]]
    keys: List[RouteInfo]
    target_size: int
    anomalies: List[RowAnomaly] = field(default_factory=list)


def build_matrix(
    route_set: RouteSet,
    n: int,
    policy: str = "drop",
    strategy: str = "heap",
) -> SimplifiedMatrix:
    """
    Simplify every route to ``n`` points, one row per route in insertion order.

    Rows that do not end up with exactly ``n`` points are either dropped and
    reported through ``anomalies`` (``policy="drop"``) or abort the run with a
    :class:`LengthMismatchError` naming the route (``policy="fail"``).
    """

    if policy not in SHORT_ROW_POLICIES:
        raise ValueError(f"Unsupported short row policy: {policy}")

    matrix = SimplifiedMatrix(rows=[], keys=[], target_size=n)
    for info, points in route_set.items():
        row = simplify(points, n, strategy=strategy)
        if len(row) != n:
            if policy == "fail":
                raise LengthMismatchError(
                    f"Simplified route has {len(row)} points instead of {n} ({info.describe()})",
                    route=info,
                )
            logging.warning("Simplified coordinates of wrong length: %d for %s", len(row), info.describe())
            matrix.anomalies.append(RowAnomaly(route=info, expected=n, actual=len(row)))
            continue
        matrix.rows.append(row)
        matrix.keys.append(info)

    if not matrix.rows:
        raise EmptyInputError(f"No route could be simplified to {n} points; nothing left to cluster.")
    if matrix.anomalies:
        logging.info("Dropped %d routes with a simplified length other than %d", len(matrix.anomalies), n)
    return matrix


def transpose(rows: Sequence[Sequence[GeoPoint]]) -> List[List[GeoPoint]]:
    """Turn R rows of N points into N rows of R points."""

    if not rows:
        return []
    width = len(rows[0])
    for idx, row in enumerate(rows):
        if len(row) != width:
            raise LengthMismatchError(f"Row {idx} has {len(row)} points, expected {width}.")
    return [list(column) for column in zip(*rows)]


def seed_centroids(transposed: Sequence[Sequence[GeoPoint]]) -> List[GeoPoint]:
    """Central coordinate of each position across all routes."""

    if not transposed:
        raise EmptyInputError("Cannot seed centroids from an empty matrix.")
    return [central_coordinate(column) for column in transposed]


def flatten(rows: Sequence[Sequence[GeoPoint]]) -> List[GeoPoint]:
    """All matrix points as a single cloud, position information discarded."""

    return [point for row in rows for point in row]
