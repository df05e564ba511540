"""End-to-end average route computation.

The stage order is fixed: the simplification target is the smallest point count
of the *unfiltered* route set, length statistics are also taken before filtering,
and only then are outliers removed and the remaining routes simplified, aligned
and clustered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from average_route.alignment import RowAnomaly, build_matrix, flatten, seed_centroids, transpose
from average_route.config import get_nested
from average_route.errors import EmptyInputError
from average_route.io import DroppedRecord, read_routes, save_route_csv, write_geojson
from average_route.kmeans import DEFAULT_CHUNK_SIZE, run_kmeans
from average_route.models import GeoPoint, RouteSet
from average_route.outliers import CUTOFF_DIVISOR, LengthStats, filter_routes, length_stats


@dataclass
class PipelineSettings:
    cutoff_divisor: float = CUTOFF_DIVISOR
    strategy: str = "heap"
    short_row_policy: str = "drop"
    tolerance_km: float = 0.0
    max_iterations: Optional[int] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    reverse_from_port: Optional[str] = "DEBRV"
    from_seq: str = ""
    to_seq: str = ""
    save_csv: bool = False
    save_plots: bool = False

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "PipelineSettings":
        max_iterations = get_nested(cfg, ["clustering", "max_iterations"], None)
        return cls(
            cutoff_divisor=float(get_nested(cfg, ["filtering", "cutoff_divisor"], CUTOFF_DIVISOR)),
            strategy=str(get_nested(cfg, ["simplification", "strategy"], "heap")).lower(),
            short_row_policy=str(get_nested(cfg, ["alignment", "short_row_policy"], "drop")).lower(),
            tolerance_km=float(get_nested(cfg, ["clustering", "tolerance_km"], 0.0)),
            max_iterations=int(max_iterations) if max_iterations is not None else None,
            chunk_size=int(get_nested(cfg, ["clustering", "chunk_size"], DEFAULT_CHUNK_SIZE)),
            reverse_from_port=get_nested(cfg, ["input", "reverse_from_port"], "DEBRV") or None,
            from_seq=str(get_nested(cfg, ["output", "from_seq"], "")),
            to_seq=str(get_nested(cfg, ["output", "to_seq"], "")),
            save_csv=bool(get_nested(cfg, ["output", "save_csv"], False)),
            save_plots=bool(get_nested(cfg, ["output", "save_plots"], False)),
        )


@dataclass
class AverageRouteResult:
    route: List[GeoPoint]
    target_size: int
    stats: LengthStats
    total_routes: int
    filtered_routes: int
    clustered_routes: int
    cloud_size: int
    iterations: int
    converged: bool
    empty_cluster_events: int = 0
    anomalies: List[RowAnomaly] = field(default_factory=list)
    dropped_records: List[DroppedRecord] = field(default_factory=list)


def minimum_point_count(route_set: RouteSet) -> int:
    """Smallest trajectory point count in the route set."""

    if not route_set:
        raise EmptyInputError("Cannot determine the target size of an empty route set.")
    return min(len(points) for points in route_set.values())


def compute_average_route(route_set: RouteSet, settings: Optional[PipelineSettings] = None) -> AverageRouteResult:
    """Run filtering, simplification, alignment and clustering over ``route_set``."""

    settings = settings or PipelineSettings()
    if not route_set:
        raise EmptyInputError("No routes to average.")

    target_size = minimum_point_count(route_set)
    logging.info("Simplification target: %d points per route", target_size)

    stats = length_stats(route_set)
    filtered = filter_routes(route_set, stats.mean, stats.mean / settings.cutoff_divisor)
    if not filtered:
        raise EmptyInputError(f"All {len(route_set)} routes were removed as length outliers.")

    matrix = build_matrix(filtered, target_size, policy=settings.short_row_policy, strategy=settings.strategy)
    cloud = flatten(matrix.rows)
    logging.info("Coordinate cloud size : %d", len(cloud))

    seeds = seed_centroids(transpose(matrix.rows))

    logging.info("Calculating average route using k-means clustering")
    result = run_kmeans(
        seeds,
        cloud,
        tolerance_km=settings.tolerance_km,
        max_iterations=settings.max_iterations,
        chunk_size=settings.chunk_size,
    )

    return AverageRouteResult(
        route=result.centroids,
        target_size=target_size,
        stats=stats,
        total_routes=len(route_set),
        filtered_routes=len(filtered),
        clustered_routes=len(matrix.rows),
        cloud_size=len(cloud),
        iterations=result.iterations,
        converged=result.converged,
        empty_cluster_events=result.empty_cluster_events,
        anomalies=list(matrix.anomalies),
    )


def run(input_path: str | Path, output_path: str | Path, settings: Optional[PipelineSettings] = None) -> AverageRouteResult:
    """Read routes from ``input_path``, compute the average route and write it to ``output_path``."""

    settings = settings or PipelineSettings()
    output_path = Path(output_path)

    read_result = read_routes(input_path, reverse_from_port=settings.reverse_from_port)
    result = compute_average_route(read_result.routes, settings)
    result.dropped_records = list(read_result.dropped)

    write_geojson(result.route, output_path, from_seq=settings.from_seq, to_seq=settings.to_seq)
    if settings.save_csv:
        save_route_csv(result.route, output_path.with_suffix(".csv"))
    if settings.save_plots:
        from average_route.plots import plot_average_route

        plot_average_route(read_result.routes, result.route, output_path.with_suffix(".png"))
    return result
