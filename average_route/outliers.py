"""Route length statistics and outlier removal.

Routes whose length lies far from the dataset mean are usually not intentional
passages between the two ports (detours to a third port, land-crossing recording
errors) and are removed before simplification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from average_route.errors import EmptyInputError
from average_route.models import RouteSet

CUTOFF_DIVISOR = 9


@dataclass(frozen=True)
class LengthStats:
    min: float
    max: float
    mean: float


def length_stats(route_set: RouteSet) -> LengthStats:
    """Compute min/max/mean route length in kilometres."""

    if not route_set:
        raise EmptyInputError("Cannot compute length statistics of an empty route set.")

    lengths = np.array([info.length for info in route_set], dtype=float)
    stats = LengthStats(min=float(lengths.min()), max=float(lengths.max()), mean=float(lengths.mean()))
    logging.info("Min route distance : %.3f km", stats.min)
    logging.info("Max route distance : %.3f km", stats.max)
    logging.info("Avg route distance : %.3f km", stats.mean)
    return stats


def filter_routes(route_set: RouteSet, mean: float, tolerance: Optional[float] = None) -> RouteSet:
    """
    Keep routes with ``mean - tolerance < length < mean + tolerance``.
    The default tolerance is ``mean / CUTOFF_DIVISOR``; insertion order is preserved.
    """

    if tolerance is None:
        tolerance = mean / CUTOFF_DIVISOR

    lower, upper = mean - tolerance, mean + tolerance
    filtered = {info: points for info, points in route_set.items() if lower < info.length < upper}
    logging.info(
        "Filtered routes size : %d of %d (band %.3f..%.3f km)",
        len(filtered),
        len(route_set),
        lower,
        upper,
    )
    return filtered
