"""Optional plotting utilities for debugging.

Draws the retained input routes underneath the computed average route so the
result can be checked visually.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt

from average_route.models import GeoPoint, RouteSet


def plot_average_route(route_set: RouteSet, average_route: Sequence[GeoPoint], output_path: Path) -> None:
    """Plot all routes in grey with the average route on top."""

    if not average_route:
        return

    fig, ax = plt.subplots(figsize=(8, 6))
    for points in route_set.values():
        ax.plot(
            [p.longitude for p in points],
            [p.latitude for p in points],
            color="grey",
            linewidth=0.5,
            alpha=0.4,
        )
    ax.plot(
        [p.longitude for p in average_route],
        [p.latitude for p in average_route],
        "-o",
        color="black",
        linewidth=2,
        markersize=3,
        label=f"average route ({len(average_route)} points)",
    )
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title(f"Average route over {len(route_set)} routes")
    ax.legend(loc="best")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
