"""Visvalingam-Whyatt polyline simplification.

The polyline is held as an arena of vertices linked by ``prev``/``next`` indices
with an ``alive`` flag. The interior vertex whose triangle with its current
neighbours has the smallest area is removed repeatedly until the target vertex
count is reached. Endpoints carry an infinite area and are never removed.

Two strategies find the vertex to remove:

* ``"scan"`` walks the chain and picks the first vertex with the minimum area.
* ``"heap"`` keeps a priority queue keyed by ``(area, index)`` and discards stale
  entries lazily. Chain order equals index order, so ties resolve to the same
  vertex as the scan and both strategies produce identical output.
"""

from __future__ import annotations

import heapq
import math
from typing import List, Optional, Sequence, Tuple

from average_route.models import GeoPoint

STRATEGIES = ("heap", "scan")


def triangle_area(a: GeoPoint, b: GeoPoint, c: GeoPoint) -> float:
    """Planar area of triangle abc in squared degrees."""

    return abs(
        ((c.longitude - a.longitude) * (b.latitude - a.latitude) - (b.longitude - a.longitude) * (c.latitude - a.latitude))
        / 2
    )


class _VertexChain:
    """Index-based doubly linked chain over a fixed point array."""

    def __init__(self, points: Sequence[GeoPoint]) -> None:
        count = len(points)
        self.points = list(points)
        self.prev: List[int] = [i - 1 for i in range(count)]
        self.next: List[int] = [i + 1 if i + 1 < count else -1 for i in range(count)]
        self.alive: List[bool] = [True] * count
        self.version: List[int] = [0] * count
        self.area: List[float] = [self._compute_area(i) for i in range(count)]
        self.size = count

    def _compute_area(self, idx: int) -> float:
        prev_idx, next_idx = self.prev[idx], self.next[idx]
        if prev_idx < 0 or next_idx < 0:
            return math.inf
        return triangle_area(self.points[prev_idx], self.points[idx], self.points[next_idx])

    def remove(self, idx: int) -> Tuple[int, int]:
        """Unlink ``idx`` and refresh the areas of its former neighbours."""

        prev_idx, next_idx = self.prev[idx], self.next[idx]
        if prev_idx >= 0:
            self.next[prev_idx] = next_idx
        if next_idx >= 0:
            self.prev[next_idx] = prev_idx
        self.alive[idx] = False
        self.size -= 1
        for neighbour in (prev_idx, next_idx):
            if neighbour >= 0:
                self.area[neighbour] = self._compute_area(neighbour)
                self.version[neighbour] += 1
        return prev_idx, next_idx

    def remaining(self) -> List[GeoPoint]:
        return [pt for pt, alive in zip(self.points, self.alive) if alive]


def _scan_minimum(chain: _VertexChain) -> Optional[int]:
    best_idx: Optional[int] = None
    best_area = math.inf
    idx = 0 if chain.points else -1
    while idx >= 0:
        area = chain.area[idx]
        if area < best_area:
            best_area = area
            best_idx = idx
        idx = chain.next[idx]
    return best_idx


def _simplify_scan(chain: _VertexChain, target: int) -> None:
    while chain.size > target:
        idx = _scan_minimum(chain)
        if idx is None:
            break
        chain.remove(idx)


def _simplify_heap(chain: _VertexChain, target: int) -> None:
    heap: List[Tuple[float, int, int]] = [
        (area, idx, 0) for idx, area in enumerate(chain.area) if area != math.inf
    ]
    heapq.heapify(heap)
    while chain.size > target and heap:
        area, idx, version = heapq.heappop(heap)
        if not chain.alive[idx] or version != chain.version[idx]:
            continue
        for neighbour in chain.remove(idx):
            if neighbour >= 0 and chain.area[neighbour] != math.inf:
                heapq.heappush(heap, (chain.area[neighbour], neighbour, chain.version[neighbour]))


def simplify(points: Sequence[GeoPoint], n: int, strategy: str = "heap") -> List[GeoPoint]:
    """
    Reduce ``points`` towards ``n`` vertices with Visvalingam-Whyatt.

    Sequences with at most ``n`` points are returned unchanged. The result is not
    guaranteed to hold exactly ``n`` points: removal stops once no interior
    vertex is left, and a result with fewer than two points is padded to two by
    repeating the remaining point. Callers must check the returned length.
    """

    if n < 0:
        raise ValueError(f"Target vertex count must be non-negative, got {n}.")
    if strategy not in STRATEGIES:
        raise ValueError(f"Unsupported simplification strategy: {strategy}")
    if len(points) <= n:
        return list(points)

    chain = _VertexChain(points)
    if strategy == "heap":
        _simplify_heap(chain, n)
    else:
        _simplify_scan(chain, n)

    result = chain.remaining()
    if len(result) < 2:
        result = [result[0], result[0]]
    return result
