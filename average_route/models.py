"""Core value types shared by the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class GeoPoint:
    """Geographic position in degrees."""

    longitude: float
    latitude: float


@dataclass(frozen=True)
class RouteInfo:
    """Identity of a recorded route.

    ``length`` (km) is derived from the trajectory at ingestion and deliberately
    left out of equality and hashing, so two records for the same vessel and
    segments are the same route regardless of their measured length.
    """

    vessel_id: str
    from_seq: str
    to_seq: str
    length: float = field(default=0.0, compare=False, hash=False)

    def describe(self) -> str:
        return f"vessel={self.vessel_id} from_seq={self.from_seq} to_seq={self.to_seq}"


# Insertion order is significant: it fixes the row order of the simplified matrix.
RouteSet = Dict[RouteInfo, List[GeoPoint]]
