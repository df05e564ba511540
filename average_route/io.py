"""Input/output helpers for the average route pipeline.

Covers reading historical routes from CSV (with direction normalisation and
dropping of unparsable records), writing the average route as GeoJSON, and
optionally saving it as CSV.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from average_route.errors import MalformedRecordError
from average_route.geodesy import route_length
from average_route.models import GeoPoint, RouteInfo, RouteSet

# Column positions in the historical routes CSV.
VESSEL_ID_COL = 0
FROM_SEQ_COL = 1
TO_SEQ_COL = 2
FROM_PORT_COL = 3
TO_PORT_COL = 4
POINTS_COL = 7
NUM_COLUMNS = POINTS_COL + 1

# Each point is "[lon, lat, epoch, speed]"; only lon/lat are used.
POINT_PATTERN = re.compile(
    r"\[?(-?[0-9]*[.]?[0-9]+),\s?(-?[0-9]*[.]?[0-9]+),\s[0-9]+,\s?[0-9]*[.]?[0-9]+\]"
)


@dataclass(frozen=True)
class DroppedRecord:
    """A CSV record that did not yield any coordinates."""

    row_number: int
    vessel_id: str
    from_seq: str
    to_seq: str
    reason: str


@dataclass
class ReadResult:
    routes: RouteSet
    dropped: List[DroppedRecord] = field(default_factory=list)


def extract_coordinates(points_str: str) -> List[GeoPoint]:
    """Parse all lon/lat pairs from a point payload string."""

    return [GeoPoint(float(lon), float(lat)) for lon, lat in POINT_PATTERN.findall(points_str)]


def parse_points(points_str: str) -> List[GeoPoint]:
    coordinates = extract_coordinates(points_str)
    if not coordinates:
        raise MalformedRecordError("no parseable coordinates")
    return coordinates


def _cell(row: Sequence[object], idx: int) -> str:
    value = row[idx]
    return value if isinstance(value, str) else ""


def read_routes(path: str | Path, reverse_from_port: str | None = "DEBRV") -> ReadResult:
    """
    Read routes from the historical routes CSV.

    Records whose from-port equals ``reverse_from_port`` have their points
    reversed so that every route runs in the same direction. Records without any
    parseable point are dropped and reported in :attr:`ReadResult.dropped`. A
    later record with the same identity replaces an earlier one in place.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Routes file not found: {path}")

    logging.info("Reading routes from %s", path.resolve())
    extra_field_rows: List[List[str]] = []

    def _truncate(fields: List[str]) -> List[str]:
        extra_field_rows.append(fields)
        return fields[:NUM_COLUMNS]

    try:
        df = pd.read_csv(
            path,
            header=None,
            names=list(range(NUM_COLUMNS)),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_truncate,
        )
    except pd.errors.EmptyDataError:
        logging.warning("Routes file %s is empty", path)
        return ReadResult(routes={})
    except pd.errors.ParserError as exc:
        raise MalformedRecordError(f"Cannot parse routes file {path}: {exc}") from exc

    if extra_field_rows:
        logging.warning("Ignored trailing fields beyond column %d in %d records", NUM_COLUMNS, len(extra_field_rows))

    collected: Dict[Tuple[str, str, str], Tuple[RouteInfo, List[GeoPoint]]] = {}
    dropped: List[DroppedRecord] = []
    for row_number, row in enumerate(df.itertuples(index=False, name=None), start=1):
        vessel_id = _cell(row, VESSEL_ID_COL)
        from_seq = _cell(row, FROM_SEQ_COL)
        to_seq = _cell(row, TO_SEQ_COL)
        try:
            coordinates = parse_points(_cell(row, POINTS_COL))
        except MalformedRecordError as exc:
            dropped.append(DroppedRecord(row_number, vessel_id, from_seq, to_seq, reason=str(exc)))
            continue

        if reverse_from_port and _cell(row, FROM_PORT_COL) == reverse_from_port:
            coordinates.reverse()

        info = RouteInfo(vessel_id, from_seq, to_seq, length=route_length(coordinates))
        key = (vessel_id, from_seq, to_seq)
        if key in collected:
            logging.warning("Duplicate route %s on row %d replaces the earlier record", info.describe(), row_number)
        collected[key] = (info, coordinates)

    if dropped:
        logging.info("Dropped %d records without parseable coordinates", len(dropped))
    routes: RouteSet = {info: coordinates for info, coordinates in collected.values()}
    logging.info("Read %d routes from %s", len(routes), path)
    return ReadResult(routes=routes, dropped=dropped)


def route_feature_collection(
    route: Sequence[GeoPoint],
    from_seq: str = "",
    to_seq: str = "",
) -> Dict[str, object]:
    """Build a GeoJSON FeatureCollection holding the route as one LineString."""

    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[p.longitude, p.latitude] for p in route],
                },
                "properties": {
                    "Description": "Avg route",
                    "from_seq": from_seq,
                    "to_seq": to_seq,
                    "stroke-width": "3",
                    "stroke": "black",
                    "stroke-opacity": 1,
                },
            }
        ],
    }


def write_geojson(route: Sequence[GeoPoint], path: str | Path, from_seq: str = "", to_seq: str = "") -> None:
    """Write the route to ``path``; the target only appears once fully written."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(route_feature_collection(route, from_seq, to_seq), indent=2)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    logging.info("Wrote average route with %d points to %s", len(route), path)


def save_route_csv(route: Sequence[GeoPoint], path: str | Path) -> None:
    """Persist the route as a step/longitude/latitude CSV."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(
        {
            "step": range(len(route)),
            "longitude": [p.longitude for p in route],
            "latitude": [p.latitude for p in route],
        }
    )
    df.to_csv(path, index=False)
    logging.info("Saved %d rows to %s", len(df), path)
