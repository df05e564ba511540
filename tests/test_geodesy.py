import math

import numpy as np
import pytest

from average_route.errors import EmptyInputError, LengthMismatchError
from average_route.geodesy import (
    AVERAGE_EARTH_RADIUS_KM,
    central_coordinate,
    distance,
    haversine_matrix,
    nearest_index,
    route_length,
    to_array,
    vector_distance,
)
from average_route.kmeans import assign_points
from average_route.models import GeoPoint

POINTS = [GeoPoint(8.8, 53.1), GeoPoint(9.99, 53.55), GeoPoint(-3.7, 40.4), GeoPoint(151.2, -33.9)]


def test_distance_to_self_is_zero():
    for p in POINTS:
        assert distance(p, p) == 0


def test_distance_is_symmetric():
    for p in POINTS:
        for q in POINTS:
            assert distance(p, q) == pytest.approx(distance(q, p))


def test_one_degree_along_equator():
    assert distance(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0)) == pytest.approx(
        AVERAGE_EARTH_RADIUS_KM * math.radians(1.0)
    )


def test_route_length_of_short_routes_is_zero():
    assert route_length([]) == 0
    assert route_length([POINTS[0]]) == 0


def test_route_length_sums_legs():
    a, b, c = POINTS[:3]
    assert route_length([a, b, c]) == pytest.approx(distance(a, b) + distance(b, c))


def test_central_coordinate_of_repeated_point():
    # The unit-vector round trip is exact only for special points; compare approximately.
    p = GeoPoint(9.5, 53.4)
    center = central_coordinate([p, p, p])
    assert center.longitude == pytest.approx(p.longitude)
    assert center.latitude == pytest.approx(p.latitude)


def test_central_coordinate_of_repeated_origin_is_exact():
    p = GeoPoint(0.0, 0.0)
    assert central_coordinate([p, p, p]) == p


def test_central_coordinate_single_point_unchanged():
    p = GeoPoint(12.345678901, -45.678901234)
    assert central_coordinate([p]) is p


def test_central_coordinate_symmetric_pair():
    center = central_coordinate([GeoPoint(10.0, 0.0), GeoPoint(-10.0, 0.0)])
    assert center.longitude == pytest.approx(0.0, abs=1e-12)
    assert center.latitude == pytest.approx(0.0, abs=1e-12)


def test_central_coordinate_empty_raises():
    with pytest.raises(EmptyInputError):
        central_coordinate([])


def test_nearest_index_prefers_first_on_ties():
    c = GeoPoint(1.0, 1.0)
    assert nearest_index(GeoPoint(0.0, 0.0), [c, c]) == 0
    assert nearest_index(GeoPoint(5.0, 5.0), [GeoPoint(0.0, 0.0), GeoPoint(5.1, 5.0), GeoPoint(5.0, 5.0)]) == 2


def test_nearest_index_empty_raises():
    with pytest.raises(EmptyInputError):
        nearest_index(POINTS[0], [])


def test_vector_distance():
    assert vector_distance(POINTS, POINTS) == 0
    shifted = POINTS[1:] + POINTS[:1]
    expected = sum(distance(a, b) for a, b in zip(POINTS, shifted))
    assert vector_distance(POINTS, shifted) == pytest.approx(expected)


def test_vector_distance_length_mismatch():
    with pytest.raises(LengthMismatchError):
        vector_distance(POINTS, POINTS[:2])


def test_haversine_matrix_matches_scalar_distance():
    D = haversine_matrix(to_array(POINTS), to_array(POINTS[:2]))
    assert D.shape == (4, 2)
    expected = np.array([[distance(p, c) for c in POINTS[:2]] for p in POINTS])
    assert np.allclose(D, expected)


def _mirrored_cases():
    # Dyadic offsets keep both longitude deltas exactly opposite, so the two centers tie.
    for x in (0.5, 3.125, 17.25, -42.75):
        for dx in (0.0625, 0.6875, 1.5):
            for lat_p, lat_c in ((-39.6014, -42.0221), (53.55, 53.1), (0.0, 12.3456)):
                yield GeoPoint(x, lat_p), GeoPoint(x - dx, lat_c), GeoPoint(x + dx, lat_c)


def test_nearest_index_mirrored_centers_prefer_first():
    for p, c0, c1 in _mirrored_cases():
        assert distance(p, c0) == distance(p, c1)
        assert nearest_index(p, [c0, c1]) == 0


def test_haversine_matrix_keeps_mirrored_ties():
    for p, c0, c1 in _mirrored_cases():
        D = haversine_matrix(to_array([p]), to_array([c0, c1]))
        assert D[0, 0] == D[0, 1]
        assert int(np.argmin(D[0])) == 0


def test_nearest_index_reported_tie():
    p = GeoPoint(3.125, -39.6014)
    c0 = GeoPoint(2.4375, -42.0221)
    c1 = GeoPoint(3.8125, -42.0221)
    assert nearest_index(p, [c0, c1]) == 0
    assert assign_points(to_array([p]), to_array([c0, c1])).tolist() == [0]
