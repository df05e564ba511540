import numpy as np
import pytest

from average_route.errors import EmptyInputError
from average_route.geodesy import to_array
from average_route.kmeans import assign_points, run_kmeans
from average_route.models import GeoPoint

A = GeoPoint(0.0, 0.0)
B = GeoPoint(1.0, 1.0)


def test_cloud_equal_to_seeds_converges_in_one_iteration():
    seeds = [A, GeoPoint(0.5, 0.4), B]
    result = run_kmeans(seeds, list(seeds))
    assert result.iterations == 1
    assert result.converged
    assert result.centroids == seeds


def test_empty_cluster_keeps_previous_centroid():
    result = run_kmeans([A, A, B], [A, B])
    assert result.centroids == [A, A, B]
    assert result.empty_cluster_events == 1
    assert result.converged


def test_moves_centroid_then_converges():
    points = [GeoPoint(1.0, 0.0), GeoPoint(2.0, 0.0)]
    result = run_kmeans([A], points)
    assert result.converged
    assert result.iterations == 2
    assert result.centroids[0].longitude == pytest.approx(1.5)
    assert result.centroids[0].latitude == pytest.approx(0.0, abs=1e-12)


def test_iteration_cap_reports_not_converged():
    points = [GeoPoint(1.0, 0.0), GeoPoint(2.0, 0.0)]
    result = run_kmeans([A], points, max_iterations=1)
    assert result.iterations == 1
    assert not result.converged
    assert result.shift_km > 0


def test_tolerance_stops_early():
    points = [GeoPoint(1.0, 0.0), GeoPoint(2.0, 0.0)]
    result = run_kmeans([A], points, tolerance_km=1000.0)
    assert result.iterations == 1
    assert result.converged


def test_invalid_inputs():
    with pytest.raises(EmptyInputError):
        run_kmeans([], [A])
    with pytest.raises(EmptyInputError):
        run_kmeans([A], [])
    with pytest.raises(ValueError):
        run_kmeans([A], [A], max_iterations=0)
    with pytest.raises(ValueError):
        run_kmeans([A], [A], tolerance_km=-1.0)


def test_assignment_independent_of_chunk_size():
    rng = np.random.default_rng(3)
    points = rng.uniform(-5, 5, size=(50, 2))
    centers = rng.uniform(-5, 5, size=(6, 2))
    assert np.array_equal(assign_points(points, centers, chunk_size=1), assign_points(points, centers))


def test_assignment_ties_go_to_lowest_index():
    labels = assign_points(to_array([GeoPoint(0.5, 0.0)]), to_array([A, GeoPoint(1.0, 0.0)]))
    assert labels.tolist() == [0]
