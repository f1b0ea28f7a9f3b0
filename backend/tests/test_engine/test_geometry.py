"""Tests for leaf geometry helpers."""

import numpy as np
import pytest

from pathanatomy.utils.geometry import (
    circumcircle,
    dedup_axis,
    fold_angle,
    grid_extents,
    max_area_triple,
    round_half_up,
    trim_polyline,
)


def test_dedup_keeps_first_of_each_bucket():
    assert dedup_axis([0.0, 1.0, 50.0, 51.0], tolerance=6.0, cap=18) == [0, 2]


def test_dedup_cap():
    values = [float(i * 10) for i in range(30)]
    assert len(dedup_axis(values, tolerance=6.0, cap=18)) == 18


def test_collinear_circumcircle_is_zero():
    center, radius = circumcircle(np.array([0.0, 0.0]), np.array([5.0, 5.0]), np.array([10.0, 10.0]))
    assert radius == 0.0
    assert np.allclose(center, [0.0, 0.0])


def test_right_triangle_circumcircle():
    center, radius = circumcircle(np.array([0.0, 0.0]), np.array([10.0, 0.0]), np.array([0.0, 10.0]))
    assert np.allclose(center, [5.0, 5.0])
    assert radius == pytest.approx(np.hypot(5.0, 5.0))


def test_grid_extents_pad_and_round():
    ext = grid_extents(np.array([[0.0, 0.0], [100.0, 100.0]]))
    # pad = max(30, 0.15 * 141.42) = 30
    assert ext == (-30.0, 130.0, -30.0, 130.0)


def test_grid_extents_degenerate_span():
    ext = grid_extents(np.array([[10.0, 10.0]]))
    assert ext.width == 60.0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(-2.6) == -3


def test_fold_angle():
    assert fold_angle(135.0) == -45.0
    assert fold_angle(-90.0) == 90.0
    assert fold_angle(45.0) == 45.0


def test_max_area_triple_square():
    (triple, area) = max_area_triple(np.array([(0, 0), (100, 0), (100, 100), (0, 100)], dtype=float))
    assert triple == (0, 1, 2)
    assert area == 10000.0


def test_trim_polyline_half():
    pts = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0]])
    assert np.allclose(trim_polyline(pts, 0.5)[-1], [10.0, 0.0])
    assert np.allclose(trim_polyline(pts, 1.0), pts)
    assert np.allclose(trim_polyline(pts, 0.25), [[0.0, 0.0], [5.0, 0.0]])
