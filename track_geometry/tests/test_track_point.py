from .. import geometric_primitives as gp
from .. import track_point as tp

import math
import pytest


def test_default_track_point_is_unset():
    p = tp.TrackPoint()
    for field in tp.TrackPoint.FIELDS:
        assert getattr(p, field) is None
    assert not p.has_s
    assert not p.has_psi
    assert not p.has_kappa
    assert not p.has_widths


def test_zero_values_are_set():
    p = tp.TrackPoint(0.0, 0.0, psi=0.0, wl=0.0, wr=0.0, kappa=0.0, s=0.0)
    assert p.has_s
    assert p.has_psi
    assert p.has_kappa
    assert p.has_widths


@pytest.mark.parametrize(
    'p, has_widths',
    [
        (tp.TrackPoint(1, 2, wl=1.0), False),
        (tp.TrackPoint(1, 2, wr=1.0), False),
        (tp.TrackPoint(1, 2, wl=1.0, wr=2.0), True),
    ]
)
def test_has_widths(p, has_widths):
    assert p.has_widths == has_widths


def test_constructor_field_order():
    p = tp.TrackPoint(1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0)
    assert (p.x, p.y, p.psi, p.wl, p.wr, p.kappa, p.s) == (1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0)
    assert p.to_point() == gp.Point(1.0, 2.0)


def test_copy_is_independent():
    p = tp.TrackPoint(1, 2, psi=0.5)
    q = p.copy()
    q.psi = 1.0
    assert p.psi == 0.5
    assert p != q


@pytest.mark.parametrize(
    'p1, p2, t, expected_result',
    [
        (
            tp.TrackPoint(0, 0, s=0),
            tp.TrackPoint(1, 0, s=1),
            0.5,
            tp.TrackPoint(0.5, 0, s=0.5),
        ),
        (
            tp.TrackPoint(0, 0, wl=1, wr=3, kappa=0.0),
            tp.TrackPoint(1, 0, wl=2, wr=4, kappa=1.0),
            0.5,
            tp.TrackPoint(0.5, 0, wl=1.5, wr=3.5, kappa=0.5),
        ),
        (
            tp.TrackPoint(0, 0, psi=1.0, s=0),
            tp.TrackPoint(1, 0, s=1),
            0.25,
            tp.TrackPoint(0.25, 0, s=0.25),
        ),
    ]
)
def test_interpolate_track_points(p1, p2, t, expected_result):
    assert tp.interpolate_track_points(p1, p2, t) == expected_result


@pytest.mark.parametrize(
    'psi1, psi2',
    [
        (math.pi - 0.1, -math.pi + 0.1),
        (-math.pi + 0.2, math.pi - 0.2),
        (math.pi - 0.3, -math.pi + 0.1),
    ]
)
def test_heading_interpolation_takes_short_way(psi1, psi2):
    p1 = tp.TrackPoint(0, 0, psi=psi1)
    p2 = tp.TrackPoint(1, 0, psi=psi2)
    separation = math.fabs(gp.normalize_psi(psi2 - psi1))
    for t in (0.0, 0.25, 0.5, 0.75, 1.0):
        psi = tp.interpolate_track_points(p1, p2, t).psi
        assert -math.pi < psi <= math.pi
        assert math.fabs(gp.normalize_psi(psi - psi1)) <= separation + gp.EPS
        assert math.fabs(gp.normalize_psi(psi - psi2)) <= separation + gp.EPS
