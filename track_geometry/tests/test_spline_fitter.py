from .. import errors
from .. import geometric_primitives as gp
from .. import spline_fitter as sf

import math
import numpy as np
import pytest
import scipy.linalg


CLOSED_SQUARE = [
    [0, 0],
    [1, 0],
    [1, 1],
    [0, 1],
    [0, 0],
]

OPEN_PATH = [
    [0, 0],
    [2, 1],
    [3, 3],
    [6, 4],
    [7, 7],
]


def closed_polygon(no_points, radius):
    angles = np.linspace(0.0, 2 * math.pi, no_points, endpoint=False)
    path = np.column_stack((radius * np.cos(angles), radius * np.sin(angles)))
    return np.vstack((path, path[:1]))


def first_derivatives(coeffs):
    # derivative at t = 0 and t = 1 of every spline
    return coeffs[:, 1], coeffs[:, 1] + 2 * coeffs[:, 2] + 3 * coeffs[:, 3]


def second_derivatives(coeffs):
    return 2 * coeffs[:, 2], 2 * coeffs[:, 2] + 6 * coeffs[:, 3]


def el_lengths_of(path):
    path = np.asarray(path, dtype=float)
    return np.hypot(np.diff(path[:, 0]), np.diff(path[:, 1]))


@pytest.mark.parametrize(
    'path, psi_s, psi_e',
    [
        (CLOSED_SQUARE, None, None),
        (OPEN_PATH, 0.0, -math.pi / 2),
        (closed_polygon(12, 5.0), None, None),
    ]
)
def test_splines_pass_through_points(path, psi_s, psi_e):
    result = sf.calc_splines(path, psi_s=psi_s, psi_e=psi_e)
    path = np.asarray(path, dtype=float)
    assert result.no_splines == path.shape[0] - 1
    assert np.allclose(result.coeffs_x[:, 0], path[:-1, 0], atol=1e-9)
    assert np.allclose(result.coeffs_y[:, 0], path[:-1, 1], atol=1e-9)
    assert np.allclose(np.sum(result.coeffs_x, axis=1), path[1:, 0], atol=1e-9)
    assert np.allclose(np.sum(result.coeffs_y, axis=1), path[1:, 1], atol=1e-9)


@pytest.mark.parametrize(
    'path, psi_s, psi_e',
    [
        (CLOSED_SQUARE, None, None),
        (OPEN_PATH, 0.0, -math.pi / 2),
    ]
)
def test_scaled_continuity(path, psi_s, psi_e):
    result = sf.calc_splines(path, psi_s=psi_s, psi_e=psi_e)
    el_lengths = el_lengths_of(path)

    for coeffs in (result.coeffs_x, result.coeffs_y):
        d_start, d_end = first_derivatives(coeffs)
        dd_start, dd_end = second_derivatives(coeffs)
        for i in range(result.no_splines - 1):
            assert math.fabs(d_end[i] / el_lengths[i] - d_start[i + 1] / el_lengths[i + 1]) < 1e-9
            assert math.fabs(dd_end[i] / el_lengths[i] ** 2 - dd_start[i + 1] / el_lengths[i + 1] ** 2) < 1e-9


def test_closed_seam_continuity():
    path = [[0, 0], [2, 0], [3, 2], [1, 3], [0, 0]]
    result = sf.calc_splines(path)
    el_lengths = el_lengths_of(path)
    assert result.closed

    for coeffs in (result.coeffs_x, result.coeffs_y):
        d_start, d_end = first_derivatives(coeffs)
        dd_start, dd_end = second_derivatives(coeffs)
        assert math.fabs(d_end[-1] / el_lengths[-1] - d_start[0] / el_lengths[0]) < 1e-9
        assert math.fabs(dd_end[-1] / el_lengths[-1] ** 2 - dd_start[0] / el_lengths[0] ** 2) < 1e-9


@pytest.mark.parametrize(
    'psi_s, psi_e',
    [
        (0.0, 0.0),
        (-math.pi / 2, math.pi),
        (math.pi / 4, -3 * math.pi / 4),
    ]
)
def test_open_boundary_headings(psi_s, psi_e):
    result = sf.calc_splines(OPEN_PATH, psi_s=psi_s, psi_e=psi_e)
    assert not result.closed
    d_start_x, _ = first_derivatives(result.coeffs_x)
    d_start_y, _ = first_derivatives(result.coeffs_y)
    _, d_end_x = first_derivatives(result.coeffs_x)
    _, d_end_y = first_derivatives(result.coeffs_y)

    heading_s = gp.math_angle_to_heading(math.atan2(d_start_y[0], d_start_x[0]))
    heading_e = gp.math_angle_to_heading(math.atan2(d_end_y[-1], d_end_x[-1]))
    assert math.fabs(gp.normalize_psi(heading_s - psi_s)) < 1e-9
    assert math.fabs(gp.normalize_psi(heading_e - psi_e)) < 1e-9


def test_collinear_points_give_straight_splines():
    path = [[0, 0], [1, 0], [3, 0], [4, 0]]
    result = sf.calc_splines(path, psi_s=-math.pi / 2, psi_e=-math.pi / 2)
    assert np.allclose(result.coeffs_y, 0, atol=1e-9)
    assert np.allclose(result.coeffs_x[:, 2:], 0, atol=1e-9)
    assert np.allclose(result.coeffs_x[:, 1], [1, 2, 1], atol=1e-9)


def test_closed_polygon_is_symmetric():
    radius = 10.0
    result = sf.calc_splines(closed_polygon(36, radius))
    d_start_x, _ = first_derivatives(result.coeffs_x)
    d_start_y, _ = first_derivatives(result.coeffs_y)
    speeds = np.hypot(d_start_x, d_start_y)
    assert np.allclose(speeds, speeds[0], atol=1e-9)


def test_normal_vectors():
    result = sf.calc_splines(CLOSED_SQUARE)
    norms = np.hypot(result.normvec_normalized[:, 0], result.normvec_normalized[:, 1])
    assert np.allclose(norms, 1, atol=1e-9)

    # normal points to the right of the first spline which starts in +x direction
    assert result.normvec_normalized[0, 1] < 0


def test_system_matrix_shape():
    result = sf.calc_splines(CLOSED_SQUARE)
    assert result.M.shape == (16, 16)


def test_result_is_read_only():
    result = sf.calc_splines(CLOSED_SQUARE)
    with pytest.raises(ValueError):
        result.coeffs_x[0, 0] = 1.0


def test_closed_detection_requires_missing_headings():
    result = sf.calc_splines(CLOSED_SQUARE, psi_s=-math.pi / 2, psi_e=0.0)
    assert not result.closed


def test_without_dist_scaling():
    fitter = sf.SplineFitter(use_dist_scaling=False)
    result = fitter.fit(OPEN_PATH, psi_s=0.0, psi_e=0.0)
    for coeffs in (result.coeffs_x, result.coeffs_y):
        d_start, d_end = first_derivatives(coeffs)
        dd_start, dd_end = second_derivatives(coeffs)
        assert np.allclose(d_end[:-1], d_start[1:], atol=1e-9)
        assert np.allclose(dd_end[:-1], dd_start[1:], atol=1e-9)


@pytest.mark.parametrize(
    'path, psi_s, psi_e',
    [
        (OPEN_PATH, None, None),
        (OPEN_PATH, 0.0, None),
        (OPEN_PATH, None, 0.0),
    ]
)
def test_open_path_needs_headings(path, psi_s, psi_e):
    with pytest.raises(errors.InvalidInputError):
        sf.calc_splines(path, psi_s=psi_s, psi_e=psi_e)


@pytest.mark.parametrize(
    'path',
    [
        [[0, 0]],
        [[0, 0, 0], [1, 1, 1]],
        [0, 1, 2],
        [[0, 0], [1, np.nan], [0, 0]],
    ]
)
def test_invalid_path(path):
    with pytest.raises(errors.InvalidInputError):
        sf.calc_splines(path, psi_s=0.0, psi_e=0.0)


@pytest.mark.parametrize(
    'el_lengths',
    [
        [1.0, 1.0],
        [1.0, 1.0, 1.0, 1.0, 1.0],
        [1.0, np.inf, 1.0, 1.0],
    ]
)
def test_invalid_el_lengths(el_lengths):
    with pytest.raises(errors.InvalidInputError):
        sf.calc_splines(CLOSED_SQUARE, el_lengths=el_lengths)


def test_zero_element_length():
    path = [[0, 0], [1, 0], [1, 0], [0, 1], [0, 0]]
    with pytest.raises(errors.DegenerateGeometryError):
        sf.calc_splines(path)


def test_solver_failure(monkeypatch):
    def failing_solve(a, b):
        raise np.linalg.LinAlgError('Matrix is singular.')

    monkeypatch.setattr(scipy.linalg, 'solve', failing_solve)
    with pytest.raises(errors.SolverFailureError):
        sf.calc_splines(CLOSED_SQUARE)


def test_non_finite_solution(monkeypatch):
    def nan_solve(a, b):
        return np.full(b.shape, np.nan)

    monkeypatch.setattr(scipy.linalg, 'solve', nan_solve)
    with pytest.raises(errors.SolverFailureError):
        sf.calc_splines(CLOSED_SQUARE)
