from . import errors
from . import geometric_primitives as gp

import numpy as np


def check_coeffs(coeffs_x, coeffs_y):
    coeffs_x = np.asarray(coeffs_x, dtype=float)
    coeffs_y = np.asarray(coeffs_y, dtype=float)
    if coeffs_x.ndim != 2 or coeffs_x.shape[1] != 4:
        raise errors.InvalidInputError(f'coeffs_x has to have shape (no_splines, 4) ({coeffs_x.shape} given)')
    if coeffs_y.shape != coeffs_x.shape:
        raise errors.InvalidInputError(
            f'coefficient matrices have to have the same shape ({coeffs_x.shape} != {coeffs_y.shape})'
        )
    return coeffs_x, coeffs_y


def _check_samples(coeffs_x, ind_spls, t_spls):
    ind_spls = np.asarray(ind_spls, dtype=int).ravel()
    t_spls = np.asarray(t_spls, dtype=float).ravel()
    if ind_spls.shape != t_spls.shape:
        raise errors.InvalidInputError(
            f'ind_spls and t_spls have to have the same length ({ind_spls.shape[0]} != {t_spls.shape[0]})'
        )
    if ind_spls.size > 0 and (ind_spls.min() < 0 or ind_spls.max() >= coeffs_x.shape[0]):
        raise errors.InvalidInputError(f'spline indices have to be in [0, {coeffs_x.shape[0] - 1}]')
    return ind_spls, t_spls


def _eval_derivatives(coeffs_x, coeffs_y, ind_spls, t_spls):
    """
    Returns first and second derivatives (x', y', x'', y'') at the given spline positions.
    """
    cx = coeffs_x[ind_spls]
    cy = coeffs_y[ind_spls]
    x_d = cx[:, 1] + 2.0 * cx[:, 2] * t_spls + 3.0 * cx[:, 3] * t_spls ** 2
    y_d = cy[:, 1] + 2.0 * cy[:, 2] * t_spls + 3.0 * cy[:, 3] * t_spls ** 2
    x_dd = 2.0 * cx[:, 2] + 6.0 * cx[:, 3] * t_spls
    y_dd = 2.0 * cy[:, 2] + 6.0 * cy[:, 3] * t_spls
    return x_d, y_d, x_dd, y_dd


def eval_splines(coeffs: np.ndarray, t: np.ndarray) -> np.ndarray:
    """
    Evaluates every spline row of coeffs at the matching t value.
    """
    return coeffs[:, 0] + coeffs[:, 1] * t + coeffs[:, 2] * t ** 2 + coeffs[:, 3] * t ** 3


def calc_spline_positions(coeffs_x, coeffs_y, ind_spls, t_spls) -> np.ndarray:
    """
    Returns array of shape (n, 2) with the points at spline indices ind_spls and spline coordinates t_spls.
    """
    coeffs_x, coeffs_y = check_coeffs(coeffs_x, coeffs_y)
    ind_spls, t_spls = _check_samples(coeffs_x, ind_spls, t_spls)
    return np.column_stack((
        eval_splines(coeffs_x[ind_spls], t_spls),
        eval_splines(coeffs_y[ind_spls], t_spls),
    ))


def calc_spline_headings(coeffs_x, coeffs_y, ind_spls, t_spls) -> np.ndarray:
    """
    Returns headings (0 = north, normalized into (-pi, pi]) at the given spline positions.
    """
    coeffs_x, coeffs_y = check_coeffs(coeffs_x, coeffs_y)
    ind_spls, t_spls = _check_samples(coeffs_x, ind_spls, t_spls)
    x_d, y_d, _, _ = _eval_derivatives(coeffs_x, coeffs_y, ind_spls, t_spls)
    return np.asarray([gp.math_angle_to_heading(angle) for angle in np.arctan2(y_d, x_d)])


def calc_spline_curvatures(coeffs_x, coeffs_y, ind_spls, t_spls) -> np.ndarray:
    """
    Returns signed curvatures (positive for left turns) at the given spline positions.
    Curvature is 0 where the spline speed vanishes.
    """
    coeffs_x, coeffs_y = check_coeffs(coeffs_x, coeffs_y)
    ind_spls, t_spls = _check_samples(coeffs_x, ind_spls, t_spls)
    x_d, y_d, x_dd, y_dd = _eval_derivatives(coeffs_x, coeffs_y, ind_spls, t_spls)

    denominator = (x_d ** 2 + y_d ** 2) ** 1.5
    kappa = np.zeros_like(denominator)
    valid = np.abs(denominator) >= gp.CURVATURE_TOLERANCE
    kappa[valid] = (x_d[valid] * y_dd[valid] - y_d[valid] * x_dd[valid]) / denominator[valid]
    return kappa


def calc_spline_lengths(coeffs_x, coeffs_y, quickndirty: bool = False, no_interp_points: int = 15) -> np.ndarray:
    """
    Returns length of every spline.
    Params:
      - quickndirty - use the chord between t = 0 and t = 1 instead of integrating
      - no_interp_points - number of points along each spline summed up for the length
    """
    coeffs_x, coeffs_y = check_coeffs(coeffs_x, coeffs_y)

    if quickndirty:
        return np.hypot(np.sum(coeffs_x[:, 1:], axis=1), np.sum(coeffs_y[:, 1:], axis=1))

    if no_interp_points < 2:
        raise errors.InvalidInputError(f'no_interp_points has to be >= 2 (value {no_interp_points} is invalid)')

    t_steps = np.linspace(0.0, 1.0, no_interp_points)
    powers = np.vstack((np.ones_like(t_steps), t_steps, t_steps ** 2, t_steps ** 3))
    x_coords = coeffs_x @ powers
    y_coords = coeffs_y @ powers
    return np.sum(np.hypot(np.diff(x_coords, axis=1), np.diff(y_coords, axis=1)), axis=1)
