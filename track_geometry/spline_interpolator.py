from . import errors
from . import geometric_primitives as gp
from . import spline_geometry as sg
from .track import Track
from .track_point import TrackPoint

import logging
import math
import numpy as np


logger = logging.getLogger(__name__)


class SplineInterpolation:
    """
    Points sampled on splines.
      - path_interp - array of shape (n, 2)
      - spline_inds - index of the spline every point lies on
      - t_values - spline coordinate of every point
      - dists_interp - distance from the path start to every point (None for fixed step numbers)
    """

    def __init__(self, path_interp, spline_inds, t_values, dists_interp=None):
        self.path_interp = path_interp
        self.spline_inds = spline_inds
        self.t_values = t_values
        self.dists_interp = dists_interp

    def __len__(self):
        return self.path_interp.shape[0]

    def __str__(self):
        return f'SplineInterpolation(size={len(self)})'

    def __repr__(self):
        return str(self)


def _interp_approx_stepsize(coeffs_x, coeffs_y, spline_lengths, stepsize_approx):
    no_splines = coeffs_x.shape[0]
    dists_cum = np.cumsum(spline_lengths)
    no_interp_points = int(math.ceil(dists_cum[-1] / stepsize_approx)) + 1
    dists_interp = np.linspace(0.0, dists_cum[-1], no_interp_points)

    spline_inds = np.zeros(no_interp_points, dtype=int)
    t_values = np.zeros(no_interp_points)

    for i in range(no_interp_points - 1):
        # first spline whose end lies beyond the current distance
        j = min(int(np.searchsorted(dists_cum, dists_interp[i], side='right')), no_splines - 1)
        dist_start = dists_cum[j - 1] if j > 0 else 0.0
        spline_inds[i] = j
        t_values[i] = (dists_interp[i] - dist_start) / spline_lengths[j]

    spline_inds[-1] = no_splines - 1
    t_values[-1] = 1.0
    return spline_inds, t_values, dists_interp


def _interp_fixed_stepnum(no_splines, stepnum_fixed):
    spline_inds = []
    t_values = []
    for i, stepnum in enumerate(stepnum_fixed):
        cur_t_values = np.linspace(0.0, 1.0, stepnum)
        if i < no_splines - 1:
            # joint point is the first point of the next spline
            cur_t_values = cur_t_values[:-1]
        spline_inds.append(np.full(cur_t_values.shape[0], i, dtype=int))
        t_values.append(cur_t_values)
    return np.concatenate(spline_inds), np.concatenate(t_values)


def interp_splines(
    coeffs_x,
    coeffs_y,
    spline_lengths=None,
    incl_last_point: bool = False,
    stepsize_approx: float = None,
    stepnum_fixed=None,
) -> SplineInterpolation:
    """
    Samples points on the splines.
    Params:
      - coeffs_x, coeffs_y - coefficient matrices of shape (no_splines, 4)
      - spline_lengths - lengths of the splines, calculated if omitted (stepsize_approx only)
      - incl_last_point - keep the point at t = 1 of the last spline
      - stepsize_approx - desired distance between points (approximately equal steps over the whole path)
      - stepnum_fixed - number of points on every spline (including both end points)
    Exactly one of stepsize_approx and stepnum_fixed has to be given.
    """
    coeffs_x, coeffs_y = sg.check_coeffs(coeffs_x, coeffs_y)
    no_splines = coeffs_x.shape[0]
    if no_splines == 0:
        raise errors.InvalidInputError('at least one spline is required')

    if (stepsize_approx is None) == (stepnum_fixed is None):
        raise errors.InvalidInputError('provide either stepsize_approx or stepnum_fixed')

    if stepsize_approx is not None:
        if stepsize_approx <= 0:
            raise errors.InvalidInputError(f'stepsize_approx has to be positive (value {stepsize_approx} is invalid)')
        if spline_lengths is None:
            spline_lengths = sg.calc_spline_lengths(coeffs_x, coeffs_y)
        spline_lengths = np.asarray(spline_lengths, dtype=float)
        if spline_lengths.shape != (no_splines,):
            raise errors.InvalidInputError(
                f'spline_lengths has to contain one value per spline ({spline_lengths.shape} given)'
            )
        if np.any(spline_lengths < gp.EPS):
            raise errors.DegenerateGeometryError('splines have to have positive length for stepsize interpolation')
        spline_inds, t_values, dists_interp = _interp_approx_stepsize(
            coeffs_x, coeffs_y, spline_lengths, stepsize_approx,
        )
    else:
        stepnum_fixed = [int(n) for n in stepnum_fixed]
        if len(stepnum_fixed) != no_splines:
            raise errors.InvalidInputError(
                f'stepnum_fixed has to contain one value per spline ({len(stepnum_fixed)} != {no_splines})'
            )
        if min(stepnum_fixed) < 2:
            raise errors.InvalidInputError('stepnum_fixed values have to be >= 2')
        spline_inds, t_values = _interp_fixed_stepnum(no_splines, stepnum_fixed)
        dists_interp = None

    if not incl_last_point:
        spline_inds = spline_inds[:-1]
        t_values = t_values[:-1]
        if dists_interp is not None:
            dists_interp = dists_interp[:-1]

    path_interp = sg.calc_spline_positions(coeffs_x, coeffs_y, spline_inds, t_values)
    logger.debug('sampled %d points on %d splines', path_interp.shape[0], no_splines)
    return SplineInterpolation(path_interp, spline_inds, t_values, dists_interp)


def track_from_splines(spline_result, stepsize: float, closed: bool = None) -> Track:
    """
    Samples fitted splines with approximately equal steps and returns a track with s, psi and kappa
    taken from the splines. Headings are converted to the math angle convention used by Track.
    """
    closed = spline_result.closed if closed is None else closed
    interp = interp_splines(
        spline_result.coeffs_x,
        spline_result.coeffs_y,
        incl_last_point=not closed,
        stepsize_approx=stepsize,
    )
    psi = sg.calc_spline_headings(spline_result.coeffs_x, spline_result.coeffs_y, interp.spline_inds, interp.t_values)
    kappa = sg.calc_spline_curvatures(spline_result.coeffs_x, spline_result.coeffs_y, interp.spline_inds, interp.t_values)

    points = [
        TrackPoint(
            x=float(interp.path_interp[i, 0]),
            y=float(interp.path_interp[i, 1]),
            psi=gp.heading_to_math_angle(float(psi[i])),
            kappa=float(kappa[i]),
            s=float(interp.dists_interp[i]),
        )
        for i in range(len(interp))
    ]
    return Track(points, closed=closed)
