from . import errors
from .track import Track

import logging
import math
import numpy as np
from scipy.interpolate import splev, splprep


logger = logging.getLogger(__name__)

_LENGTH_SAMPLES_PER_POINT = 10


def _chord_parameters(xy: np.ndarray) -> np.ndarray:
    """
    Returns cumulative chord length of the points normalized into [0, 1].
    """
    s = np.zeros(xy.shape[0])
    s[1:] = np.cumsum(np.hypot(np.diff(xy[:, 0]), np.diff(xy[:, 1])))
    return s / s[-1]


def smooth_track(
    track: Track,
    k_reg: int = 3,
    s_reg: float = 10.0,
    stepsize_prep: float = 1.0,
    stepsize_reg: float = 3.0,
    closed: bool = None,
) -> Track:
    """
    Smooths the track with a B spline approximation and returns a new calculated track.
    Params:
      - track - track to be smoothed (s is calculated if missing)
      - k_reg - order of the B splines
      - s_reg - smoothing factor (usually between 5 and 100)
      - stepsize_prep - stepsize of the linear interpolation before the spline approximation
      - stepsize_reg - stepsize of the smoothed track
      - closed - overrides the closed flag of the track
    """
    if stepsize_prep <= 0 or stepsize_reg <= 0:
        raise errors.InvalidInputError(
            f'stepsizes have to be positive (stepsize_prep = {stepsize_prep}, stepsize_reg = {stepsize_reg})'
        )
    closed = track.closed if closed is None else closed

    prepared = track if track.has_s() else track.copy().calculate(closed)
    track_interp = prepared.interpolate_track(stepsize_prep, closed)
    if len(track_interp) <= k_reg:
        raise errors.InvalidInputError(
            f'track is too short for splines of order {k_reg} ({len(track_interp)} points after interpolation)'
        )

    xy = track_interp.xy()
    if closed:
        xy = np.vstack((xy, xy[:1]))
    tck, _ = splprep([xy[:, 0], xy[:, 1]], u=_chord_parameters(xy), k=k_reg, s=s_reg, per=int(closed))

    x_dense, y_dense = splev(np.linspace(0.0, 1.0, _LENGTH_SAMPLES_PER_POINT * xy.shape[0]), tck)
    length = float(np.sum(np.hypot(np.diff(x_dense), np.diff(y_dense))))
    no_points = max(2, int(math.ceil(length / stepsize_reg)))
    if closed:
        u_reg = np.linspace(0.0, 1.0, no_points, endpoint=False)
    else:
        u_reg = np.linspace(0.0, 1.0, no_points + 1)
    x_reg, y_reg = splev(u_reg, tck)

    smoothed = Track.from_points(np.column_stack((x_reg, y_reg)), closed=closed)
    if track_interp.has_widths():
        projected = [track_interp.project(p.to_point(), closed) for p in smoothed]
        smoothed.set_widths([p.wl for p in projected], [p.wr for p in projected])
    smoothed.calculate(closed)

    if logger.isEnabledFor(logging.DEBUG):
        deviations = [
            p.to_point().distance_to(smoothed[smoothed.find_nearest_idx(p.to_point())].to_point())
            for p in track
        ]
        logger.debug(
            'spline approximation: mean deviation %.4fm, maximum deviation %.4fm',
            float(np.mean(deviations)),
            float(np.max(deviations)),
        )

    return smoothed
