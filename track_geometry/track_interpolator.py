from . import errors
from . import geometric_primitives as gp
from .track_point import TrackPoint, interpolate_track_points

import bisect
import logging
import math
import numpy as np


logger = logging.getLogger(__name__)


def _check_calculated(track):
    if not track.has_s():
        raise errors.InvalidInputError('track has to be calculated (s is missing), call calculate() first')


def _extend_closed(track) -> list:
    """
    Returns track points with a copy of the first point appended at the end of the closing edge.
    """
    points = list(track)
    closing_point = points[0].copy()
    closing_point.s = points[-1].s + track.closing_length()
    points.append(closing_point)
    return points


def _interpolate_single(points: list, s_values: list, dist: float) -> TrackPoint:
    idx2 = bisect.bisect_left(s_values, dist)
    if idx2 == 0:
        result = points[0].copy()
    elif idx2 == len(points):
        result = points[-1].copy()
    else:
        p1 = points[idx2 - 1]
        p2 = points[idx2]
        t = (dist - p1.s) / (p2.s - p1.s)
        result = interpolate_track_points(p1, p2, t)
    result.s = dist
    return result


def interpolate(track, s_query, closed: bool):
    """
    Interpolates the calculated track at arclength(s) s_query.
    Params:
      - track - calculated track (s has to be set)
      - s_query - scalar or sequence of arclengths
      - closed - closed queries are wrapped into the track domain,
          open queries outside of [s_min, s_max] raise OutOfRangeError
    """
    _check_calculated(track)

    s_min = track[0].s
    s_max = track[-1].s
    if closed:
        points = _extend_closed(track)
        total_length = points[-1].s - s_min
    else:
        points = list(track)
        total_length = s_max - s_min
    s_values = [p.s for p in points]

    def _normalize(dist):
        dist = float(dist)
        if closed:
            dist = s_min + math.fmod(dist - s_min, total_length)
            if dist < s_min:
                dist += total_length
            if dist >= s_min + total_length:
                dist = s_min
            return dist

        if dist < s_min - gp.EPS or dist > s_max + gp.EPS:
            raise errors.OutOfRangeError(f's = {dist} is outside of the open track domain [{s_min}, {s_max}]')
        return min(max(dist, s_min), s_max)

    if np.ndim(s_query) == 0:
        return _interpolate_single(points, s_values, _normalize(s_query))
    return [_interpolate_single(points, s_values, _normalize(dist)) for dist in np.ravel(s_query)]


def calc_interp_distances(track, stepsize: float, closed: bool) -> list:
    """
    Returns evenly spaced arclengths covering the track.
    For closed tracks the last value, which would coincide with the first point, is skipped.
    """
    if stepsize <= 0:
        raise errors.InvalidInputError(f'stepsize has to be positive (value {stepsize} is invalid)')
    _check_calculated(track)

    s_min = track[0].s
    length = track.length(closed)
    no_steps = int(math.floor(length / stepsize + gp.EPS))
    s_values = [s_min + i * stepsize for i in range(no_steps + 1)]
    if closed:
        s_values = [s for s in s_values if s < s_min + length - gp.EPS]
    else:
        s_values = [min(s, s_min + length) for s in s_values]

    logger.debug('interpolating track of length %.4f with stepsize %.4f: %d points', length, stepsize, len(s_values))
    return s_values
