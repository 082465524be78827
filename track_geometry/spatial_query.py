from . import errors
from . import geometric_primitives as gp
from .track_point import TrackPoint, interpolate_track_points

import math


def find_nearest_idx(track, point: gp.Point) -> int:
    """
    Returns index of the track point closest to point (first one on ties).
    Linear scan, O(n) per call.
    """
    min_dist = math.inf
    nearest_idx = 0
    for i, p in enumerate(track):
        dist = math.hypot(p.x - point.x, p.y - point.y)
        if dist < min_dist:
            min_dist = dist
            nearest_idx = i
    return nearest_idx


def _get_edge(track, idx: int):
    """
    Returns end points of the edge starting at idx.
    The closing edge (idx == len(track) - 1) ends in a copy of the first point,
    whose s continues past the last point by the closing edge length.
    """
    p1 = track[idx]
    if idx < len(track) - 1:
        return p1, track[idx + 1]

    p2 = track[0].copy()
    if p1.has_s and p2.has_s:
        p2.s = p1.s + track.closing_length()
    return p1, p2


def _wrap_s(track, point: TrackPoint) -> TrackPoint:
    if point.has_s and track[0].has_s:
        s_end = track[-1].s + track.closing_length()
        if point.s >= s_end - gp.EPS:
            point.s -= s_end - track[0].s
    return point


def _get_candidate_edges(track, nearest_idx: int, closed: bool) -> list:
    last_idx = len(track) - 1
    if closed:
        return [(nearest_idx - 1) % len(track), nearest_idx]

    candidate_edges = []
    if nearest_idx > 0:
        candidate_edges.append(nearest_idx - 1)
    if nearest_idx < last_idx:
        candidate_edges.append(nearest_idx)
    return candidate_edges


def project_point(track, point: gp.Point, closed: bool = None) -> TrackPoint:
    """
    Params:
      - track - track with at least 2 points (derived fields are optional)
      - point - point to be projected
      - closed - whether the closing edge (last -> first) is part of the track (track flag if None)
    Returns projected point with every field that is set on the edge end points interpolated.
    """
    if len(track) < 2:
        raise errors.InvalidInputError(f'track has to contain at least 2 points ({len(track)} given)')
    closed = track.closed if closed is None else closed

    nearest_idx = find_nearest_idx(track, point)

    min_dist = math.inf
    nearest_point = None
    for idx in _get_candidate_edges(track, nearest_idx, closed):
        p1, p2 = _get_edge(track, idx)
        dx = p2.x - p1.x
        dy = p2.y - p1.y
        edge_length_sq = dx * dx + dy * dy
        if edge_length_sq < gp.EPS * gp.EPS:
            continue

        t = ((point.x - p1.x) * dx + (point.y - p1.y) * dy) / edge_length_sq
        t = max(0.0, min(1.0, t))

        projected = interpolate_track_points(p1, p2, t)
        if closed and idx == len(track) - 1:
            projected = _wrap_s(track, projected)

        dist = math.hypot(projected.x - point.x, projected.y - point.y)
        if dist < min_dist:
            min_dist = dist
            nearest_point = projected

    if nearest_point is None:
        # every candidate edge has zero length
        nearest_point = track[nearest_idx].copy()
    return nearest_point


def check_segment_intersection(p1: gp.Point, p2: gp.Point, center: gp.Point, radius: float):
    """
    Returns parameter t in [0, 1] of the intersection of segment p1 -> p2 with the circle,
    the smaller one if both intersections are on the segment. None if there is no intersection.
    """
    v = p2 - p1
    a = v.dot(v)
    if a < gp.EPS * gp.EPS:
        return None

    w = p1 - center
    b = 2.0 * v.dot(w)
    c = w.dot(w) - radius * radius

    discriminant = b * b - 4.0 * a * c
    if discriminant < 0:
        return None

    sqrt_discriminant = math.sqrt(discriminant)
    t_small = (-b - sqrt_discriminant) / (2.0 * a)
    t_large = (-b + sqrt_discriminant) / (2.0 * a)
    for t in (t_small, t_large):
        if 0.0 <= t <= 1.0:
            return t
    return None


def first_intersect_point(track, center: gp.Point, radius: float, wrap: bool = True, closed: bool = None):
    """
    Scans edges forward from the point nearest to center and returns the first intersection
    with the circle (first found, not globally nearest).
    Params:
      - track - track with at least 2 points
      - center - circle center
      - radius - circle radius
      - wrap - continue from the start of the track up to the nearest point if nothing was found
      - closed - whether the closing edge is scanned as well (track flag if None)
    """
    if len(track) < 2:
        raise errors.InvalidInputError(f'track has to contain at least 2 points ({len(track)} given)')
    if radius <= 0:
        raise errors.InvalidInputError(f'radius has to be positive (value {radius} is invalid)')
    closed = track.closed if closed is None else closed

    nearest_idx = find_nearest_idx(track, center)
    no_edges = len(track) if closed else len(track) - 1

    edges = list(range(nearest_idx, no_edges))
    if wrap:
        edges += list(range(0, nearest_idx))

    for idx in edges:
        p1, p2 = _get_edge(track, idx)
        t = check_segment_intersection(p1.to_point(), p2.to_point(), center, radius)
        if t is None:
            continue

        result = interpolate_track_points(p1, p2, t)
        if closed and idx == len(track) - 1:
            result = _wrap_s(track, result)
        return result

    return None
