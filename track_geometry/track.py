from . import errors
from . import geometric_primitives as gp
from . import spatial_query
from . import track_calculator
from . import track_interpolator
from .track_point import TrackPoint

import numpy as np


class Track:
    """
    Ordered sequence of track points (insertion order is path order) plus the closed flag.
    Indexing and iteration return the stored points, which are read-only by contract:
    use set_widths() and calculate() to change them, or copy() them first.
    """

    def __init__(self, points: list = None, closed: bool = False):
        self._points = []
        self.closed = closed
        for p in points or []:
            self.append(p)

    @classmethod
    def from_points(cls, points, closed: bool = False):
        """
        Creates an undecorated track from Points, (x, y) pairs or an array of shape (N, 2).
        """
        if isinstance(points, np.ndarray):
            if points.ndim != 2 or points.shape[1] != 2:
                raise errors.InvalidInputError(f'points array has to have shape (N, 2) ({points.shape} given)')
        result = cls(closed=closed)
        for p in points:
            p = gp.as_point(p)
            result.append(TrackPoint(p.x, p.y))
        return result

    def append(self, point: TrackPoint):
        if not isinstance(point, TrackPoint):
            raise errors.InvalidInputError(f'track accepts only TrackPoint objects ({type(point).__name__} given)')
        if not point.has_position:
            raise errors.InvalidInputError('track point has to have a position')
        if self._points and point.has_s != self._points[-1].has_s:
            raise errors.InvalidInputError('either all track points have s or none of them')
        if self._points and point.has_s and point.s < self._points[-1].s - gp.EPS:
            raise errors.InvalidInputError(
                f's has to be non-decreasing along the track ({point.s} < {self._points[-1].s})'
            )
        self._points.append(point)

    def copy(self):
        return Track([p.copy() for p in self._points], closed=self.closed)

    def __len__(self):
        return len(self._points)

    def __getitem__(self, index) -> TrackPoint:
        return self._points[index]

    def __iter__(self):
        return iter(self._points)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False

        return self.closed == other.closed and self._points == other._points

    def __str__(self):
        return f'Track(closed={self.closed}, size={len(self)})'

    def __repr__(self):
        return str(self)

    def _column(self, field: str) -> np.ndarray:
        values = [getattr(p, field) for p in self._points]
        return np.asarray([np.nan if v is None else v for v in values], dtype=float)

    def s(self) -> np.ndarray:
        return self._column('s')

    def x(self) -> np.ndarray:
        return self._column('x')

    def y(self) -> np.ndarray:
        return self._column('y')

    def psi(self) -> np.ndarray:
        return self._column('psi')

    def kappa(self) -> np.ndarray:
        return self._column('kappa')

    def wl(self) -> np.ndarray:
        return self._column('wl')

    def wr(self) -> np.ndarray:
        return self._column('wr')

    def xy(self) -> np.ndarray:
        return np.column_stack((self.x(), self.y()))

    def has_s(self) -> bool:
        return bool(self._points) and all(p.has_s for p in self._points)

    def has_psi(self) -> bool:
        return bool(self._points) and all(p.has_psi for p in self._points)

    def has_kappa(self) -> bool:
        return bool(self._points) and all(p.has_kappa for p in self._points)

    def has_widths(self) -> bool:
        return bool(self._points) and all(p.has_widths for p in self._points)

    def _resolve_closed(self, closed) -> bool:
        return self.closed if closed is None else closed

    def _check_size(self):
        if len(self) < 2:
            raise errors.InvalidInputError(f'track has to contain at least 2 points ({len(self)} given)')

    def set_widths(self, wl, wr):
        """
        Sets left and right corridor widths of every point in place.
        """
        if len(wl) != len(wr) or len(wl) != len(self):
            raise errors.InvalidInputError(
                f'width vectors have to have the same size as the track ({len(wl)}, {len(wr)} != {len(self)})'
            )
        for p, cur_wl, cur_wr in zip(self._points, wl, wr):
            p.wl = float(cur_wl)
            p.wr = float(cur_wr)

    def closing_length(self) -> float:
        """
        Returns length of the edge from the last point back to the first one.
        """
        self._check_size()
        return self._points[-1].to_point().distance_to(self._points[0].to_point())

    def length(self, closed: bool = None) -> float:
        """
        Returns total length of the track, including the closing edge for closed tracks.
        """
        self._check_size()
        if self.has_s():
            length = self._points[-1].s - self._points[0].s
        else:
            length = float(np.sum(track_calculator.calc_el_lengths(self.x(), self.y(), closed=False)))
        if self._resolve_closed(closed):
            length += self.closing_length()
        return length

    def calculate(
        self,
        closed: bool = None,
        stepsize_psi_preview: float = 1.0,
        stepsize_psi_review: float = 1.0,
        stepsize_curv_preview: float = 2.0,
        stepsize_curv_review: float = 2.0,
        calc_curv: bool = True,
    ):
        """
        Calculates s, psi and kappa of every point in place from the point positions.
        Params:
          - closed - overrides (and updates) the closed flag of the track
          - stepsize_* - preview/review distances of the finite differences, see TrackCalculator
          - calc_curv - whether curvature is calculated
        """
        self._check_size()
        self.closed = self._resolve_closed(closed)
        calculator = track_calculator.TrackCalculator(
            stepsize_psi_preview=stepsize_psi_preview,
            stepsize_psi_review=stepsize_psi_review,
            stepsize_curv_preview=stepsize_curv_preview,
            stepsize_curv_review=stepsize_curv_review,
            calc_curv=calc_curv,
        )
        s, psi, kappa = calculator.calc(self.x(), self.y(), self.closed)
        for i, p in enumerate(self._points):
            p.s = float(s[i])
            p.psi = float(psi[i])
            if kappa is not None:
                p.kappa = float(kappa[i])
        return self

    def interpolate(self, s_query, closed: bool = None):
        """
        Returns track point(s) at arclength(s) s_query.
        A scalar query returns a TrackPoint, a sequence returns a list of them.
        """
        self._check_size()
        return track_interpolator.interpolate(self, s_query, self._resolve_closed(closed))

    def interpolate_track(self, stepsize: float, closed: bool = None):
        """
        Returns a new, calculated track with points evenly spaced by stepsize along s.
        """
        self._check_size()
        closed = self._resolve_closed(closed)
        s_values = track_interpolator.calc_interp_distances(self, stepsize, closed)
        result = Track(track_interpolator.interpolate(self, s_values, closed), closed=closed)
        return result.calculate(closed)

    def find_nearest_idx(self, point) -> int:
        self._check_size()
        return spatial_query.find_nearest_idx(self, gp.as_point(point))

    def project(self, point, closed: bool = None) -> TrackPoint:
        """
        Returns the orthogonal projection of point onto the track with all available fields interpolated.
        """
        self._check_size()
        return spatial_query.project_point(self, gp.as_point(point), self._resolve_closed(closed))

    def first_intersect_point(self, center, radius: float, wrap: bool = True, closed: bool = None):
        """
        Returns the first point (scanning forward from the point nearest to center)
        where the track crosses the circle, None if there is no such point.
        """
        self._check_size()
        return spatial_query.first_intersect_point(
            self,
            gp.as_point(center),
            radius,
            closed=self._resolve_closed(closed),
            wrap=wrap,
        )
