from . import errors
from . import geometric_primitives as gp

import logging
import math
import warnings

import numpy as np
import scipy.linalg


logger = logging.getLogger(__name__)


class SplineResult:
    """
    Coefficients of the fitted cubic splines.
    Row i of coeffs_x/coeffs_y holds [a0, a1, a2, a3] of x_i(t) = a0 + a1 t + a2 t^2 + a3 t^3, t in [0, 1].
    """

    def __init__(
        self,
        coeffs_x: np.ndarray,
        coeffs_y: np.ndarray,
        normvec_normalized: np.ndarray,
        M: np.ndarray,
        closed: bool,
    ):
        self._coeffs_x = coeffs_x
        self._coeffs_y = coeffs_y
        self._normvec_normalized = normvec_normalized
        self._M = M
        self._closed = closed
        for array in (self._coeffs_x, self._coeffs_y, self._normvec_normalized, self._M):
            array.setflags(write=False)

    @property
    def coeffs_x(self) -> np.ndarray:
        return self._coeffs_x

    @property
    def coeffs_y(self) -> np.ndarray:
        return self._coeffs_y

    @property
    def normvec_normalized(self) -> np.ndarray:
        return self._normvec_normalized

    @property
    def M(self) -> np.ndarray:
        return self._M

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def no_splines(self) -> int:
        return self._coeffs_x.shape[0]

    def __str__(self):
        return f'SplineResult(no_splines={self.no_splines}, closed={self.closed})'

    def __repr__(self):
        return str(self)


class SplineFitter:
    def __init__(self, use_dist_scaling: bool = True):
        """
        Params:
          - use_dist_scaling - scale heading and curvature continuity equations by the ratio of
              adjacent element lengths (every spline spans t in [0, 1] regardless of its length)
        """
        self.use_dist_scaling = use_dist_scaling

    @staticmethod
    def _is_closed(path: np.ndarray, psi_s, psi_e) -> bool:
        first = gp.Point(path[0, 0], path[0, 1])
        last = gp.Point(path[-1, 0], path[-1, 1])
        return gp.points_are_close(first, last) and psi_s is None and psi_e is None

    def _get_el_lengths(self, path: np.ndarray, el_lengths) -> np.ndarray:
        no_splines = path.shape[0] - 1
        if el_lengths is None:
            return np.hypot(np.diff(path[:, 0]), np.diff(path[:, 1]))

        el_lengths = np.asarray(el_lengths, dtype=float)
        if el_lengths.shape != (no_splines,):
            raise errors.InvalidInputError(
                f'el_lengths has to contain exactly len(path) - 1 = {no_splines} values ({el_lengths.shape} given)'
            )
        if not np.all(np.isfinite(el_lengths)):
            raise errors.InvalidInputError('el_lengths have to be finite')
        return el_lengths

    def _get_scaling(self, el_lengths: np.ndarray, closed: bool) -> np.ndarray:
        """
        Returns scaling factors d_i / d_{i+1}, for closed paths the last one links the last and the first spline.
        """
        no_splines = el_lengths.shape[0]
        if not self.use_dist_scaling:
            return np.ones(no_splines if closed else max(no_splines - 1, 0))

        zero_el_lengths = np.flatnonzero(el_lengths < gp.EPS)
        if zero_el_lengths.size > 0:
            raise errors.DegenerateGeometryError(
                f'zero element length at splines {zero_el_lengths.tolist()}, distance scaling is impossible'
            )

        if closed:
            el_lengths = np.append(el_lengths, el_lengths[0])
        return el_lengths[:-1] / el_lengths[1:]

    def fit(self, path, el_lengths=None, psi_s: float = None, psi_e: float = None) -> SplineResult:
        """
        Solves for curvature continuous cubic splines between the path points.
        Params:
          - path - array of shape (N, 2); the path is closed if the first and the last points coincide
              and no headings are given
          - el_lengths - distances between path points (N - 1 values), computed if omitted
          - psi_s - heading at the start point (0 = north), required for open paths
          - psi_e - heading at the end point (0 = north), required for open paths
        """
        path = np.asarray(path, dtype=float)
        if path.ndim != 2 or path.shape[1] != 2:
            raise errors.InvalidInputError(f'path has to have shape (N, 2) ({path.shape} given)')
        if path.shape[0] < 2:
            raise errors.InvalidInputError(f'path has to contain at least 2 points ({path.shape[0]} given)')
        if not np.all(np.isfinite(path)):
            raise errors.InvalidInputError('path has to contain finite coordinates')

        closed = SplineFitter._is_closed(path, psi_s, psi_e)
        if not closed and (psi_s is None or psi_e is None):
            raise errors.InvalidInputError('headings psi_s and psi_e have to be provided for an open path')

        no_splines = path.shape[0] - 1
        el_lengths = self._get_el_lengths(path, el_lengths)
        scaling = self._get_scaling(el_lengths, closed)
        logger.debug('fitting %d splines (closed: %s, distance scaling: %s)', no_splines, closed, self.use_dist_scaling)

        M, b_x, b_y = self._build_system(path, el_lengths, scaling, closed, psi_s, psi_e)
        solution = SplineFitter._solve(M, np.column_stack((b_x, b_y)))

        coeffs_x = solution[:, 0].reshape(no_splines, 4)
        coeffs_y = solution[:, 1].reshape(no_splines, 4)

        return SplineResult(
            coeffs_x=coeffs_x,
            coeffs_y=coeffs_y,
            normvec_normalized=SplineFitter._calc_normvecs(coeffs_x, coeffs_y),
            M=M,
            closed=closed,
        )

    def _build_system(self, path, el_lengths, scaling, closed, psi_s, psi_e):
        no_splines = path.shape[0] - 1
        dim = 4 * no_splines
        M = np.zeros((dim, dim))
        b_x = np.zeros(dim)
        b_y = np.zeros(dim)

        # rows: x_i(0) = p_i, x_i(1) = p_{i+1}, heading continuity, curvature continuity
        for i in range(no_splines):
            j = 4 * i
            M[j, j] = 1.0
            M[j + 1, j:j + 4] = [1.0, 1.0, 1.0, 1.0]
            if i < no_splines - 1:
                M[j + 2, j:j + 4] = [0.0, 1.0, 2.0, 3.0]
                M[j + 2, j + 5] = -scaling[i]
                M[j + 3, j:j + 4] = [0.0, 0.0, 2.0, 6.0]
                M[j + 3, j + 6] = -2.0 * scaling[i] ** 2

            b_x[j] = path[i, 0]
            b_x[j + 1] = path[i + 1, 0]
            b_y[j] = path[i, 1]
            b_y[j + 1] = path[i + 1, 1]

        if not closed:
            el_length_s = el_lengths[0] if self.use_dist_scaling else 1.0
            el_length_e = el_lengths[-1] if self.use_dist_scaling else 1.0
            angle_s = gp.heading_to_math_angle(psi_s)
            angle_e = gp.heading_to_math_angle(psi_e)

            # heading at t = 0 of the first spline
            M[-2, 1] = 1.0
            b_x[-2] = math.cos(angle_s) * el_length_s
            b_y[-2] = math.sin(angle_s) * el_length_s

            # heading at t = 1 of the last spline
            M[-1, -4:] = [0.0, 1.0, 2.0, 3.0]
            b_x[-1] = math.cos(angle_e) * el_length_e
            b_y[-1] = math.sin(angle_e) * el_length_e
        else:
            scale_end = scaling[-1]

            # heading continuity between the last and the first spline
            M[-2, 1] = scale_end
            M[-2, -3:] = [-1.0, -2.0, -3.0]

            # curvature continuity between the last and the first spline
            M[-1, 2] = 2.0 * scale_end ** 2
            M[-1, -2:] = [-2.0, -6.0]

        return M, b_x, b_y

    @staticmethod
    def _solve(M: np.ndarray, b: np.ndarray) -> np.ndarray:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always', scipy.linalg.LinAlgWarning)
            try:
                solution = scipy.linalg.solve(M, b)
            except np.linalg.LinAlgError as e:
                raise errors.SolverFailureError(f'spline system could not be solved: {e}') from e

        for w in caught:
            if issubclass(w.category, scipy.linalg.LinAlgWarning):
                logger.warning('spline system is ill-conditioned: %s', w.message)
            else:
                warnings.warn(w.message, w.category)

        if not np.all(np.isfinite(solution)):
            raise errors.SolverFailureError('spline system solution contains non-finite values')
        return solution

    @staticmethod
    def _calc_normvecs(coeffs_x: np.ndarray, coeffs_y: np.ndarray) -> np.ndarray:
        """
        Returns unit normal vectors (y'(0), -x'(0)) of every spline, zero vector if the tangent vanishes.
        """
        normvecs = np.column_stack((coeffs_y[:, 1], -coeffs_x[:, 1]))
        norms = np.hypot(normvecs[:, 0], normvecs[:, 1])
        result = np.zeros_like(normvecs)
        valid = norms >= gp.NORMAL_TOLERANCE
        result[valid] = normvecs[valid] / norms[valid, None]
        return result


def calc_splines(path, el_lengths=None, psi_s: float = None, psi_e: float = None, use_dist_scaling: bool = True):
    return SplineFitter(use_dist_scaling=use_dist_scaling).fit(path, el_lengths=el_lengths, psi_s=psi_s, psi_e=psi_e)
