from . import errors
from . import geometric_primitives as gp

import logging
import math
import numpy as np


logger = logging.getLogger(__name__)


def calc_el_lengths(x: np.ndarray, y: np.ndarray, closed: bool) -> np.ndarray:
    """
    Returns lengths of the edges between consecutive points.
    For closed paths the closing edge (last -> first) is appended.
    """
    if closed:
        x = np.append(x, x[0])
        y = np.append(y, y[0])
    return np.hypot(np.diff(x), np.diff(y))


def calc_index_step(stepsize: float, avg_el_length: float) -> int:
    # halves round away from zero
    return max(1, int(math.floor(stepsize / avg_el_length + 0.5)))


def _limit_closed_steps(ind_step_preview: int, ind_step_review: int, no_points: int):
    """
    Shrinks a preview/review window pair so the window spans at most half of a closed path.
    """
    max_window = max(2, no_points // 2)
    while ind_step_preview + ind_step_review > max_window:
        if ind_step_preview >= ind_step_review:
            ind_step_preview -= 1
        else:
            ind_step_review -= 1
    return ind_step_preview, ind_step_review


class TrackCalculator:
    def __init__(
        self,
        stepsize_psi_preview: float = 1.0,
        stepsize_psi_review: float = 1.0,
        stepsize_curv_preview: float = 2.0,
        stepsize_curv_review: float = 2.0,
        calc_curv: bool = True,
    ):
        """
        Params:
          - stepsize_psi_preview - distance to the point ahead used for heading calculation
          - stepsize_psi_review - distance to the point behind used for heading calculation
          - stepsize_curv_preview - distance to the heading ahead used for curvature calculation
          - stepsize_curv_review - distance to the heading behind used for curvature calculation
          - calc_curv - whether curvature is calculated at all
        """
        for name, value in (
            ('stepsize_psi_preview', stepsize_psi_preview),
            ('stepsize_psi_review', stepsize_psi_review),
            ('stepsize_curv_preview', stepsize_curv_preview),
            ('stepsize_curv_review', stepsize_curv_review),
        ):
            if value <= 0:
                raise errors.InvalidInputError(f'{name} has to be positive (value {value} is invalid)')

        self.stepsize_psi_preview = stepsize_psi_preview
        self.stepsize_psi_review = stepsize_psi_review
        self.stepsize_curv_preview = stepsize_curv_preview
        self.stepsize_curv_review = stepsize_curv_review
        self.calc_curv = calc_curv

    def calc(self, x, y, closed: bool):
        """
        Returns (s, psi, kappa) arrays for the path given by x and y.
        kappa is None if curvature calculation is disabled.
        """
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        no_points = x.shape[0]
        if no_points < 2:
            raise errors.InvalidInputError(f'track has to contain at least 2 points ({no_points} given)')

        el_lengths = calc_el_lengths(x, y, closed)
        avg_el_length = float(np.mean(el_lengths))
        if avg_el_length < gp.EPS:
            raise errors.DegenerateGeometryError('track has zero length')

        s = np.zeros(no_points)
        s[1:] = np.cumsum(el_lengths[:no_points - 1])

        ind_step_preview_psi = calc_index_step(self.stepsize_psi_preview, avg_el_length)
        ind_step_review_psi = calc_index_step(self.stepsize_psi_review, avg_el_length)
        ind_step_preview_curv = calc_index_step(self.stepsize_curv_preview, avg_el_length)
        ind_step_review_curv = calc_index_step(self.stepsize_curv_review, avg_el_length)

        if closed:
            ind_step_preview_psi, ind_step_review_psi = _limit_closed_steps(
                ind_step_preview_psi, ind_step_review_psi, no_points,
            )
            ind_step_preview_curv, ind_step_review_curv = _limit_closed_steps(
                ind_step_preview_curv, ind_step_review_curv, no_points,
            )

        logger.debug(
            'index steps: psi preview %d, psi review %d, curv preview %d, curv review %d (avg element length %.4f)',
            ind_step_preview_psi,
            ind_step_review_psi,
            ind_step_preview_curv,
            ind_step_review_curv,
            avg_el_length,
        )

        psi = np.zeros(no_points)
        for i in range(no_points):
            preview, review = self._get_window(i, no_points, ind_step_preview_psi, ind_step_review_psi, closed)
            psi[i] = gp.normalize_psi(math.atan2(y[preview] - y[review], x[preview] - x[review]))

        if not self.calc_curv:
            return s, psi, None

        kappa = np.zeros(no_points)
        for i in range(no_points):
            preview, review = self._get_window(i, no_points, ind_step_preview_curv, ind_step_review_curv, closed)
            delta_psi = TrackCalculator._heading_change(psi, review, preview, closed)
            path_length = TrackCalculator._path_length_between(el_lengths, review, preview, closed)
            if path_length < gp.EPS:
                raise errors.DegenerateGeometryError(
                    f'zero path length between points {review} and {preview}, curvature is undefined'
                )
            kappa[i] = delta_psi / path_length

        return s, psi, kappa

    @staticmethod
    def _get_window(i: int, no_points: int, ind_step_preview: int, ind_step_review: int, closed: bool):
        """
        Returns (preview, review) indices around point i.
        Open paths fall back to one-sided differences at their ends.
        """
        if closed:
            return (i + ind_step_preview) % no_points, (i - ind_step_review) % no_points
        return min(i + ind_step_preview, no_points - 1), max(i - ind_step_review, 0)

    @staticmethod
    def _path_length_between(el_lengths: np.ndarray, review: int, preview: int, closed: bool) -> float:
        """
        Sums edge lengths from review to preview in the direction of traversal.
        """
        if not closed or review < preview:
            return float(np.sum(el_lengths[review:preview]))
        # window crosses the seam
        return float(np.sum(el_lengths[review:]) + np.sum(el_lengths[:preview]))

    @staticmethod
    def _heading_change(psi: np.ndarray, review: int, preview: int, closed: bool) -> float:
        """
        Sums heading changes between consecutive points from review to preview,
        so turns of pi or more within the window keep their sign.
        """
        no_points = psi.shape[0]
        delta_psi = 0.0
        j = review
        while j != preview:
            j_next = (j + 1) % no_points if closed else j + 1
            delta_psi += gp.normalize_psi(psi[j_next] - psi[j])
            j = j_next
        return delta_psi
