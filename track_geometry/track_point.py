from . import geometric_primitives as gp

import math


class TrackPoint:
    """
    Sample of a track. Every field is optional, None means "not computed".
    """
    FIELDS = ('s', 'x', 'y', 'psi', 'wl', 'wr', 'kappa')

    def __init__(
        self,
        x: float = None,
        y: float = None,
        psi: float = None,
        wl: float = None,
        wr: float = None,
        kappa: float = None,
        s: float = None,
    ):
        self.s = s
        self.x = x
        self.y = y
        self.psi = psi
        self.wl = wl
        self.wr = wr
        self.kappa = kappa

    @property
    def has_s(self) -> bool:
        return self.s is not None

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def has_psi(self) -> bool:
        return self.psi is not None

    @property
    def has_kappa(self) -> bool:
        return self.kappa is not None

    @property
    def has_widths(self) -> bool:
        return self.wl is not None and self.wr is not None

    def to_point(self) -> gp.Point:
        assert self.has_position, 'track point has no position'
        return gp.Point(self.x, self.y)

    def copy(self):
        return TrackPoint(
            x=self.x,
            y=self.y,
            psi=self.psi,
            wl=self.wl,
            wr=self.wr,
            kappa=self.kappa,
            s=self.s,
        )

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False

        for field in TrackPoint.FIELDS:
            a = getattr(self, field)
            b = getattr(other, field)
            if a is None or b is None:
                if a is not b:
                    return False
            elif math.fabs(a - b) >= gp.EPS:
                return False
        return True

    def __str__(self):
        values = ', '.join(
            f'{field}={getattr(self, field)}'
            for field in TrackPoint.FIELDS
            if getattr(self, field) is not None
        )
        return f'TrackPoint({values})'

    def __repr__(self):
        return str(self)


def interpolate_track_points(p1: TrackPoint, p2: TrackPoint, t: float) -> TrackPoint:
    """
    Linear blend of two track points at t in [0, 1].
    Only fields set on both points are produced, heading follows the shortest angular path.
    """
    result = TrackPoint()
    if p1.has_position and p2.has_position:
        result.x = p1.x + t * (p2.x - p1.x)
        result.y = p1.y + t * (p2.y - p1.y)
    if p1.has_s and p2.has_s:
        result.s = p1.s + t * (p2.s - p1.s)
    if p1.has_psi and p2.has_psi:
        diff = gp.normalize_psi(p2.psi - p1.psi)
        result.psi = gp.normalize_psi(p1.psi + t * diff)
    if p1.has_widths and p2.has_widths:
        result.wl = p1.wl + t * (p2.wl - p1.wl)
        result.wr = p1.wr + t * (p2.wr - p1.wr)
    if p1.has_kappa and p2.has_kappa:
        result.kappa = p1.kappa + t * (p2.kappa - p1.kappa)
    return result
