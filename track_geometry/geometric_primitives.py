import math


EPS = 1e-9
CLOSE_TOLERANCE = 1e-9
NORMAL_TOLERANCE = 1e-12
CURVATURE_TOLERANCE = 1e-10

# offset between the math angle (0 = +x axis) and the spline heading (0 = north)
HEADING_OFFSET = math.pi / 2


class Point:
    __slots__ = ('_x', '_y')

    def __init__(self, x: float, y: float):
        self._x = float(x)
        self._y = float(y)

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    def dot(self, other) -> float:
        return self._x * other.x + self._y * other.y

    def cross(self, other) -> float:
        """
        Returns z component of the cross product (positive if other is to the left)
        """
        return self._x * other.y - self._y * other.x

    def norm(self) -> float:
        return math.hypot(self._x, self._y)

    def distance_to(self, other) -> float:
        return math.hypot(self._x - other.x, self._y - other.y)

    def __sub__(self, other):
        return Point(self._x - other.x, self._y - other.y)

    def __add__(self, other):
        return Point(self._x + other.x, self._y + other.y)

    def __mul__(self, scale: float):
        return Point(self._x * scale, self._y * scale)

    __rmul__ = __mul__

    def __truediv__(self, scale: float):
        return Point(self._x / scale, self._y / scale)

    def __neg__(self):
        return Point(-self._x, -self._y)

    def __iter__(self):
        yield self._x
        yield self._y

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False

        return math.fabs(self._x - other.x) < EPS and math.fabs(self._y - other.y) < EPS

    def __str__(self):
        return f'({self._x}, {self._y})'

    def __repr__(self):
        return f'Point{str(self)}'


def as_point(p) -> Point:
    """
    Converts Point-like objects (Point, TrackPoint, (x, y) pairs) to Point.
    """
    if isinstance(p, Point):
        return p
    if hasattr(p, 'x') and hasattr(p, 'y'):
        return Point(p.x, p.y)
    x, y = p
    return Point(x, y)


def points_are_close(p1, p2, tol: float = CLOSE_TOLERANCE) -> bool:
    return math.fabs(p1.x - p2.x) < tol and math.fabs(p1.y - p2.y) < tol


def normalize_psi(psi: float) -> float:
    """
    Normalizes angle psi (in radians) into (-pi, pi].
    """
    psi = math.fmod(psi, 2 * math.pi)
    if psi > math.pi:
        psi -= 2 * math.pi
    elif psi <= -math.pi:
        psi += 2 * math.pi
    return psi


def math_angle_to_heading(angle: float) -> float:
    """
    Converts math angle (0 = +x axis) to spline heading (0 = north).
    """
    return normalize_psi(angle - HEADING_OFFSET)


def heading_to_math_angle(psi: float) -> float:
    """
    Converts spline heading (0 = north) to math angle (0 = +x axis).
    """
    return normalize_psi(psi + HEADING_OFFSET)
