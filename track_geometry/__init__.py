from .errors import (
    DegenerateGeometryError,
    InvalidInputError,
    OutOfRangeError,
    SolverFailureError,
    TrackGeometryError,
)
from .geometric_primitives import Point
from .spline_fitter import SplineFitter, SplineResult, calc_splines
from .track import Track
from .track_point import TrackPoint
