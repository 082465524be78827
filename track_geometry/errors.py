class TrackGeometryError(Exception):
    pass


class InvalidInputError(TrackGeometryError, ValueError):
    """
    Size mismatches, too few points, missing boundary headings,
    non-positive step sizes and tracks missing required derived fields.
    """


class DegenerateGeometryError(TrackGeometryError):
    """
    Zero-length segment where a nonzero length is required.
    """


class OutOfRangeError(TrackGeometryError, ValueError):
    """
    Query distance outside the domain of an open track.
    """


class SolverFailureError(TrackGeometryError):
    """
    Linear system of the spline fit could not be solved.
    """
