from . import errors
from .track import Track

import pandas as pd


X_COLUMN = 'x_m'
Y_COLUMN = 'y_m'
RIGHT_WIDTH_COLUMN = 'w_tr_right_m'
LEFT_WIDTH_COLUMN = 'w_tr_left_m'
COLUMNS = [X_COLUMN, Y_COLUMN, RIGHT_WIDTH_COLUMN, LEFT_WIDTH_COLUMN]


def read_track(filename: str, closed: bool = True) -> Track:
    """
    Reads centre line and corridor widths from a csv file with columns
    x_m, y_m, w_tr_right_m, w_tr_left_m (a leading `#` in the header is allowed).
    Returns an undecorated track with widths set.
    """
    df = pd.read_csv(filename)
    df.columns = [column.lstrip('#').strip() for column in df.columns]

    missing_columns = [column for column in COLUMNS if column not in df.columns]
    if missing_columns:
        raise errors.InvalidInputError(f'track file {filename} misses columns: {missing_columns}')

    track = Track.from_points(df[[X_COLUMN, Y_COLUMN]].to_numpy(dtype=float), closed=closed)
    track.set_widths(df[LEFT_WIDTH_COLUMN].to_numpy(dtype=float), df[RIGHT_WIDTH_COLUMN].to_numpy(dtype=float))
    return track


def write_track(track: Track, filename: str):
    """
    Writes centre line and corridor widths of the track in the layout read by read_track.
    """
    if not track.has_widths():
        raise errors.InvalidInputError('track has to have widths to be written')

    df = pd.DataFrame({
        X_COLUMN: track.x(),
        Y_COLUMN: track.y(),
        RIGHT_WIDTH_COLUMN: track.wr(),
        LEFT_WIDTH_COLUMN: track.wl(),
    })
    df.rename(columns={X_COLUMN: f'# {X_COLUMN}'}).to_csv(filename, index=False)
