from .. import errors
from .. import geometric_primitives as gp
from .. import track as trk
from .. import track_reader

import numpy as np
import pytest


TRACK_CSV = """# x_m,y_m,w_tr_right_m,w_tr_left_m
-0.320123,1.087714,5.739,5.932
0.168262,6.062191,5.735,5.929
0.656139,11.036647,5.731,5.926
1.143549,16.011082,5.727,5.923
"""


@pytest.mark.parametrize(
    'content',
    [
        TRACK_CSV,
        TRACK_CSV.replace('# x_m', 'x_m'),
        TRACK_CSV.replace('# x_m', '#x_m'),
    ]
)
def test_read_track(tmp_path, content):
    filename = tmp_path / 'track.csv'
    filename.write_text(content)

    track = track_reader.read_track(str(filename))
    assert track.closed
    assert len(track) == 4
    assert not track.has_s()
    assert np.allclose(track.x(), [-0.320123, 0.168262, 0.656139, 1.143549], atol=gp.EPS)
    assert np.allclose(track.y(), [1.087714, 6.062191, 11.036647, 16.011082], atol=gp.EPS)
    assert np.allclose(track.wr(), [5.739, 5.735, 5.731, 5.727], atol=gp.EPS)
    assert np.allclose(track.wl(), [5.932, 5.929, 5.926, 5.923], atol=gp.EPS)


def test_read_open_track(tmp_path):
    filename = tmp_path / 'track.csv'
    filename.write_text(TRACK_CSV)
    track = track_reader.read_track(str(filename), closed=False)
    assert not track.closed


def test_read_track_missing_columns(tmp_path):
    filename = tmp_path / 'track.csv'
    filename.write_text('x_m,y_m,w_tr_right_m\n0,0,1\n1,0,1\n')
    with pytest.raises(errors.InvalidInputError):
        track_reader.read_track(str(filename))


def test_write_and_read_track(tmp_path):
    filename = tmp_path / 'track.csv'
    track = trk.Track.from_points([[0, 0], [1, 0], [1, 1]])
    track.set_widths([1.0, 1.5, 2.0], [3.0, 3.5, 4.0])
    track_reader.write_track(track, str(filename))

    assert filename.read_text().splitlines()[0] == '# x_m,y_m,w_tr_right_m,w_tr_left_m'

    result = track_reader.read_track(str(filename), closed=False)
    assert result == track


def test_write_track_without_widths(tmp_path):
    track = trk.Track.from_points([[0, 0], [1, 0], [1, 1]])
    with pytest.raises(errors.InvalidInputError):
        track_reader.write_track(track, str(tmp_path / 'track.csv'))
