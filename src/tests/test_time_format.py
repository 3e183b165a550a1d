import pytest

from music_remote.core.models import Progress
from music_remote.utils.time_format import format_time, progress_percent


@pytest.mark.parametrize("ms, expected", [
    (0, "00:00:00"),
    (999, "00:00:00"),
    (61000, "00:01:01"),
    (3723000, "01:02:03"),
    (25 * 3600 * 1000, "01:00:00"),
    (-5000, "00:00:00"),
])
def test_format_time(ms, expected):
    assert format_time(ms) == expected


def test_progress_percent():
    assert progress_percent(Progress(50000, 200000)) == 25.0
    assert progress_percent(Progress(200000, 200000)) == 100.0


def test_progress_percent_unknown_duration():
    assert progress_percent(Progress(5000, 0)) == 0.0
