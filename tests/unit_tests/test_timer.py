import pytest

from klondike.timer import GameTimer, format_elapsed


def test_clock_only_counts_while_running() -> None:
    timer = GameTimer()
    assert timer.tick(3) == 0
    timer.start()
    assert timer.tick(0.75) == 0
    assert timer.tick(0.75) == 1
    assert timer.tick(2.5) == 3
    assert timer.elapsed == 4
    timer.stop(reset=False)
    assert timer.tick(10) == 0
    assert timer.elapsed == 4


def test_start_and_stop_reset_by_default() -> None:
    timer = GameTimer(90)
    timer.start(reset=False)
    assert timer.elapsed == 90 and timer.running
    timer.start()
    assert timer.elapsed == 0 and timer.running
    timer.tick(5)
    timer.stop()
    assert timer.elapsed == 0 and not timer.running


def test_restart_drops_partial_seconds() -> None:
    timer = GameTimer()
    timer.start()
    timer.tick(0.9)
    timer.start(reset=False)
    assert timer.tick(0.5) == 0


def test_negative_frame_time_is_ignored() -> None:
    timer = GameTimer(3)
    timer.start(reset=False)
    assert timer.tick(-1) == 0
    assert timer.elapsed == 3


@pytest.mark.parametrize(
    "seconds, text",
    [
        (0, "00:00"),
        (None, "00:00"),
        (59, "00:59"),
        (61, "01:01"),
        (3599, "59:59"),
        (3600, "01:00:00"),
        (3661, "01:01:01"),
        (86400, "00:00"),
        (90061, "01:01:01"),
    ],
)
def test_format_elapsed(seconds, text: str) -> None:
    assert format_elapsed(seconds) == text
