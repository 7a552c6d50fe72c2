# timer.py - game clock advanced by the frame loop
from typing import Optional


class GameTimer:
    """
    Whole-second game clock. The host loop feeds it frame time through tick(dt);
    each full second of running time adds one to ``elapsed``. start() always
    stops first, so restarting can never leave two clocks counting.
    """

    def __init__(self, elapsed: int = 0):
        self.elapsed: int = int(elapsed)
        self.running: bool = False
        self._carry: float = 0.0

    def start(self, reset: bool = True):
        self.stop(reset)
        self.running = True

    def stop(self, reset: bool = True):
        self.running = False
        self._carry = 0.0
        if reset:
            self.elapsed = 0

    def tick(self, dt: float) -> int:
        """Advance by dt seconds; return how many whole seconds were added."""
        if not self.running or dt <= 0:
            return 0
        self._carry += dt
        added = int(self._carry)
        if added:
            self._carry -= added
            self.elapsed += added
        return added


def format_elapsed(seconds: Optional[int]) -> str:
    """MM:SS, or HH:MM:SS once an hour has passed (hours wrap after a day)."""
    seconds = int(seconds or 0)
    secs = seconds % 60
    minutes = (seconds // 60) % 60
    hours = (seconds // 3600) % 24
    text = f"{minutes:02d}:{secs:02d}"
    if hours:
        text = f"{hours:02d}:" + text
    return text
