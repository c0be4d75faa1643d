from typing import List

from gcd_analysis.base import Window, range_overlap


class DowntimeWindows:
    """Untargetable windows, queried as a downtime oracle"""

    def __init__(self, windows: List[Window] = None):
        self._windows = []

        # Merge overlapping windows so overlap isn't counted twice
        for window in sorted(windows or [], key=lambda w: w.start):
            last = self._windows[-1] if self._windows else None
            if last and window.start <= last.end:
                last.end = max(last.end, window.end)
            else:
                self._windows.append(Window(window.start, window.end))

    @classmethod
    def from_ranges(cls, ranges):
        return cls([Window(start, end) for start, end in ranges])

    @property
    def windows(self):
        return self._windows

    def get_downtime(self, start, end):
        if end <= start:
            return 0
        return sum(
            range_overlap((window.start, window.end), (start, end))
            for window in self._windows
        )

    def __call__(self, start, end):
        return self.get_downtime(start, end)


def no_downtime(start, end):
    return 0
