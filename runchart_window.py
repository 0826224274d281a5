"""
Sliding sample window and y-axis bounds.

The window keeps the newest samples first; the bounds calculator turns
its contents into a padded vertical range plus four tick labels.
"""

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from runchart_config import LABEL_STEPS, PAD_PERCENT, WINDOW_SIZE


class SampleWindow:
    """Fixed-capacity buffer, most recent sample at index 0"""

    def __init__(self, capacity: int = WINDOW_SIZE):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._samples = deque(maxlen=capacity)

    def push(self, sample: int) -> None:
        # appendleft on a full deque drops the rightmost (oldest) item
        self._samples.appendleft(sample)

    def values(self) -> Tuple[int, ...]:
        return tuple(self._samples)

    def points(self):
        """(x, y) pairs: x is the age index, y the sample value"""
        return list(enumerate(self._samples))

    def __len__(self):
        return len(self._samples)

    def __iter__(self):
        return iter(self._samples)

    def __getitem__(self, index):
        return self._samples[index]

    def __repr__(self):
        return f"SampleWindow({list(self._samples)!r}, capacity={self.capacity})"


@dataclass(frozen=True)
class AxisRange:
    bounds: Tuple[float, float]
    labels: Tuple[str, str, str, str]
    has_data: bool = True

    @property
    def bottom(self) -> float:
        return self.bounds[0]

    @property
    def top(self) -> float:
        return self.bounds[1]


NO_DATA = AxisRange(bounds=(0.0, 0.0), labels=("0", "0", "0", "0"), has_data=False)


def sample_extent(samples: Iterable[int]) -> Optional[Tuple[int, int]]:
    """(min, max) of the samples, or None when there are none"""
    values = list(samples)
    if not values:
        return None
    return min(values), max(values)


def y_axis_bounds(samples: Iterable[int]) -> AxisRange:
    """
    Padded y range and tick labels for the given samples.

    Both ends get PAD_PERCENT of their own value (integer division), the
    bottom never goes below zero. Labels are bottom, two increments of
    (top - bottom) // LABEL_STEPS above it, and top.
    """
    extent = sample_extent(samples)
    if extent is None:
        return NO_DATA

    low, high = extent
    top = high + (high * PAD_PERCENT) // 100
    bottom = max(0, low - (low * PAD_PERCENT) // 100)
    increment = (top - bottom) // LABEL_STEPS

    labels = tuple(str(v) for v in (bottom, bottom + increment, bottom + 2 * increment, top))
    return AxisRange(bounds=(float(bottom), float(top)), labels=labels)
