import sys
from pathlib import Path

import pytest

# Allow running the suite from a plain checkout without installing
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from runchart_window import y_axis_bounds  # noqa: E402


class RecordingView:
    """Stands in for the curses chart and remembers every frame"""

    def __init__(self):
        self.frames = []
        self.axes = []
        self.finished = False

    def draw(self, window):
        self.frames.append(window.values())
        axis = y_axis_bounds(window)
        self.axes.append(axis)
        return axis

    def finish(self):
        self.finished = True


@pytest.fixture
def view():
    return RecordingView()
