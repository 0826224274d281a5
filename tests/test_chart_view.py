import curses

import pytest

from runchart import ChartView
from runchart_braille import BRAILLE_BASE
from runchart_window import SampleWindow


class FakeScreen:
    """Records what the chart writes instead of touching a terminal"""

    def __init__(self, height=12, width=40):
        self.height = height
        self.width = width
        self.writes = []
        self.cursor = None
        self.refreshes = 0

    def getmaxyx(self):
        return self.height, self.width

    def addstr(self, y, x, text, attr=0):
        self.writes.append((y, x, text))

    def move(self, y, x):
        self.cursor = (y, x)

    def erase(self):
        self.writes = []

    def refresh(self):
        self.refreshes += 1

    def border(self):
        pass

    def attron(self, attr):
        pass

    def attroff(self, attr):
        pass

    def text_at(self, y, x):
        return [text for (wy, wx, text) in self.writes if (wy, wx) == (y, x)]


@pytest.fixture
def screen(monkeypatch):
    monkeypatch.setattr(curses, "color_pair", lambda n: n << 8)
    monkeypatch.setattr(curses, "has_colors", lambda: False)
    monkeypatch.setattr(curses, "curs_set", lambda visibility: None)
    monkeypatch.setattr(curses, "is_term_resized", lambda lines, cols: False)
    return FakeScreen()


def chart_for(screen, *values, title="load"):
    view = ChartView(screen, title)
    window = SampleWindow()
    for value in values:
        window.push(value)
    axis = view.draw(window)
    return view, axis


def test_title_is_centered_on_top_border(screen):
    chart_for(screen, 10, 20, 30, title="load")
    # " load " is 6 wide on a 40 column screen
    assert screen.text_at(0, 17) == [" load "]


def test_y_labels_run_from_axis_bottom_to_top(screen):
    view, axis = chart_for(screen, 10, 20, 30)
    assert axis.labels == ("9", "9", "9", "33")

    # Plot rows 1..8, x axis on row 9, labels right-aligned in 2 columns
    labels = {y: text for (y, x, text) in screen.writes if x == 1 and y < 9}
    assert labels == {8: " 9", 6: " 9", 3: " 9", 1: "33"}


def test_x_axis_labels_sit_at_both_ends(screen):
    chart_for(screen, 10, 20, 30)
    assert screen.text_at(10, 4) == ["Now"]
    assert screen.text_at(10, 32) == ["Earlier"]
    assert screen.text_at(9, 3)[0].startswith("└─")


def test_line_is_drawn_in_braille(screen):
    view, _ = chart_for(screen, 10, 20, 30)
    rows = {y: text for (y, x, text) in screen.writes if x == 4 and 1 <= y <= 8}
    assert sorted(rows) == list(range(1, 9))

    ink = {
        (y, col)
        for y, text in rows.items()
        for col, char in enumerate(text)
        if char != " "
    }
    assert ink
    assert all(
        BRAILLE_BASE < ord(rows[y][col]) <= BRAILLE_BASE + 0xFF for (y, col) in ink
    )
    # Newest sample (30) is high on the left, oldest (10) low on the right
    assert (2, 0) in ink
    assert (8, 2) in ink
    assert all(col <= 2 for (_, col) in ink)


def test_frame_lines_mirror_the_screen(screen):
    view, _ = chart_for(screen, 10, 20, 30)
    lines = view.frame_lines()

    assert len(lines) == 12
    assert lines[0].startswith("┌") and " load " in lines[0]
    assert lines[-1] == "└" + "─" * 38 + "┘"
    assert lines[1].startswith("│33│")
    assert "Now" in lines[10] and "Earlier" in lines[10]


def test_empty_window_draws_only_the_border(screen):
    view = ChartView(screen, "idle")
    axis = view.draw(SampleWindow())

    assert not axis.has_data
    assert screen.text_at(10, 4) == []
    assert [text for (_, _, text) in screen.writes] == [" idle "]
    assert view.frames == 1


def test_finish_parks_cursor_bottom_right(screen):
    view, _ = chart_for(screen, 1)
    view.finish()
    assert screen.cursor == (11, 39)


def test_tiny_terminal_skips_plot(screen):
    screen.height, screen.width = 3, 6
    view, axis = chart_for(screen, 5)
    assert axis.labels == ("5", "5", "5", "5")
    assert view.frames == 1
    assert all(y == 0 for (y, _, _) in screen.writes)
