#!/usr/bin/env python3
# runchart.py - live terminal line chart for numbers from stdin or a command
import argparse
import asyncio
import curses
import enum
import os
import signal
import sys

from runchart_braille import BrailleCanvas, scale_points
from runchart_config import (
    COLOR_AXIS,
    COLOR_LINE,
    COLOR_TITLE,
    DEBUG,
    DEFAULT_TITLE,
    WINDOW_SIZE,
    X_LABELS,
)
from runchart_source import make_source, report, samples
from runchart_window import SampleWindow, y_axis_bounds

__version__ = "0.1.0"

INTERRUPT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ChartView:
    """Curses drawing surface for one scrolling line chart"""

    def __init__(self, stdscr, title):
        self.stdscr = stdscr
        self.title = title
        self.frames = 0

        try:
            curses.curs_set(0)
        except curses.error:
            pass

        if curses.has_colors():
            try:
                curses.use_default_colors()
                background = -1
            except curses.error:
                background = curses.COLOR_BLACK
            curses.init_pair(COLOR_LINE, curses.COLOR_CYAN, background)
            curses.init_pair(COLOR_AXIS, curses.COLOR_WHITE, background)
            curses.init_pair(COLOR_TITLE, curses.COLOR_WHITE, background)

        self.recalculate_layout()
        self.clear_frame()

    def clear_frame(self):
        """Text copy of what is on screen, printed again after exit"""
        self._frame = [[" "] * self.width for _ in range(self.height)]

    def _record(self, y, x, text):
        row = self._frame[y]
        for i, char in enumerate(text):
            if x + i < len(row):
                row[x + i] = char

    def frame_lines(self):
        return ["".join(row).rstrip() for row in self._frame]

    def recalculate_layout(self):
        """Pick up terminal resizes and refresh dimensions"""
        try:
            size = os.get_terminal_size(sys.__stdout__.fileno())
            if curses.is_term_resized(size.lines, size.columns):
                curses.resizeterm(size.lines, size.columns)
        except (OSError, ValueError, AttributeError, curses.error):
            pass
        h, w = self.stdscr.getmaxyx()
        self.height = h
        self.width = w

    def safe_addstr(self, y, x, text, attr=0):
        try:
            if 0 <= y < self.height and 0 <= x < self.width:
                text = str(text)[: self.width - x - 1]
                self._record(y, x, text)
                self.stdscr.addstr(y, x, text, attr)
        except curses.error:
            pass

    def draw_border(self):
        """Frame with the title centered on the top edge"""
        try:
            self.stdscr.attron(curses.color_pair(COLOR_AXIS))
            self.stdscr.border()
            self.stdscr.attroff(curses.color_pair(COLOR_AXIS))
        except curses.error:
            pass

        h, w = self.height, self.width
        if h >= 2 and w >= 2:
            self._record(0, 0, "┌" + "─" * (w - 2) + "┐")
            for y in range(1, h - 1):
                self._record(y, 0, "│")
                self._record(y, w - 1, "│")
            self._record(h - 1, 0, "└" + "─" * (w - 2) + "┘")

        title = f" {self.title} "[: max(0, self.width - 4)]
        x = max(1, (self.width - len(title)) // 2)
        self.safe_addstr(0, x, title, curses.color_pair(COLOR_TITLE) | curses.A_BOLD)

    def plot_area(self, label_width):
        """(top, left, height, width) of the braille area in cells"""
        top = 1
        left = 1 + label_width + 1
        height = self.height - 3 - top
        width = self.width - 1 - left
        return top, left, height, width

    def draw_axes(self, axis, top, left, height, width):
        attr = curses.color_pair(COLOR_AXIS)
        axis_x = left - 1
        axis_y = top + height
        label_width = axis_x - 1

        # Y axis: line plus four labels spread evenly from bottom to top
        for y in range(top, axis_y):
            self.safe_addstr(y, axis_x, "│", attr)
        last = len(axis.labels) - 1
        for i, label in enumerate(axis.labels):
            y = axis_y - 1 - round(i * (height - 1) / last)
            self.safe_addstr(y, 1, label.rjust(label_width), attr)

        # X axis: fixed [0, WINDOW_SIZE], newest on the left
        self.safe_addstr(axis_y, axis_x, "└" + "─" * width, attr)
        now_label, earlier_label = X_LABELS
        self.safe_addstr(axis_y + 1, left, now_label, attr)
        self.safe_addstr(axis_y + 1, left + width - len(earlier_label), earlier_label, attr)

    def draw_line(self, window, axis, top, left, height, width):
        canvas = BrailleCanvas(width, height)
        xs, ys = scale_points(
            window.points(),
            (0, window.capacity),
            axis.bounds,
            canvas.dot_width,
            canvas.dot_height,
        )
        canvas.polyline(xs, ys)

        attr = curses.color_pair(COLOR_LINE)
        for r, row in enumerate(canvas.rows()):
            self.safe_addstr(top + r, left, row, attr)

    def draw(self, window):
        """Redraw the whole chart for the current window"""
        self.recalculate_layout()
        axis = y_axis_bounds(window)

        self.stdscr.erase()
        self.clear_frame()
        self.draw_border()

        top, left, height, width = self.plot_area(max(len(label) for label in axis.labels))
        if axis.has_data and height >= 1 and width >= 1:
            self.draw_axes(axis, top, left, height, width)
            self.draw_line(window, axis, top, left, height, width)

        self.stdscr.refresh()
        self.frames += 1
        return axis

    def finish(self):
        """Leave the cursor in the bottom-right corner"""
        self.recalculate_layout()
        try:
            self.stdscr.move(self.height - 1, self.width - 1)
            self.stdscr.refresh()
        except curses.error:
            pass


class CancellationSignal:
    """One-shot flag shared by the interrupt watcher and the render loop"""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()

    async def wait(self):
        await self._event.wait()


async def watch_interrupt(cancel, signals=INTERRUPT_SIGNALS):
    """Wait for the first interrupt, flip the signal, and return"""
    loop = asyncio.get_running_loop()
    received = loop.create_future()

    def on_signal(signum):
        if not received.done():
            received.set_result(signum)

    for signum in signals:
        loop.add_signal_handler(signum, on_signal, signum)

    try:
        signum = await received
        if DEBUG:
            report(f"Received {signal.Signals(signum).name}, stopping")
        cancel.cancel()
    finally:
        for signum in signals:
            loop.remove_signal_handler(signum)


class LoopState(enum.Enum):
    RUNNING = "running"
    CANCELLED = "cancelled"
    EXHAUSTED = "exhausted"


async def render_loop(stream, window, view, cancel):
    """
    Push each sample into the window and redraw, until cancelled or the
    stream ends.

    Every iteration races the cancellation signal against the next sample.
    Cancellation wins ties, so nothing is pushed once it has been set.
    """
    state = LoopState.RUNNING
    iterator = stream.__aiter__()
    cancel_wait = asyncio.ensure_future(cancel.wait())

    try:
        while state is LoopState.RUNNING:
            if cancel.cancelled:
                state = LoopState.CANCELLED
                break

            next_sample = asyncio.ensure_future(iterator.__anext__())
            await asyncio.wait(
                {cancel_wait, next_sample}, return_when=asyncio.FIRST_COMPLETED
            )

            if cancel.cancelled:
                next_sample.cancel()
                await asyncio.gather(next_sample, return_exceptions=True)
                state = LoopState.CANCELLED
                break

            try:
                sample = next_sample.result()
            except StopAsyncIteration:
                state = LoopState.EXHAUSTED
                break

            window.push(sample)
            view.draw(window)
    finally:
        cancel_wait.cancel()
        await asyncio.gather(cancel_wait, return_exceptions=True)
        view.finish()

    return state


async def run_chart(view, source, window=None, cancel=None):
    """Wire the interrupt watcher, the sample stream and the render loop"""
    window = window if window is not None else SampleWindow(WINDOW_SIZE)
    cancel = cancel if cancel is not None else CancellationSignal()

    watcher = asyncio.create_task(watch_interrupt(cancel))
    try:
        return await render_loop(samples(source), window, view, cancel)
    finally:
        watcher.cancel()
        await asyncio.gather(watcher, return_exceptions=True)


def open_terminal():
    """Initialize curses; raises curses.error when there is no usable terminal"""
    stdscr = curses.initscr()
    # stdin is usually a pipe here, so terminal input modes may not apply
    for setup in (curses.noecho, curses.cbreak, curses.start_color):
        try:
            setup()
        except curses.error:
            pass
    return stdscr


def close_terminal():
    for teardown in (curses.nocbreak, curses.echo):
        try:
            teardown()
        except curses.error:
            pass
    curses.endwin()


def build_parser():
    parser = argparse.ArgumentParser(
        prog="runchart",
        description="Live terminal line chart of integers read from stdin or a command",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vmstat 1 | awk '{print $15; fflush()}' | runchart
  runchart 'ls /tmp | wc -l'            # re-run every 0.5s
  runchart cat /sys/class/thermal/thermal_zone0/temp

Everything after the first word that is not -h/--help/--version is the
command, including its own flags. Use -- to run a command whose first
word is one of those options.

Press Ctrl+C to stop.
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "command",
        nargs="*",
        help="Shell command to run repeatedly (reads stdin when omitted)",
    )
    return parser


OWN_OPTIONS = ("-h", "--help", "--version")


def split_argv(argv):
    """Split argv into runchart's own options and the command words"""
    for i, arg in enumerate(argv):
        if arg == "--":
            return list(argv[:i]), list(argv[i + 1:])
        if arg not in OWN_OPTIONS:
            return list(argv[:i]), list(argv[i:])
    return list(argv), []


def print_last_frame(view):
    """Put the final chart back on the normal screen once curses is gone"""
    if view is None or not view.frames:
        return
    sys.stdout.write("\n".join(view.frame_lines()) + "\n")
    sys.stdout.flush()


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    options, command = split_argv(argv)
    build_parser().parse_args(options)

    title = " ".join(command) if command else DEFAULT_TITLE
    source = make_source(command)

    try:
        stdscr = open_terminal()
    except curses.error as e:
        report(f"Terminal setup failed: {e}")
        return 1

    state = None
    view = None
    try:
        view = ChartView(stdscr, title)
        state = asyncio.run(run_chart(view, source))
    except KeyboardInterrupt:
        pass
    finally:
        close_terminal()

    print_last_frame(view)
    if DEBUG and state is not None:
        report(f"Stopped ({state.value}) after {view.frames} frames")
    return 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
