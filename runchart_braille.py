"""Braille dot canvas: 2x4 dots per terminal cell."""

import numpy as np

BRAILLE_BASE = 0x2800
# Dot bit for (row % 4, col % 2) inside one cell
BRAILLE_BITS = np.array(
    [
        [0x01, 0x08],
        [0x02, 0x10],
        [0x04, 0x20],
        [0x40, 0x80],
    ],
    dtype=np.uint16,
)


class BrailleCanvas:
    def __init__(self, width, height):
        """width/height are in terminal cells"""
        self.width = max(0, width)
        self.height = max(0, height)
        self.dots = np.zeros((self.height * 4, self.width * 2), dtype=bool)

    @property
    def dot_width(self):
        return self.dots.shape[1]

    @property
    def dot_height(self):
        return self.dots.shape[0]

    def set(self, x, y):
        if 0 <= y < self.dot_height and 0 <= x < self.dot_width:
            self.dots[y, x] = True

    def line(self, x0, y0, x1, y1):
        """Light every dot on the segment, clipping to the canvas"""
        steps = int(max(abs(x1 - x0), abs(y1 - y0))) + 1
        xs = np.rint(np.linspace(x0, x1, steps)).astype(int)
        ys = np.rint(np.linspace(y0, y1, steps)).astype(int)
        inside = (xs >= 0) & (xs < self.dot_width) & (ys >= 0) & (ys < self.dot_height)
        self.dots[ys[inside], xs[inside]] = True

    def polyline(self, xs, ys):
        if len(xs) == 1:
            self.set(int(round(xs[0])), int(round(ys[0])))
        for i in range(1, len(xs)):
            self.line(xs[i - 1], ys[i - 1], xs[i], ys[i])

    def rows(self):
        """One string per cell row, blank cells as spaces"""
        cells = self.dots.reshape(self.height, 4, self.width, 2)
        masks = (cells * BRAILLE_BITS[None, :, None, :]).sum(axis=(1, 3))
        for row in masks:
            yield "".join(chr(BRAILLE_BASE + int(m)) if m else " " for m in row)


def scale_points(points, x_bounds, y_bounds, dot_width, dot_height):
    """
    Map data (x, y) pairs onto dot coordinates.

    x grows to the right, y grows upward in data space but downward on
    screen. A flat y range puts every point on the middle dot row.
    """
    if not points or dot_width < 1 or dot_height < 1:
        return np.empty(0), np.empty(0)

    data = np.array(points, dtype=float)
    x0, x1 = x_bounds
    y0, y1 = y_bounds

    xs = (data[:, 0] - x0) / (x1 - x0) * (dot_width - 1)
    if y1 > y0:
        ys = (1.0 - (data[:, 1] - y0) / (y1 - y0)) * (dot_height - 1)
    else:
        ys = np.full(len(data), (dot_height - 1) / 2.0)
    return xs, ys
