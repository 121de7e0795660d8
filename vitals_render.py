#!/usr/bin/env python3
"""
Point-to-cell rasterization for the Vitals canvas

Maps points in data coordinates onto a grid of terminal cells. Pure
functions only; drawing to curses happens in vitals.py.

Two markers are supported:
    "dot"      one point per cell
    "braille"  2x4 sub-cells per character (U+2800 block), so a
               1000-point trace stays smooth on a small terminal
"""

import numpy as np

BRAILLE_BASE = 0x2800

# Dot bit for sub-cell [row][col], rows top to bottom
BRAILLE_DOTS = (
    (0x01, 0x08),
    (0x02, 0x10),
    (0x04, 0x20),
    (0x40, 0x80),
)

MARKER_RESOLUTION = {
    "dot": (1, 1),
    "braille": (2, 4),
}


def project(points, rows, cols, x_bounds, y_bounds, sub_cols=1, sub_rows=1):
    """Project points onto a (rows*sub_rows, cols*sub_cols) pixel grid.

    Points outside the bounds are dropped. The y axis points up, so the
    largest y lands on pixel row 0.

    Returns:
        (px, py) integer arrays of the same length
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    empty = np.empty(0, dtype=np.int64)
    if rows <= 0 or cols <= 0 or len(pts) == 0:
        return empty, empty

    left, right = x_bounds
    bottom, top = y_bounds
    if right <= left or top <= bottom:
        return empty, empty

    xs, ys = pts[:, 0], pts[:, 1]
    inside = (xs >= left) & (xs <= right) & (ys >= bottom) & (ys <= top)
    xs, ys = xs[inside], ys[inside]

    width = cols * sub_cols
    height = rows * sub_rows
    px = ((xs - left) * (width - 1) / (right - left)).astype(np.int64)
    py = ((top - ys) * (height - 1) / (top - bottom)).astype(np.int64)
    return px, py


def dot_cells(points, rows, cols, x_bounds, y_bounds):
    """Set of (row, col) cells touched by at least one point"""
    px, py = project(points, rows, cols, x_bounds, y_bounds)
    return set(zip(py.tolist(), px.tolist()))


def braille_cells(points, rows, cols, x_bounds, y_bounds):
    """Map of (row, col) -> braille character combining every point in the cell"""
    px, py = project(points, rows, cols, x_bounds, y_bounds, sub_cols=2, sub_rows=4)
    bits = {}
    for x, y in zip(px.tolist(), py.tolist()):
        cell = (y // 4, x // 2)
        bits[cell] = bits.get(cell, 0) | BRAILLE_DOTS[y % 4][x % 2]
    return {cell: chr(BRAILLE_BASE + b) for cell, b in bits.items()}


def rasterize(points, rows, cols, x_bounds, y_bounds, marker="braille", char="•"):
    """Cells to paint for ``points`` as {(row, col): character}"""
    if marker == "braille":
        return braille_cells(points, rows, cols, x_bounds, y_bounds)
    if marker == "dot":
        return {cell: char for cell in dot_cells(points, rows, cols, x_bounds, y_bounds)}
    raise ValueError(f"unknown marker {marker!r}, expected one of {sorted(MARKER_RESOLUTION)}")
