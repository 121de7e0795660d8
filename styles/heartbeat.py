"""Heartbeat - ECG/Medical monitor style"""

import curses

STYLE_NAME = "Heartbeat"
STYLE_DESCRIPTION = "ECG medical monitor with a fine braille trace"

# Sub-cell braille dots keep the 1000-point trace smooth
MARKER = "braille"


def render_point(kind, colors):
    """
    Pick the glyph and attribute for a plotted point.

    Braille glyphs are computed by the canvas, so only the attribute
    matters here. The cursor is the bright white sweep dot of a
    bedside monitor.
    """
    if kind == "cursor":
        return ("●", colors[3] | curses.A_BOLD)

    # Medical monitor green
    return (None, colors[1] | curses.A_BOLD)
