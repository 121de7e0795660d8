"""Classic Wave - Traditional oscilloscope phosphor dots"""

import curses

STYLE_NAME = "Classic Wave"
STYLE_DESCRIPTION = "Traditional oscilloscope with one phosphor dot per cell"

MARKER = "dot"


def render_point(kind, colors):
    """
    Render a point with a classic CRT phosphor look.

    One character per cell; coarser than braille but readable on
    terminals without braille glyphs.
    """
    if kind == "cursor":
        return ("█", colors[3] | curses.A_BOLD | curses.A_STANDOUT)

    return ("•", colors[1])
